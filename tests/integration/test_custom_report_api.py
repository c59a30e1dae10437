"""
Integration tests for the custom report REST endpoints.
"""

import uuid

import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse

from fleet_reports.extensions.auth import JWTManager
from fleet_reports.extensions.reporting.models import CustomReport

pytestmark = [pytest.mark.integration, pytest.mark.django_db]

EXECUTE_URL = "/api/reports/custom/execute/"
LIST_URL = "/api/reports/custom/"

ACTIVE_ASSETS = {
    "columns": [{"field": "assetNumber", "label": "Asset"}, {"field": "status"}],
    "filters": [{"field": "status", "operator": "eq", "value": "active"}],
    "orderBy": {"field": "assetNumber"},
}


def bearer(user, organisation=None):
    token = JWTManager.generate_token(
        user, organisation_id=organisation.pk if organisation else None
    )["token"]
    return {"HTTP_AUTHORIZATION": f"Bearer {token}"}


def detail_url(report_id):
    return reverse("custom-report-detail", kwargs={"report_id": report_id})


@pytest.fixture
def saved_report(user, organisation):
    return CustomReport.objects.create(
        organisation=organisation,
        owner=user,
        name="Active assets",
        description="Daily check",
        data_source="assets",
        definition=ACTIVE_ASSETS,
    )


@pytest.fixture
def shared_report(user, organisation):
    return CustomReport.objects.create(
        organisation=organisation,
        owner=user,
        name="Fleet mileage",
        data_source="assets",
        definition={"aggregations": [{"field": "mileage", "type": "sum"}]},
        is_shared=True,
    )


class TestExecuteEndpoint:
    def test_runs_definition(self, client, auth_header, five_assets):
        response = client.post(
            EXECUTE_URL,
            {"dataSource": "assets", "definition": ACTIVE_ASSETS, "pageSize": 2},
            content_type="application/json",
            **auth_header,
        )
        body = response.json()

        assert response.status_code == 200
        assert body["data"] == [
            {"assetNumber": "A-001", "status": "active"},
            {"assetNumber": "A-002", "status": "active"},
        ]
        assert body["pagination"] == {
            "page": 1,
            "pageSize": 2,
            "total": 3,
            "totalPages": 2,
        }
        assert body["columns"][0] == {"field": "assetNumber", "label": "Asset"}

    def test_unknown_field_is_a_bad_request(self, client, auth_header):
        response = client.post(
            EXECUTE_URL,
            {"dataSource": "assets", "definition": {"columns": [{"field": "doesNotExist"}]}},
            content_type="application/json",
            **auth_header,
        )
        body = response.json()

        assert response.status_code == 400
        assert body["details"]["code"] == "UNKNOWN_FIELD"
        assert body["details"]["field"] == "columns[0].field"
        assert body["details"]["name"] == "doesNotExist"
        assert "doesNotExist" in body["error"]

    def test_unknown_data_source(self, client, auth_header):
        response = client.post(
            EXECUTE_URL,
            {"dataSource": "drivers", "definition": {"columns": [{"field": "id"}]}},
            content_type="application/json",
            **auth_header,
        )
        assert response.status_code == 400
        assert response.json()["details"]["code"] == "UNKNOWN_DATA_SOURCE"

    def test_invalid_json(self, client, auth_header):
        response = client.post(
            EXECUTE_URL, "{not json", content_type="application/json", **auth_header
        )
        assert response.status_code == 400
        assert response.json()["details"]["code"] == "INVALID_JSON"

    def test_invalid_page_size(self, client, auth_header):
        response = client.post(
            EXECUTE_URL,
            {"dataSource": "assets", "definition": ACTIVE_ASSETS, "pageSize": 0},
            content_type="application/json",
            **auth_header,
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "pageSize"

    def test_requires_authentication(self, client):
        response = client.post(
            EXECUTE_URL,
            {"dataSource": "assets", "definition": ACTIVE_ASSETS},
            content_type="application/json",
        )
        assert response.status_code == 401

    def test_requires_an_organisation(self, client, db):
        loner = get_user_model().objects.create_user(username="loner", password="x")
        response = client.post(
            EXECUTE_URL,
            {"dataSource": "assets", "definition": ACTIVE_ASSETS},
            content_type="application/json",
            **bearer(loner),
        )
        assert response.status_code == 403
        assert response.json()["details"]["code"] == "TENANT_REQUIRED"

    def test_saved_report_run_is_recorded(
        self, client, auth_header, saved_report, five_assets
    ):
        response = client.post(
            EXECUTE_URL,
            {
                "dataSource": "assets",
                "definition": ACTIVE_ASSETS,
                "reportId": str(saved_report.pk),
            },
            content_type="application/json",
            **auth_header,
        )
        saved_report.refresh_from_db()

        assert response.status_code == 200
        assert saved_report.last_run_at is not None

    def test_private_report_of_another_user_is_not_found(
        self, client, colleague, organisation, saved_report
    ):
        response = client.post(
            EXECUTE_URL,
            {
                "dataSource": "assets",
                "definition": ACTIVE_ASSETS,
                "reportId": str(saved_report.pk),
            },
            content_type="application/json",
            **bearer(colleague, organisation),
        )
        saved_report.refresh_from_db()

        assert response.status_code == 404
        assert saved_report.last_run_at is None

    def test_report_of_another_data_source_is_rejected(
        self, client, auth_header, saved_report
    ):
        response = client.post(
            EXECUTE_URL,
            {
                "dataSource": "work_orders",
                "definition": {"columns": [{"field": "title"}]},
                "reportId": str(saved_report.pk),
            },
            content_type="application/json",
            **auth_header,
        )
        saved_report.refresh_from_db()

        assert response.status_code == 400
        assert response.json()["details"]["code"] == "REPORT_SOURCE_MISMATCH"
        assert response.json()["details"]["reportDataSource"] == "assets"
        assert saved_report.last_run_at is None

    def test_report_id_must_be_a_uuid(self, client, auth_header):
        response = client.post(
            EXECUTE_URL,
            {"dataSource": "assets", "definition": ACTIVE_ASSETS, "reportId": "nope"},
            content_type="application/json",
            **auth_header,
        )
        assert response.status_code == 400
        assert response.json()["details"]["code"] == "INVALID_ID"

    def test_other_tenant_rows_are_invisible(
        self, client, outsider, other_organisation, five_assets
    ):
        response = client.post(
            EXECUTE_URL,
            {
                "dataSource": "assets",
                "definition": {"aggregations": [{"field": "id", "type": "count", "alias": "n"}]},
            },
            content_type="application/json",
            **bearer(outsider, other_organisation),
        )
        assert response.json()["data"] == [{"n": 0}]


class TestSavedReports:
    def test_create(self, client, auth_header, user, organisation):
        response = client.post(
            LIST_URL,
            {
                "name": "<b>Inactive</b> assets",
                "dataSource": "assets",
                "definition": {"columns": [{"field": "assetNumber"}]},
                "isShared": True,
            },
            content_type="application/json",
            **auth_header,
        )
        body = response.json()
        report = CustomReport.objects.get(pk=body["id"])

        assert response.status_code == 201
        assert body["name"] == "Inactive assets"
        assert body["isShared"] is True
        assert body["ownerId"] == user.pk
        assert body["lastRunAt"] is None
        assert report.organisation_id == organisation.pk
        assert report.definition == {
            "columns": [{"field": "assetNumber", "visible": True, "order": 0}],
            "filters": [],
        }

    def test_create_rejects_invalid_definition(self, client, auth_header):
        response = client.post(
            LIST_URL,
            {
                "name": "Broken",
                "dataSource": "assets",
                "definition": {"columns": [{"field": "doesNotExist"}]},
            },
            content_type="application/json",
            **auth_header,
        )
        assert response.status_code == 400
        assert CustomReport.objects.count() == 0

    @pytest.mark.parametrize(
        "definition, field",
        [
            (
                {
                    "columns": [{"field": "assetNumber"}],
                    "filters": [{"field": "mileage", "operator": "gt", "value": "many"}],
                },
                "filters[0].value",
            ),
            (
                {
                    "columns": [{"field": "assetNumber"}],
                    "dateRange": {"field": "createdAt", "startDate": "not-a-date"},
                },
                "dateRange.startDate",
            ),
        ],
    )
    def test_create_rejects_invalid_filter_values(
        self, client, auth_header, definition, field
    ):
        response = client.post(
            LIST_URL,
            {"name": "Broken", "dataSource": "assets", "definition": definition},
            content_type="application/json",
            **auth_header,
        )

        assert response.status_code == 400
        assert response.json()["details"]["code"] == "INVALID_VALUE"
        assert response.json()["details"]["field"] == field
        assert CustomReport.objects.count() == 0

    def test_create_requires_a_name(self, client, auth_header):
        response = client.post(
            LIST_URL,
            {"name": "   ", "dataSource": "assets", "definition": ACTIVE_ASSETS},
            content_type="application/json",
            **auth_header,
        )
        assert response.status_code == 400
        assert response.json()["details"]["code"] == "INVALID_NAME"

    def test_list_shows_own_and_shared_reports(
        self, client, colleague, organisation, saved_report, shared_report
    ):
        mine = client.get(LIST_URL, **bearer(saved_report.owner, organisation)).json()
        theirs = client.get(LIST_URL, **bearer(colleague, organisation)).json()

        assert mine["total"] == 2
        assert [item["name"] for item in theirs["data"]] == ["Fleet mileage"]

    def test_list_filters(self, client, auth_header, saved_report, shared_report):
        shared = client.get(LIST_URL, {"isShared": "true"}, **auth_header).json()
        searched = client.get(LIST_URL, {"search": "daily"}, **auth_header).json()
        by_source = client.get(
            LIST_URL, {"dataSource": "work_orders"}, **auth_header
        ).json()

        assert [item["id"] for item in shared["data"]] == [str(shared_report.pk)]
        assert [item["id"] for item in searched["data"]] == [str(saved_report.pk)]
        assert by_source["total"] == 0

    def test_list_rejects_unknown_source_filter(self, client, auth_header):
        response = client.get(LIST_URL, {"dataSource": "drivers"}, **auth_header)
        assert response.status_code == 400
        assert response.json()["details"]["code"] == "INVALID_FILTERS"

    def test_list_is_scoped_to_the_organisation(
        self, client, outsider, other_organisation, shared_report
    ):
        body = client.get(LIST_URL, **bearer(outsider, other_organisation)).json()
        assert body["total"] == 0

    def test_retrieve(self, client, auth_header, saved_report):
        response = client.get(detail_url(saved_report.pk), **auth_header)

        assert response.status_code == 200
        assert response.json()["definition"] == ACTIVE_ASSETS

    def test_retrieve_unknown_report(self, client, auth_header):
        response = client.get(detail_url(uuid.uuid4()), **auth_header)
        assert response.status_code == 404
        assert response.json()["details"]["code"] == "NOT_FOUND"

    def test_retrieve_from_another_organisation(
        self, client, outsider, other_organisation, shared_report
    ):
        response = client.get(
            detail_url(shared_report.pk), **bearer(outsider, other_organisation)
        )
        assert response.status_code == 404

    def test_owner_updates(self, client, auth_header, saved_report):
        response = client.put(
            detail_url(saved_report.pk),
            {"name": "Renamed", "isShared": True},
            content_type="application/json",
            **auth_header,
        )
        saved_report.refresh_from_db()

        assert response.status_code == 200
        assert saved_report.name == "Renamed"
        assert saved_report.is_shared is True
        assert saved_report.description == "Daily check"

    def test_update_validates_definition(self, client, auth_header, saved_report):
        response = client.put(
            detail_url(saved_report.pk),
            {"definition": {"columns": [{"field": "mileage"}], "groupBy": ["ghost"]}},
            content_type="application/json",
            **auth_header,
        )
        saved_report.refresh_from_db()

        assert response.status_code == 400
        assert saved_report.definition == ACTIVE_ASSETS

    def test_colleague_cannot_update_shared_report(
        self, client, colleague, organisation, shared_report
    ):
        response = client.put(
            detail_url(shared_report.pk),
            {"name": "Hijacked"},
            content_type="application/json",
            **bearer(colleague, organisation),
        )
        shared_report.refresh_from_db()

        assert response.status_code == 404
        assert shared_report.name == "Fleet mileage"

    def test_owner_archives(self, client, auth_header, saved_report):
        response = client.delete(detail_url(saved_report.pk), **auth_header)
        listing = client.get(LIST_URL, **auth_header).json()
        saved_report.refresh_from_db()

        assert response.status_code == 200
        assert response.json()["isArchived"] is True
        assert saved_report.is_archived is True
        assert listing["total"] == 0


def test_data_sources_endpoint(client, auth_header):
    response = client.get(reverse("report-data-sources"), **auth_header)
    sources = {item["name"]: item for item in response.json()["data"]}

    assert response.status_code == 200
    assert set(sources) == {
        "assets",
        "work_orders",
        "maintenance_schedules",
        "fuel_transactions",
        "inspections",
    }
    assert {"field": "totalCost", "type": "number"} in sources["work_orders"]["columns"]
