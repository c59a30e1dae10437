"""
Integration tests for running report definitions against the database.
"""

from unittest import mock

import pytest
from django.db import DatabaseError, connection
from django.test.utils import CaptureQueriesContext

from fleet_reports.extensions.reporting import (
    ReportExecutionError,
    ReportValidationError,
    UnknownFieldError,
    definition_from_dict,
)
from fleet_reports.extensions.reporting.engine import ReportExecutionEngine
from fleet_reports.extensions.reporting.models import CustomReport
from fleet_reports.fleet.models import FuelTransaction, WorkOrder
from tests.conftest import make_asset, utc

pytestmark = [pytest.mark.integration, pytest.mark.django_db]


def run(organisation, raw, data_source="assets", page=1, page_size=None, **kwargs):
    engine = ReportExecutionEngine(
        data_source, definition_from_dict(raw), organisation_id=organisation.pk
    )
    return engine.execute(page, page_size, **kwargs).to_dict()


NUMBERS = {
    "columns": [{"field": "assetNumber"}, {"field": "status"}],
    "orderBy": {"field": "assetNumber", "direction": "asc"},
}


def test_plain_report_is_paginated(organisation, five_assets):
    result = run(organisation, NUMBERS, page=1, page_size=2)

    assert result["pagination"] == {
        "page": 1,
        "pageSize": 2,
        "total": 5,
        "totalPages": 3,
    }
    assert result["data"] == [
        {"assetNumber": "A-001", "status": "active"},
        {"assetNumber": "A-002", "status": "active"},
    ]
    assert result["columns"] == [
        {"field": "assetNumber", "label": "assetNumber"},
        {"field": "status", "label": "status"},
    ]


def test_pages_are_disjoint_and_complete(organisation, five_assets):
    seen = []
    for page in (1, 2, 3):
        seen.extend(
            row["assetNumber"]
            for row in run(organisation, NUMBERS, page=page, page_size=2)["data"]
        )
    assert seen == ["A-001", "A-002", "A-003", "A-004", "A-005"]


def test_pages_stay_disjoint_without_unique_ordering(organisation, five_assets):
    raw = {
        "columns": [{"field": "assetNumber"}],
        "orderBy": {"field": "status"},
    }
    seen = []
    for page in (1, 2, 3):
        seen.extend(
            row["assetNumber"]
            for row in run(organisation, raw, page=page, page_size=2)["data"]
        )
    assert sorted(seen) == ["A-001", "A-002", "A-003", "A-004", "A-005"]


def test_page_past_the_end_is_empty(organisation, five_assets):
    result = run(organisation, NUMBERS, page=10, page_size=2)

    assert result["data"] == []
    assert result["pagination"]["total"] == 5
    assert result["pagination"]["totalPages"] == 3


def test_values_are_json_friendly(organisation, five_assets):
    raw = {
        "columns": [{"field": "id"}, {"field": "mileage"}, {"field": "year"}],
        "orderBy": {"field": "assetNumber"},
    }
    first = run(organisation, raw, page_size=1)["data"][0]

    assert first == {"id": str(five_assets[0].pk), "mileage": 100.5, "year": 2019}


def test_scalar_count(organisation, five_assets):
    result = run(
        organisation,
        {"columns": [], "aggregations": [{"field": "id", "type": "count", "alias": "total"}]},
    )

    assert result["data"] == [{"total": 5}]
    assert result["pagination"]["total"] == 1
    assert result["pagination"]["totalPages"] == 1
    assert result["columns"] == []


def test_scalar_numeric_aggregations_skip_nulls(organisation, five_assets):
    result = run(
        organisation,
        {
            "aggregations": [
                {"field": "mileage", "type": "sum"},
                {"field": "mileage", "type": "avg", "alias": "average"},
                {"field": "year", "type": "min"},
                {"field": "year", "type": "max"},
            ]
        },
    )
    row = result["data"][0]

    assert row["sum_mileage"] == pytest.approx(425.75)
    assert row["average"] == pytest.approx(106.4375)
    assert row["min_year"] == 2018
    assert row["max_year"] == 2021


def test_scalar_report_on_empty_table(organisation):
    result = run(
        organisation,
        {"aggregations": [{"field": "mileage", "type": "sum", "alias": "total"}]},
    )
    assert result["data"] == [{"total": None}]


def test_scalar_second_page_is_empty(organisation, five_assets):
    result = run(
        organisation,
        {"aggregations": [{"field": "id", "type": "count"}]},
        page=2,
    )
    assert result["data"] == []
    assert result["pagination"]["total"] == 1


def test_grouped_count(organisation, five_assets):
    result = run(
        organisation,
        {
            "columns": [{"field": "status", "label": "Status"}],
            "groupBy": ["status"],
            "aggregations": [{"field": "id", "type": "count", "alias": "count"}],
        },
    )

    assert result["data"] == [
        {"status": "active", "count": 3},
        {"status": "inactive", "count": 2},
    ]
    assert result["pagination"]["total"] == 2
    assert result["columns"] == [{"field": "status", "label": "Status"}]


def test_grouped_order_by_alias(organisation, five_assets):
    result = run(
        organisation,
        {
            "groupBy": ["status"],
            "aggregations": [{"field": "mileage", "type": "sum", "alias": "miles"}],
            "orderBy": {"field": "miles", "direction": "desc"},
        },
    )

    assert [row["status"] for row in result["data"]] == ["active", "inactive"]
    assert result["data"][0]["miles"] == pytest.approx(300.75)
    assert result["data"][1]["miles"] == pytest.approx(125.0)


def test_grouped_pages(organisation, five_assets):
    raw = {
        "groupBy": ["make"],
        "aggregations": [{"field": "id", "type": "count", "alias": "total"}],
    }
    result = run(organisation, raw, page=2, page_size=1)

    assert result["data"] == [{"make": "Volvo", "total": 3}]
    assert result["pagination"] == {
        "page": 2,
        "pageSize": 1,
        "total": 2,
        "totalPages": 2,
    }


def test_grouped_total_counts_distinct_key_tuples(organisation, five_assets):
    raw = {
        "groupBy": ["status", "year"],
        "aggregations": [{"field": "id", "type": "count", "alias": "n"}],
    }
    pages = [run(organisation, raw, page=page, page_size=2) for page in (1, 2, 3)]

    assert pages[0]["pagination"]["total"] == 5
    assert pages[0]["pagination"]["totalPages"] == 3
    # SQLite sorts NULL first in ascending order
    assert pages[1]["data"] == [
        {"status": "active", "year": 2021, "n": 1},
        {"status": "inactive", "year": None, "n": 1},
    ]
    assert [len(page["data"]) for page in pages] == [2, 2, 1]
    assert sum(row["n"] for page in pages for row in page["data"]) == 5


def test_group_by_without_aggregations_returns_rows(organisation, five_assets):
    result = run(
        organisation, {"columns": [{"field": "assetNumber"}], "groupBy": ["status"]}
    )
    assert result["pagination"]["total"] == 5


def test_empty_in_list_does_not_filter(organisation, five_assets):
    result = run(
        organisation,
        {
            "columns": [{"field": "assetNumber"}],
            "filters": [{"field": "status", "operator": "in", "value": []}],
        },
    )
    assert result["pagination"]["total"] == 5


@pytest.mark.parametrize(
    "report_filter, expected",
    [
        ({"field": "status", "operator": "eq", "value": "inactive"}, ["A-004", "A-005"]),
        ({"field": "status", "operator": "in", "value": ["inactive"]}, ["A-004", "A-005"]),
        ({"field": "status", "operator": "notIn", "value": ["active"]}, ["A-004", "A-005"]),
        ({"field": "mileage", "operator": "gt", "value": 100}, ["A-001", "A-002"]),
        ({"field": "mileage", "operator": "lte", "value": "75"}, ["A-004", "A-005"]),
        ({"field": "mileage", "operator": "isNull"}, ["A-003"]),
        ({"field": "year", "operator": "eq", "value": None}, ["A-005"]),
        ({"field": "year", "operator": "gte", "value": 2020}, ["A-002", "A-003"]),
        ({"field": "make", "operator": "like", "value": "SCAN"}, ["A-002", "A-004"]),
    ],
)
def test_filter_operators(organisation, five_assets, report_filter, expected):
    raw = dict(NUMBERS, filters=[report_filter])
    result = run(organisation, raw)
    assert [row["assetNumber"] for row in result["data"]] == expected


def test_neq_excludes_null_rows(organisation, five_assets):
    raw = dict(
        NUMBERS, filters=[{"field": "mileage", "operator": "neq", "value": 100.5}]
    )
    result = run(organisation, raw)
    assert [row["assetNumber"] for row in result["data"]] == ["A-002", "A-004", "A-005"]


def test_date_range_includes_the_whole_end_day(organisation):
    make_asset(organisation, "D-1", created_at=utc(2023, 12, 31, 23, 59))
    make_asset(organisation, "D-2", created_at=utc(2024, 1, 1))
    make_asset(organisation, "D-3", created_at=utc(2024, 1, 31, 18, 30))
    make_asset(organisation, "D-4", created_at=utc(2024, 2, 1))

    result = run(
        organisation,
        dict(
            NUMBERS,
            dateRange={
                "field": "createdAt",
                "startDate": "2024-01-01",
                "endDate": "2024-01-31",
            },
        ),
    )
    assert [row["assetNumber"] for row in result["data"]] == ["D-2", "D-3"]


def test_date_range_with_open_start(organisation):
    make_asset(organisation, "D-1", created_at=utc(2020, 6, 1))
    make_asset(organisation, "D-2", created_at=utc(2024, 6, 1))

    result = run(
        organisation,
        dict(NUMBERS, dateRange={"field": "createdAt", "endDate": "2021-01-01T00:00:00Z"}),
    )
    assert [row["assetNumber"] for row in result["data"]] == ["D-1"]


def test_reports_only_see_the_callers_organisation(
    organisation, other_organisation, five_assets
):
    make_asset(other_organisation, "X-001")
    make_asset(other_organisation, "X-002", status="inactive")

    mine = run(organisation, {"aggregations": [{"field": "id", "type": "count", "alias": "n"}]})
    theirs = run(
        other_organisation, {"aggregations": [{"field": "id", "type": "count", "alias": "n"}]}
    )

    assert mine["data"] == [{"n": 5}]
    assert theirs["data"] == [{"n": 2}]


def test_limit_caps_total_and_pages(organisation, five_assets):
    raw = dict(NUMBERS, limit=3)

    first = run(organisation, raw, page=1, page_size=2)
    second = run(organisation, raw, page=2, page_size=2)

    assert first["pagination"]["total"] == 3
    assert first["pagination"]["totalPages"] == 2
    assert [row["assetNumber"] for row in second["data"]] == ["A-003"]


def test_other_data_sources(organisation, five_assets):
    asset = five_assets[0]
    WorkOrder.objects.create(
        organisation=organisation,
        asset=asset,
        work_order_number="WO-1",
        title="Brake service",
        total_cost="120.00",
    )
    WorkOrder.objects.create(
        organisation=organisation,
        asset=asset,
        work_order_number="WO-2",
        title="Oil change",
        status="completed",
        total_cost="80.00",
    )
    FuelTransaction.objects.create(
        organisation=organisation, asset=asset, quantity="40.000", total_cost="60.00"
    )

    work = run(
        organisation,
        {
            "groupBy": ["assetId"],
            "aggregations": [{"field": "totalCost", "type": "sum", "alias": "spend"}],
        },
        data_source="work_orders",
    )
    fuel = run(
        organisation,
        {
            "columns": [{"field": "quantity"}, {"field": "fuelType"}],
            "filters": [{"field": "hasDiscrepancy", "operator": "eq", "value": False}],
        },
        data_source="fuel_transactions",
    )

    assert work["data"] == [{"assetId": str(asset.pk), "spend": pytest.approx(200.0)}]
    assert fuel["data"] == [{"quantity": 40.0, "fuelType": "diesel"}]


def test_invalid_definitions_never_reach_the_database(organisation):
    with CaptureQueriesContext(connection) as queries:
        with pytest.raises(UnknownFieldError):
            run(organisation, {"columns": [{"field": "doesNotExist"}]})
        with pytest.raises(ReportValidationError):
            run(
                organisation,
                {
                    "columns": [{"field": "status"}],
                    "filters": [{"field": "mileage", "operator": "gt", "value": "many"}],
                },
            )
        with pytest.raises(ReportValidationError):
            run(organisation, {"columns": [{"field": "status"}]}, page=0)

    assert len(queries) == 0


def test_saved_report_run_records_last_run(organisation, user, five_assets):
    report = CustomReport.objects.create(
        organisation=organisation,
        owner=user,
        name="Active assets",
        data_source="assets",
        definition={
            "columns": [{"field": "assetNumber"}],
            "filters": [{"field": "status", "operator": "eq", "value": "active"}],
        },
    )
    assert report.last_run_at is None

    result = report.run(page=1, page_size=10)
    report.refresh_from_db()

    assert result.pagination.total == 3
    assert report.last_run_at is not None


def test_last_run_failure_does_not_fail_the_report(organisation, user, five_assets):
    report = CustomReport.objects.create(
        organisation=organisation,
        owner=user,
        name="All assets",
        data_source="assets",
        definition={"columns": [{"field": "assetNumber"}]},
    )

    with mock.patch.object(
        CustomReport.objects, "filter", side_effect=DatabaseError("read only")
    ):
        result = report.run()

    assert result.pagination.total == 5


def test_database_failure_becomes_execution_error(organisation, five_assets):
    with mock.patch(
        "django.db.models.query.QuerySet.count",
        side_effect=DatabaseError("connection lost"),
    ), mock.patch(
        "fleet_reports.extensions.reporting.engine.execution.sentry_sdk.capture_exception"
    ) as capture:
        with pytest.raises(ReportExecutionError) as excinfo:
            run(organisation, NUMBERS)

    assert excinfo.value.status_code == 500
    assert excinfo.value.details == {"dataSource": "assets"}
    capture.assert_called_once()
