"""
REST views for custom reports.

All views are JWT protected and scoped to the caller's organisation.
Errors raised by the report engine are mapped to JSON responses using the
status code carried by the exception class.
"""

import json
import logging
from typing import Any, Optional

from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from ..auth.decorators import jwt_required
from ..multitenancy.resolver import require_tenant_id
from . import services
from .filters import CustomReportFilter
from .types import ReportingError, ReportValidationError

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
@method_decorator(jwt_required, name="dispatch")
class ReportAPIView(View):
    """Base class for the report endpoints."""

    def dispatch(self, request: HttpRequest, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except ReportingError as exc:
            if exc.status_code >= 500:
                logger.error("Report request failed: %s", exc.message)
            else:
                logger.info(
                    "Report request rejected (%s): %s", exc.code, exc.message
                )
            return self.error_response(exc)

    def error_response(self, exc: ReportingError) -> JsonResponse:
        details = dict(exc.details)
        details.setdefault("code", exc.code)
        return JsonResponse(
            {"error": exc.message, "details": details}, status=exc.status_code
        )

    def parse_json(self, request: HttpRequest) -> dict[str, Any]:
        try:
            data = json.loads(request.body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ReportValidationError(
                "Invalid JSON payload", code="INVALID_JSON"
            ) from None
        if not isinstance(data, dict):
            raise ReportValidationError(
                "Payload must be an object", code="INVALID_JSON"
            )
        return data

    def tenant(self, request: HttpRequest):
        return require_tenant_id(request)


class CustomReportExecuteView(ReportAPIView):
    """POST /api/reports/custom/execute/"""

    def post(self, request: HttpRequest):
        data = self.parse_json(request)
        organisation_id = self.tenant(request)
        result = services.execute_report(
            user=request.user,
            organisation_id=organisation_id,
            data_source=data.get("dataSource"),
            definition=data.get("definition"),
            page=data.get("page", 1),
            page_size=data.get("pageSize"),
            report_id=data.get("reportId"),
        )
        return JsonResponse(result.to_dict())


class CustomReportListView(ReportAPIView):
    """GET lists visible reports; POST saves a new one."""

    def get(self, request: HttpRequest):
        organisation_id = self.tenant(request)
        queryset = services.visible_reports(
            user=request.user, organisation_id=organisation_id
        )
        report_filter = CustomReportFilter(request.GET, queryset=queryset)
        if not report_filter.is_valid():
            raise ReportValidationError(
                "Invalid list filters",
                code="INVALID_FILTERS",
                details={"errors": report_filter.errors.get_json_data()},
            )
        reports = [services.serialize_report(report) for report in report_filter.qs]
        return JsonResponse({"data": reports, "total": len(reports)})

    def post(self, request: HttpRequest):
        data = self.parse_json(request)
        organisation_id = self.tenant(request)
        report = services.create_report(
            user=request.user, organisation_id=organisation_id, payload=data
        )
        return JsonResponse(services.serialize_report(report), status=201)


class CustomReportDetailView(ReportAPIView):
    """Retrieve, update (owner only) or archive (owner only) a saved report."""

    def get(self, request: HttpRequest, report_id: Optional[str] = None):
        report = services.get_report(
            user=request.user,
            organisation_id=self.tenant(request),
            report_id=report_id,
        )
        return JsonResponse(services.serialize_report(report))

    def put(self, request: HttpRequest, report_id: Optional[str] = None):
        data = self.parse_json(request)
        report = services.update_report(
            user=request.user,
            organisation_id=self.tenant(request),
            report_id=report_id,
            payload=data,
        )
        return JsonResponse(services.serialize_report(report))

    def delete(self, request: HttpRequest, report_id: Optional[str] = None):
        report = services.archive_report(
            user=request.user,
            organisation_id=self.tenant(request),
            report_id=report_id,
        )
        return JsonResponse(services.serialize_report(report))


class DataSourceListView(ReportAPIView):
    """GET /api/reports/data-sources/"""

    def get(self, request: HttpRequest):
        return JsonResponse({"data": services.describe_data_sources()})


__all__ = [
    "ReportAPIView",
    "CustomReportExecuteView",
    "CustomReportListView",
    "CustomReportDetailView",
    "DataSourceListView",
]
