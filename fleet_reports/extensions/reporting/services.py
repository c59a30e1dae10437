"""
Saved report persistence and execution entry points.

Views and GraphQL resolvers go through these functions so both surfaces
share tenant scoping, ownership rules, input cleaning and audit logging.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

import bleach
from django.db import models

from ...config_proxy import get_setting
from ..multitenancy.applicator import apply_tenant_queryset
from .definition import definition_from_dict, definition_to_dict
from .engine import ReportExecutionEngine
from .models import CustomReport
from .registry import get_registry
from .types import (
    ReportDefinition,
    ReportNotFoundError,
    ReportResult,
    ReportValidationError,
)
from .validation import validate_definition

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("fleet_reports.audit")


def _audit(action: str, *, user: Any, organisation_id: Any, **details: Any) -> None:
    audit_logger.info(
        "custom_report.%s",
        action,
        extra={
            "action": f"custom_report.{action}",
            "user_id": getattr(user, "pk", None),
            "organisation_id": str(organisation_id),
            "details": details,
        },
    )


def clean_text(value: Any, *, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ReportValidationError(
            f"'{field}' must be a string.", field=field, code="INVALID_SHAPE"
        )
    return bleach.clean(value, tags=[], attributes={}, strip=True).strip()


def _clean_name(value: Any) -> str:
    name = clean_text(value, field="name")
    max_length = int(get_setting("reporting_settings.max_name_length", 200))
    if not 1 <= len(name) <= max_length:
        raise ReportValidationError(
            f"'name' must be between 1 and {max_length} characters.",
            field="name",
            code="INVALID_NAME",
        )
    return name


def _clean_flag(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ReportValidationError(
            f"'{field}' must be a boolean.", field=field, code="INVALID_SHAPE"
        )
    return value


def parse_report_id(value: Any, *, field: str = "reportId") -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError):
        raise ReportValidationError(
            f"'{field}' must be a UUID.",
            field=field,
            code="INVALID_ID",
            details={"value": value},
        ) from None


def _as_definition(raw: Any) -> ReportDefinition:
    if isinstance(raw, ReportDefinition):
        return raw
    return definition_from_dict(raw)


def visible_reports(*, user: Any, organisation_id: Any) -> models.QuerySet:
    """Reports the caller owns or that are shared within the organisation."""
    queryset = apply_tenant_queryset(CustomReport.objects.all(), organisation_id)
    return queryset.filter(is_archived=False).filter(
        models.Q(owner_id=user.pk) | models.Q(is_shared=True)
    )


def get_report(*, user: Any, organisation_id: Any, report_id: Any) -> CustomReport:
    report_id = parse_report_id(report_id, field="id")
    report = (
        visible_reports(user=user, organisation_id=organisation_id)
        .filter(pk=report_id)
        .first()
    )
    if report is None:
        raise ReportNotFoundError(
            "Report not found.", details={"id": str(report_id)}
        )
    return report


def _get_owned_report(*, user: Any, organisation_id: Any, report_id: Any) -> CustomReport:
    report_id = parse_report_id(report_id, field="id")
    report = (
        apply_tenant_queryset(CustomReport.objects.all(), organisation_id)
        .filter(pk=report_id, owner_id=user.pk, is_archived=False)
        .first()
    )
    if report is None:
        raise ReportNotFoundError(
            "Report not found.", details={"id": str(report_id)}
        )
    return report


def create_report(
    *, user: Any, organisation_id: Any, payload: dict[str, Any]
) -> CustomReport:
    name = _clean_name(payload.get("name"))
    description = clean_text(payload.get("description"), field="description")
    data_source = payload.get("dataSource")
    definition = _as_definition(payload.get("definition"))
    validate_definition(data_source, definition)
    is_shared = _clean_flag(payload.get("isShared", False), field="isShared")

    report = CustomReport.objects.create(
        organisation_id=organisation_id,
        owner=user,
        name=name,
        description=description,
        data_source=data_source,
        definition=definition_to_dict(definition),
        is_shared=is_shared,
    )
    _audit(
        "create",
        user=user,
        organisation_id=organisation_id,
        report_id=str(report.pk),
        name=name,
    )
    return report


def update_report(
    *, user: Any, organisation_id: Any, report_id: Any, payload: dict[str, Any]
) -> CustomReport:
    """Apply a partial update; only the owner may change a report."""
    report = _get_owned_report(
        user=user, organisation_id=organisation_id, report_id=report_id
    )
    changed: list[str] = []

    if "name" in payload:
        report.name = _clean_name(payload.get("name"))
        changed.append("name")
    if "description" in payload:
        report.description = clean_text(payload.get("description"), field="description")
        changed.append("description")
    if "definition" in payload:
        definition = _as_definition(payload.get("definition"))
        validate_definition(report.data_source, definition)
        report.definition = definition_to_dict(definition)
        changed.append("definition")
    if "isShared" in payload:
        report.is_shared = _clean_flag(payload.get("isShared"), field="isShared")
        changed.append("is_shared")

    if changed:
        report.save(update_fields=changed + ["updated_at"])
    _audit(
        "update",
        user=user,
        organisation_id=organisation_id,
        report_id=str(report.pk),
        fields=changed,
    )
    return report


def archive_report(*, user: Any, organisation_id: Any, report_id: Any) -> CustomReport:
    report = _get_owned_report(
        user=user, organisation_id=organisation_id, report_id=report_id
    )
    report.is_archived = True
    report.save(update_fields=["is_archived", "updated_at"])
    _audit(
        "archive", user=user, organisation_id=organisation_id, report_id=str(report.pk)
    )
    return report


def execute_report(
    *,
    user: Any,
    organisation_id: Any,
    data_source: Optional[str],
    definition: Any,
    page: Any = 1,
    page_size: Any = None,
    report_id: Any = None,
) -> ReportResult:
    """
    Validate and run a report definition for the caller's organisation.

    When ``report_id`` is given the saved report must be visible to the
    caller and target the same data source; its ``last_run_at`` is bumped
    after a successful run.
    """

    engine = ReportExecutionEngine(
        data_source, _as_definition(definition), organisation_id=organisation_id
    )
    saved_id = None
    if report_id not in (None, ""):
        report = get_report(
            user=user, organisation_id=organisation_id, report_id=report_id
        )
        if report.data_source != engine.source.name:
            raise ReportValidationError(
                f"Report '{report.pk}' runs against '{report.data_source}', "
                f"not '{engine.source.name}'.",
                field="reportId",
                code="REPORT_SOURCE_MISMATCH",
                details={
                    "dataSource": engine.source.name,
                    "reportDataSource": report.data_source,
                },
            )
        saved_id = report.pk

    result = engine.execute(page, page_size, report_id=saved_id)
    _audit(
        "execute",
        user=user,
        organisation_id=organisation_id,
        data_source=engine.source.name,
        report_id=str(saved_id) if saved_id else None,
        total=result.pagination.total,
    )
    return result


def serialize_report(report: CustomReport) -> dict[str, Any]:
    return {
        "id": str(report.pk),
        "name": report.name,
        "description": report.description,
        "dataSource": report.data_source,
        "definition": report.definition,
        "isShared": report.is_shared,
        "isArchived": report.is_archived,
        "ownerId": report.owner_id,
        "lastRunAt": report.last_run_at.isoformat() if report.last_run_at else None,
        "createdAt": report.created_at.isoformat() if report.created_at else None,
        "updatedAt": report.updated_at.isoformat() if report.updated_at else None,
    }


def describe_data_sources() -> list[dict[str, Any]]:
    return get_registry().describe()


__all__ = [
    "clean_text",
    "parse_report_id",
    "visible_reports",
    "get_report",
    "create_report",
    "update_report",
    "archive_report",
    "execute_report",
    "serialize_report",
    "describe_data_sources",
]
