"""
Structural parsing and serialization of report definitions.

``definition_from_dict`` turns the camelCase JSON document stored on a saved
report (or posted to the execute endpoint) into a ``ReportDefinition``;
``definition_to_dict`` writes it back. Only the shape is checked here; field
existence and type compatibility are the validator's job.
"""

from __future__ import annotations

from typing import Any, Optional

from .types import (
    Aggregation,
    AggregationType,
    DateRange,
    FilterOperator,
    OrderBy,
    ReportColumn,
    ReportDefinition,
    ReportFilter,
    ReportValidationError,
    SortDirection,
    MAX_DEFINITION_LIMIT,
)
from ...config_proxy import get_setting


def _require_mapping(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ReportValidationError(
            f"'{path}' must be an object.", field=path, code="INVALID_SHAPE"
        )
    return value


def _optional_list(value: Any, path: str) -> Optional[list]:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ReportValidationError(
            f"'{path}' must be an array.", field=path, code="INVALID_SHAPE"
        )
    return value


def _require_field_name(item: dict[str, Any], path: str) -> str:
    value = item.get("field")
    if not isinstance(value, str) or not value.strip():
        raise ReportValidationError(
            f"'{path}.field' must be a non-empty string.",
            field=f"{path}.field",
            code="INVALID_SHAPE",
        )
    return value.strip()


def _optional_str(value: Any, path: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ReportValidationError(
            f"'{path}' must be a string.", field=path, code="INVALID_SHAPE"
        )
    return value


def _parse_enum(enum_cls, value: Any, path: str, code: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ReportValidationError(
            f"Unsupported value '{value}' for '{path}' (expected one of: {allowed}).",
            field=path,
            code=code,
            details={"value": value},
        ) from None


def _parse_column(raw: Any, index: int) -> ReportColumn:
    path = f"columns[{index}]"
    item = _require_mapping(raw, path)
    order = item.get("order", index)
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        raise ReportValidationError(
            f"'{path}.order' must be a number.",
            field=f"{path}.order",
            code="INVALID_SHAPE",
        )
    visible = item.get("visible", True)
    if not isinstance(visible, bool):
        raise ReportValidationError(
            f"'{path}.visible' must be a boolean.",
            field=f"{path}.visible",
            code="INVALID_SHAPE",
        )
    return ReportColumn(
        field=_require_field_name(item, path),
        order=order,
        label=_optional_str(item.get("label"), f"{path}.label"),
        visible=visible,
    )


def _parse_filter(raw: Any, index: int) -> ReportFilter:
    path = f"filters[{index}]"
    item = _require_mapping(raw, path)
    return ReportFilter(
        field=_require_field_name(item, path),
        operator=_parse_enum(
            FilterOperator, item.get("operator"), f"{path}.operator", "UNKNOWN_OPERATOR"
        ),
        value=item.get("value"),
        has_value="value" in item,
    )


def _parse_aggregation(raw: Any, index: int) -> Aggregation:
    path = f"aggregations[{index}]"
    item = _require_mapping(raw, path)
    alias = _optional_str(item.get("alias"), f"{path}.alias")
    return Aggregation(
        field=_require_field_name(item, path),
        type=_parse_enum(
            AggregationType, item.get("type"), f"{path}.type", "UNKNOWN_AGGREGATION"
        ),
        alias=alias.strip() if alias and alias.strip() else None,
    )


def _parse_limit(value: Any) -> Optional[int]:
    if value is None:
        return None
    maximum = int(
        get_setting("reporting_settings.max_definition_limit", MAX_DEFINITION_LIMIT)
    )
    if isinstance(value, bool) or not isinstance(value, int) or not (
        1 <= value <= maximum
    ):
        raise ReportValidationError(
            f"'limit' must be an integer between 1 and {maximum}.",
            field="limit",
            code="INVALID_LIMIT",
            details={"value": value},
        )
    return value


def definition_from_dict(raw: Any) -> ReportDefinition:
    """Parse a JSON-shaped report definition."""

    data = _require_mapping(raw, "definition")

    columns = [
        _parse_column(item, index)
        for index, item in enumerate(_optional_list(data.get("columns"), "columns") or [])
    ]
    filters = [
        _parse_filter(item, index)
        for index, item in enumerate(_optional_list(data.get("filters"), "filters") or [])
    ]

    date_range = None
    if data.get("dateRange") is not None:
        raw_range = _require_mapping(data["dateRange"], "dateRange")
        date_range = DateRange(
            field=_require_field_name(raw_range, "dateRange"),
            start_date=_optional_str(raw_range.get("startDate"), "dateRange.startDate"),
            end_date=_optional_str(raw_range.get("endDate"), "dateRange.endDate"),
        )

    group_by = _optional_list(data.get("groupBy"), "groupBy")
    if group_by is not None:
        for index, name in enumerate(group_by):
            if not isinstance(name, str) or not name.strip():
                raise ReportValidationError(
                    f"'groupBy[{index}]' must be a non-empty string.",
                    field=f"groupBy[{index}]",
                    code="INVALID_SHAPE",
                )
        group_by = [name.strip() for name in group_by]

    aggregations = _optional_list(data.get("aggregations"), "aggregations")
    if aggregations is not None:
        aggregations = [
            _parse_aggregation(item, index) for index, item in enumerate(aggregations)
        ]

    order_by = None
    if data.get("orderBy") is not None:
        raw_order = _require_mapping(data["orderBy"], "orderBy")
        order_by = OrderBy(
            field=_require_field_name(raw_order, "orderBy"),
            direction=_parse_enum(
                SortDirection,
                raw_order.get("direction", "asc"),
                "orderBy.direction",
                "INVALID_DIRECTION",
            ),
        )

    return ReportDefinition(
        columns=columns,
        filters=filters,
        date_range=date_range,
        group_by=group_by,
        aggregations=aggregations,
        order_by=order_by,
        limit=_parse_limit(data.get("limit")),
    )


def definition_to_dict(definition: ReportDefinition) -> dict[str, Any]:
    """Serialize a definition back to its stored JSON shape."""

    payload: dict[str, Any] = {
        "columns": [],
        "filters": [],
    }
    for column in definition.columns:
        item: dict[str, Any] = {
            "field": column.field,
            "visible": column.visible,
            "order": column.order,
        }
        if column.label is not None:
            item["label"] = column.label
        payload["columns"].append(item)

    for report_filter in definition.filters:
        item = {"field": report_filter.field, "operator": report_filter.operator.value}
        if report_filter.has_value:
            item["value"] = report_filter.value
        payload["filters"].append(item)

    if definition.date_range is not None:
        date_range: dict[str, Any] = {"field": definition.date_range.field}
        if definition.date_range.start_date is not None:
            date_range["startDate"] = definition.date_range.start_date
        if definition.date_range.end_date is not None:
            date_range["endDate"] = definition.date_range.end_date
        payload["dateRange"] = date_range

    if definition.group_by is not None:
        payload["groupBy"] = list(definition.group_by)

    if definition.aggregations is not None:
        aggregations = []
        for aggregation in definition.aggregations:
            item = {"field": aggregation.field, "type": aggregation.type.value}
            if aggregation.alias:
                item["alias"] = aggregation.alias
            aggregations.append(item)
        payload["aggregations"] = aggregations

    if definition.order_by is not None:
        payload["orderBy"] = {
            "field": definition.order_by.field,
            "direction": definition.order_by.direction.value,
        }

    if definition.limit is not None:
        payload["limit"] = definition.limit

    return payload


__all__ = ["definition_from_dict", "definition_to_dict"]
