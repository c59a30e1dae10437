"""
Pre-flight validation of report definitions.

Checks run in a fixed order and stop at the first failure, so the caller
always gets the earliest problem in the definition. Nothing in this module
touches the database.
"""

from __future__ import annotations

import logging
from typing import Optional

from .coercion import coerce_date_bound, coerce_filter_value
from .registry import DataSourceRegistry, get_registry
from .types import (
    AGGREGATION_COMPATIBILITY,
    COMPARISON_OPERATORS,
    DataSource,
    FilterOperator,
    ReportDefinition,
    ReportValidationError,
    SemanticType,
    UnknownFieldError,
)

logger = logging.getLogger(__name__)


def _require_column(source: DataSource, field_name: str, path: str):
    column = source.get_column(field_name)
    if column is None:
        raise UnknownFieldError(
            f"Unknown field '{field_name}' for data source '{source.name}'.",
            field=path,
            details={"name": field_name, "dataSource": source.name},
        )
    return column


def _check_filter_operators(source: DataSource, definition: ReportDefinition) -> None:
    for index, report_filter in enumerate(definition.filters):
        column = source.get_column(report_filter.field)
        path = f"filters[{index}].operator"
        operator = report_filter.operator
        if operator in COMPARISON_OPERATORS and column.semantic_type not in (
            SemanticType.NUMBER,
            SemanticType.DATE,
        ):
            raise ReportValidationError(
                f"Operator '{operator.value}' is not supported on "
                f"{column.semantic_type.value} field '{column.field}'.",
                field=path,
                code="INCOMPATIBLE_OPERATOR",
                details={"name": column.field, "operator": operator.value},
            )
        if (
            operator == FilterOperator.LIKE
            and column.semantic_type != SemanticType.STRING
        ):
            raise ReportValidationError(
                f"Operator 'like' requires a string field, "
                f"'{column.field}' is {column.semantic_type.value}.",
                field=path,
                code="INCOMPATIBLE_OPERATOR",
                details={"name": column.field, "operator": operator.value},
            )


def _check_filter_values(source: DataSource, definition: ReportDefinition) -> None:
    for index, report_filter in enumerate(definition.filters):
        coerce_filter_value(
            source.get_column(report_filter.field),
            report_filter,
            path=f"filters[{index}].value",
        )
    date_range = definition.date_range
    if date_range is not None:
        if date_range.start_date:
            coerce_date_bound(date_range.start_date, path="dateRange.startDate")
        if date_range.end_date:
            coerce_date_bound(date_range.end_date, path="dateRange.endDate")


def validate_definition(
    data_source: Optional[str],
    definition: ReportDefinition,
    *,
    registry: Optional[DataSourceRegistry] = None,
) -> DataSource:
    """
    Validate ``definition`` against the registered ``data_source``.

    Returns the resolved ``DataSource``; raises ``ReportValidationError``
    (or one of its subclasses) on the first problem found.
    """

    registry = registry or get_registry()

    # 1. data source
    source = registry.resolve(data_source)

    # 2. visible columns
    for index, column in enumerate(definition.columns):
        if column.visible:
            _require_column(source, column.field, f"columns[{index}].field")

    # 3. plain reports need something to project
    if not definition.has_aggregations and not definition.visible_columns:
        raise ReportValidationError(
            "At least one visible column is required.",
            field="columns",
            code="NO_VISIBLE_COLUMNS",
        )

    # 4. every other field reference
    for index, column in enumerate(definition.columns):
        if not column.visible:
            _require_column(source, column.field, f"columns[{index}].field")
    for index, report_filter in enumerate(definition.filters):
        _require_column(source, report_filter.field, f"filters[{index}].field")
    if definition.date_range is not None:
        column = _require_column(source, definition.date_range.field, "dateRange.field")
        if column.semantic_type != SemanticType.DATE:
            raise ReportValidationError(
                f"dateRange field '{column.field}' must be a date column.",
                field="dateRange.field",
                code="INCOMPATIBLE_TYPE",
                details={"name": column.field, "type": column.semantic_type.value},
            )
    for index, field_name in enumerate(definition.group_by or []):
        _require_column(source, field_name, f"groupBy[{index}]")
    for index, aggregation in enumerate(definition.aggregations or []):
        _require_column(source, aggregation.field, f"aggregations[{index}].field")

    aliases: set[str] = set()
    for index, aggregation in enumerate(definition.aggregations or []):
        name = aggregation.output_name
        if name in aliases or name in (definition.group_by or []):
            raise ReportValidationError(
                f"Duplicate aggregation alias '{name}'.",
                field=f"aggregations[{index}].alias",
                code="DUPLICATE_ALIAS",
                details={"name": name},
            )
        aliases.add(name)

    if definition.order_by is not None:
        order_field = definition.order_by.field
        if definition.has_aggregations and definition.has_group_by:
            if order_field not in aliases and order_field not in definition.group_by:
                if source.get_column(order_field) is None:
                    _require_column(source, order_field, "orderBy.field")
                raise ReportValidationError(
                    f"orderBy '{order_field}' must be a groupBy field or an "
                    "aggregation alias.",
                    field="orderBy.field",
                    code="INVALID_ORDER",
                    details={"name": order_field},
                )
        elif order_field not in aliases:
            _require_column(source, order_field, "orderBy.field")

    # 5. aggregation type compatibility
    for index, aggregation in enumerate(definition.aggregations or []):
        column = source.get_column(aggregation.field)
        if column.semantic_type not in AGGREGATION_COMPATIBILITY[aggregation.type]:
            raise ReportValidationError(
                f"Aggregation '{aggregation.type.value}' is not supported on "
                f"{column.semantic_type.value} field '{column.field}'.",
                field=f"aggregations[{index}].type",
                code="INCOMPATIBLE_AGGREGATION",
                details={
                    "name": column.field,
                    "aggregation": aggregation.type.value,
                    "type": column.semantic_type.value,
                },
            )

    _check_filter_operators(source, definition)

    # 6. filter values and date bounds against their column types
    _check_filter_values(source, definition)

    logger.debug("Report definition validated for data source %s", source.name)
    return source


__all__ = ["validate_definition"]
