"""
Filter value coercion.

User filter values arrive as untyped JSON. Each value is resolved
against the semantic type of the column it targets, into a
``FilterValue``: a small tagged wrapper holding the Python value the ORM
expects (``str``, ``Decimal``/``int``, aware ``datetime``, ``bool`` or
``UUID``), a tuple of such values for list operators, or ``None``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .types import (
    ColumnMeta,
    FilterOperator,
    ReportFilter,
    ReportValidationError,
    SemanticType,
)


@dataclass(frozen=True)
class FilterValue:
    semantic_type: SemanticType
    value: Any = None
    is_list: bool = False
    date_only: bool = False

    @property
    def is_null(self) -> bool:
        return self.value is None and not self.is_list


def _invalid(path: str, column: ColumnMeta, raw: Any, expected: str):
    return ReportValidationError(
        f"Invalid value for '{column.field}': expected {expected}.",
        field=path,
        code="INVALID_VALUE",
        details={"value": raw, "type": column.semantic_type.value},
    )


def parse_datetime_value(raw: Any) -> Optional[tuple[datetime, bool]]:
    """
    Parse an ISO-8601 date or datetime.

    Returns ``(aware_datetime, date_only)`` or ``None`` when the value is not
    parseable. Naive values are interpreted as UTC, a bare date as midnight
    UTC.
    """

    if isinstance(raw, datetime):
        parsed = raw
        date_only = False
    elif isinstance(raw, date):
        parsed = datetime.combine(raw, time.min)
        date_only = True
    elif isinstance(raw, str) and raw.strip():
        text = raw.strip()
        try:
            # parse_datetime also accepts a bare date on newer Pythons
            day = parse_date(text)
            if day is not None:
                parsed = datetime.combine(day, time.min)
                date_only = True
            else:
                parsed = parse_datetime(text)
                date_only = False
                if parsed is None:
                    return None
        except ValueError:
            return None
    else:
        return None

    if timezone.is_naive(parsed):
        parsed = parsed.replace(tzinfo=dt_timezone.utc)
    return parsed, date_only


def end_of_day_bound(value: datetime) -> datetime:
    """Exclusive upper bound covering the whole calendar day of ``value``."""
    return value + timedelta(days=1)


def _coerce_number(raw: Any) -> Any:
    if isinstance(raw, bool):
        raise ValueError("boolean is not a number")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        number = Decimal(str(raw))
    elif isinstance(raw, str) and raw.strip():
        try:
            number = Decimal(raw.strip())
        except InvalidOperation as exc:
            raise ValueError(str(exc)) from exc
    else:
        raise ValueError("not a number")
    if not number.is_finite():
        raise ValueError("number must be finite")
    if number == number.to_integral_value():
        return int(number)
    return number


def _coerce_boolean(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in {"true", "false"}:
        return raw.strip().lower() == "true"
    raise ValueError("not a boolean")


def _coerce_uuid(raw: Any) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    if not isinstance(raw, str):
        raise ValueError("not a uuid")
    return uuid.UUID(raw.strip())


def _coerce_string(raw: Any) -> str:
    if isinstance(raw, bool) or isinstance(raw, (dict, list, tuple)):
        raise ValueError("not a string")
    if isinstance(raw, (int, float, Decimal)):
        return str(raw)
    if not isinstance(raw, str):
        raise ValueError("not a string")
    return raw


_EXPECTED = {
    SemanticType.STRING: "a string",
    SemanticType.NUMBER: "a number",
    SemanticType.DATE: "an ISO-8601 date",
    SemanticType.BOOLEAN: "a boolean",
    SemanticType.UUID: "a UUID",
}


def coerce_scalar(column: ColumnMeta, raw: Any, *, path: str) -> FilterValue:
    """Coerce one JSON scalar for ``column``; ``None`` stays a null value."""

    semantic_type = column.semantic_type
    if raw is None:
        return FilterValue(semantic_type=semantic_type, value=None)

    try:
        if semantic_type == SemanticType.DATE:
            parsed = parse_datetime_value(raw)
            if parsed is None:
                raise ValueError("not a date")
            return FilterValue(
                semantic_type=semantic_type, value=parsed[0], date_only=parsed[1]
            )
        if semantic_type == SemanticType.NUMBER:
            value = _coerce_number(raw)
        elif semantic_type == SemanticType.BOOLEAN:
            value = _coerce_boolean(raw)
        elif semantic_type == SemanticType.UUID:
            value = _coerce_uuid(raw)
        else:
            value = _coerce_string(raw)
    except ValueError:
        raise _invalid(path, column, raw, _EXPECTED[semantic_type]) from None

    return FilterValue(semantic_type=semantic_type, value=value)


def coerce_list(column: ColumnMeta, raw: Any, *, path: str) -> FilterValue:
    """Coerce a JSON array for ``in``/``notIn``; nulls inside are rejected."""

    if not isinstance(raw, (list, tuple)):
        raise ReportValidationError(
            f"Invalid value for '{column.field}': expected an array.",
            field=path,
            code="INVALID_VALUE",
            details={"value": raw, "type": column.semantic_type.value},
        )
    values = []
    for index, item in enumerate(raw):
        if item is None:
            raise _invalid(
                f"{path}[{index}]", column, item, _EXPECTED[column.semantic_type]
            )
        values.append(coerce_scalar(column, item, path=f"{path}[{index}]").value)
    return FilterValue(
        semantic_type=column.semantic_type, value=tuple(values), is_list=True
    )


_NULLABLE_OPERATORS = (FilterOperator.EQ, FilterOperator.NEQ)


def coerce_filter_value(
    column: ColumnMeta, report_filter: ReportFilter, *, path: str
) -> FilterValue:
    """
    Resolve the value of one filter against its operator.

    ``isNull``/``isNotNull`` take no value. Every other operator needs the
    ``value`` key; an explicit ``null`` is only meaningful for ``eq`` and
    ``neq``, where it becomes a null check.
    """

    operator = report_filter.operator
    if operator in (FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL):
        return FilterValue(semantic_type=column.semantic_type)
    if not report_filter.has_value:
        raise _missing(path, column, operator)
    if operator in (FilterOperator.IN, FilterOperator.NOT_IN):
        return coerce_list(column, report_filter.value, path=path)
    value = coerce_scalar(column, report_filter.value, path=path)
    if value.is_null and operator not in _NULLABLE_OPERATORS:
        raise _missing(path, column, operator)
    return value


def _missing(path: str, column: ColumnMeta, operator: FilterOperator):
    return ReportValidationError(
        f"Operator '{operator.value}' on '{column.field}' requires a value.",
        field=path,
        code="MISSING_VALUE",
    )


def coerce_date_bound(raw: Any, *, path: str) -> tuple[datetime, bool]:
    """Parse one ``dateRange`` bound; ``path`` names it in the error."""

    parsed = parse_datetime_value(raw)
    if parsed is None:
        name = path.rsplit(".", 1)[-1]
        raise ReportValidationError(
            f"Invalid {name} '{raw}'.",
            field=path,
            code="INVALID_VALUE",
            details={"value": raw},
        )
    return parsed


__all__ = [
    "FilterValue",
    "coerce_scalar",
    "coerce_list",
    "coerce_filter_value",
    "coerce_date_bound",
    "parse_datetime_value",
    "end_of_day_bound",
]
