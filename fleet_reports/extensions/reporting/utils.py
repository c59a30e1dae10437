"""
Utility functions for the custom report module.

Helpers for request parameter coercion, predicate combination and JSON
serialization of query rows.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence
from uuid import UUID

from django.db.models import Q
from django.utils.encoding import force_str
from django.utils.functional import Promise

from ...config_proxy import get_setting
from .types import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ReportValidationError


def _coerce_int(value: Any, *, default: int, field: str) -> int:
    """
    Coerce a request parameter to an integer.

    Query strings and GraphQL form inputs can carry numbers as strings, so
    digit strings are accepted. Booleans and fractional values are not.
    """

    if value is None:
        return default

    if isinstance(value, bool):
        raise ReportValidationError(
            f"'{field}' must be an integer.", field=field, code="INVALID_PAGINATION"
        )

    if isinstance(value, int):
        return value

    if isinstance(value, float) and value.is_integer():
        return int(value)

    if isinstance(value, str):
        cleaned = value.strip()
        if cleaned == "":
            return default
        try:
            return int(cleaned)
        except ValueError:
            pass

    raise ReportValidationError(
        f"'{field}' must be an integer.",
        field=field,
        code="INVALID_PAGINATION",
        details={"value": value},
    )


def resolve_pagination(page: Any, page_size: Any) -> tuple[int, int]:
    """Validate ``page`` and ``page_size`` against the configured bounds."""

    default_size = int(
        get_setting("reporting_settings.default_page_size", DEFAULT_PAGE_SIZE)
    )
    max_size = int(get_setting("reporting_settings.max_page_size", MAX_PAGE_SIZE))

    page_value = _coerce_int(page, default=1, field="page")
    size_value = _coerce_int(page_size, default=default_size, field="pageSize")
    if page_value < 1:
        raise ReportValidationError(
            "'page' must be greater than or equal to 1.",
            field="page",
            code="INVALID_PAGINATION",
            details={"value": page_value},
        )
    if not 1 <= size_value <= max_size:
        raise ReportValidationError(
            f"'pageSize' must be between 1 and {max_size}.",
            field="pageSize",
            code="INVALID_PAGINATION",
            details={"value": size_value},
        )
    return page_value, size_value


def _total_pages(total: int, page_size: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / page_size)


def _combine_q(conditions: Sequence[Q], *, op: str = "and") -> Optional[Q]:
    if not conditions:
        return None
    op = (op or "and").lower()
    combined = conditions[0]
    for condition in conditions[1:]:
        combined = (combined | condition) if op == "or" else (combined & condition)
    return combined


def _json_sanitize(value: Any) -> Any:
    """
    Convert values to JSON-serializable primitives.

    Rows come straight from ``QuerySet.values()`` and may contain Decimal,
    datetime and UUID values. Graphene serializes the full response with
    ``json.dumps(...)`` so nested values must be plain primitives.
    """

    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, Promise):
        return force_str(value)

    if isinstance(value, (datetime, date)):
        return value.isoformat()

    if isinstance(value, Decimal):
        try:
            return float(value)
        except (OverflowError, ValueError):
            return str(value)

    if isinstance(value, UUID):
        return str(value)

    if isinstance(value, dict):
        return {
            str(_json_sanitize(key)): _json_sanitize(item)
            for key, item in value.items()
        }

    if isinstance(value, (list, tuple, set)):
        return [_json_sanitize(item) for item in value]

    return force_str(value)


__all__ = [
    "_coerce_int",
    "resolve_pagination",
    "_total_pages",
    "_combine_q",
    "_json_sanitize",
]
