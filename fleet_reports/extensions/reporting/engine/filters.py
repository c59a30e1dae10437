"""
Filter compilation mixin for ReportExecutionEngine.

Turns the definition's filters and date range into an ordered list of
``CompiledPredicate`` objects. The tenant predicate is always first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.db.models import Q

from ...multitenancy.applicator import build_tenant_q
from ..coercion import coerce_date_bound, coerce_filter_value, end_of_day_bound
from ..types import FilterOperator, ReportFilter, ReportValidationError
from ..utils import _combine_q

logger = logging.getLogger(__name__)

TENANT_PREDICATE = "tenant"

_COMPARISON_LOOKUPS = {
    FilterOperator.GT: "gt",
    FilterOperator.GTE: "gte",
    FilterOperator.LT: "lt",
    FilterOperator.LTE: "lte",
}


@dataclass(frozen=True)
class CompiledPredicate:
    field: str
    operator: str
    q: Q


class FilterCompilerMixin:
    """
    Mixin providing predicate compilation for the execution engine.

    Every value is coerced against the target column type before a
    ``Q`` object is built; malformed values raise ``ReportValidationError``.
    """

    def compile_predicates(self) -> list[CompiledPredicate]:
        predicates = [
            CompiledPredicate(
                field=self.source.tenant_column,
                operator=TENANT_PREDICATE,
                q=build_tenant_q(
                    self.organisation_id, tenant_column=self.source.tenant_column
                ),
            )
        ]
        for index, report_filter in enumerate(self.definition.filters):
            compiled = self._compile_filter(report_filter, index)
            if compiled is not None:
                predicates.append(compiled)
        predicates.extend(self._compile_date_range())
        return predicates

    def _where(self, predicates: list[CompiledPredicate]) -> Q:
        return _combine_q([predicate.q for predicate in predicates], op="and")

    def _compile_filter(
        self, report_filter: ReportFilter, index: int
    ) -> Optional[CompiledPredicate]:
        column = self.source.columns[report_filter.field]
        ref = column.physical_ref
        operator = report_filter.operator
        value = coerce_filter_value(
            column, report_filter, path=f"filters[{index}].value"
        )

        if operator == FilterOperator.IS_NULL:
            q = Q(**{f"{ref}__isnull": True})
        elif operator == FilterOperator.IS_NOT_NULL:
            q = Q(**{f"{ref}__isnull": False})
        elif operator in (FilterOperator.EQ, FilterOperator.NEQ):
            if value.is_null:
                q = Q(**{f"{ref}__isnull": operator == FilterOperator.EQ})
            elif operator == FilterOperator.EQ:
                q = Q(**{ref: value.value})
            else:
                # SQL <> never matches NULL rows
                q = ~Q(**{ref: value.value}) & Q(**{f"{ref}__isnull": False})
        elif operator in _COMPARISON_LOOKUPS:
            q = Q(**{f"{ref}__{_COMPARISON_LOOKUPS[operator]}": value.value})
        elif operator == FilterOperator.LIKE:
            q = Q(**{f"{ref}__icontains": value.value})
        elif operator in (FilterOperator.IN, FilterOperator.NOT_IN):
            if not value.value:
                logger.debug(
                    "Dropping empty '%s' filter on %s", operator.value, column.field
                )
                return None
            if operator == FilterOperator.IN:
                q = Q(**{f"{ref}__in": value.value})
            else:
                q = ~Q(**{f"{ref}__in": value.value}) & Q(**{f"{ref}__isnull": False})
        else:  # pragma: no cover - FilterOperator is closed
            raise ReportValidationError(
                f"Unsupported operator '{operator}'.",
                field=f"filters[{index}].operator",
                code="UNKNOWN_OPERATOR",
            )

        return CompiledPredicate(field=column.field, operator=operator.value, q=q)

    def _compile_date_range(self) -> list[CompiledPredicate]:
        date_range = self.definition.date_range
        if date_range is None:
            return []
        column = self.source.columns[date_range.field]
        ref = column.physical_ref
        predicates: list[CompiledPredicate] = []

        if date_range.start_date:
            start, _ = coerce_date_bound(
                date_range.start_date, path="dateRange.startDate"
            )
            predicates.append(
                CompiledPredicate(
                    field=column.field, operator="gte", q=Q(**{f"{ref}__gte": start})
                )
            )

        if date_range.end_date:
            end, date_only = coerce_date_bound(
                date_range.end_date, path="dateRange.endDate"
            )
            if date_only:
                # a bare date includes the whole day
                q = Q(**{f"{ref}__lt": end_of_day_bound(end)})
            else:
                q = Q(**{f"{ref}__lte": end})
            predicates.append(CompiledPredicate(field=column.field, operator="lte", q=q))

        return predicates


__all__ = ["CompiledPredicate", "FilterCompilerMixin", "TENANT_PREDICATE"]
