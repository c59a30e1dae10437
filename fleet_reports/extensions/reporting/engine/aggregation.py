"""
Aggregation planning mixin for ReportExecutionEngine.

Chooses the query shape from the presence of ``groupBy`` and
``aggregations`` and builds the projection, grouping, annotations and
ordering for it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from django.db.models import Avg, Count, Max, Min, Sum

from ..types import AggregationType, QueryMode, SortDirection

AGGREGATION_MAP = {
    AggregationType.COUNT: Count,
    AggregationType.SUM: Sum,
    AggregationType.AVG: Avg,
    AggregationType.MIN: Min,
    AggregationType.MAX: Max,
}

# Annotation names never collide with model fields.
_ANNOTATION_PREFIX = "report_agg_"


@dataclass
class QueryPlan:
    mode: QueryMode
    # output field name -> ORM path, in projection order
    projection: dict[str, str] = field(default_factory=dict)
    grouping: list[str] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    # annotation name -> output alias
    aliases: dict[str, str] = field(default_factory=dict)
    ordering: list[str] = field(default_factory=list)
    columns: list[dict[str, str]] = field(default_factory=list)

    def shape_row(self, row: dict[str, Any]) -> dict[str, Any]:
        shaped = {name: row.get(ref) for name, ref in self.projection.items()}
        for internal, alias in self.aliases.items():
            shaped[alias] = row.get(internal)
        return shaped


class AggregationMixin:
    """Mixin providing query shape selection for the execution engine."""

    def query_mode(self) -> QueryMode:
        if not self.definition.has_aggregations:
            # groupBy without aggregations runs as a plain report
            return QueryMode.PLAIN
        if self.definition.has_group_by:
            return QueryMode.GROUPED
        return QueryMode.SCALAR

    def build_plan(self) -> QueryPlan:
        mode = self.query_mode()
        if mode == QueryMode.PLAIN:
            return self._plain_plan()
        plan = QueryPlan(mode=mode)
        self._add_annotations(plan)
        if mode == QueryMode.GROUPED:
            for field_name in self.definition.group_by:
                ref = self._physical_ref(field_name)
                plan.projection[field_name] = ref
                if ref not in plan.grouping:
                    plan.grouping.append(ref)
            plan.ordering = self._grouped_ordering(plan)
        plan.columns = self._response_columns()
        return plan

    def _plain_plan(self) -> QueryPlan:
        plan = QueryPlan(mode=QueryMode.PLAIN)
        for column in self.definition.visible_columns:
            plan.projection.setdefault(column.field, self._physical_ref(column.field))
        plan.columns = self._response_columns()

        pk_name = self._default_pk_field()
        ordering: list[str] = []
        order_by = self.definition.order_by
        if order_by is not None:
            ordering.append(
                self._directed(self._physical_ref(order_by.field), order_by.direction)
            )
        # primary key tiebreaker keeps pages disjoint
        if not ordering or ordering[0].lstrip("-") != pk_name:
            ordering.append(pk_name)
        plan.ordering = ordering
        return plan

    def _add_annotations(self, plan: QueryPlan) -> None:
        for index, aggregation in enumerate(self.definition.aggregations or []):
            internal = f"{_ANNOTATION_PREFIX}{index}"
            factory = AGGREGATION_MAP[aggregation.type]
            plan.annotations[internal] = factory(self._physical_ref(aggregation.field))
            plan.aliases[internal] = aggregation.output_name

    def _grouped_ordering(self, plan: QueryPlan) -> list[str]:
        ordering: list[str] = []
        order_by = self.definition.order_by
        if order_by is not None:
            alias_lookup = {alias: internal for internal, alias in plan.aliases.items()}
            if order_by.field in alias_lookup:
                target = alias_lookup[order_by.field]
            else:
                target = self._physical_ref(order_by.field)
            ordering.append(self._directed(target, order_by.direction))
        for ref in plan.grouping:
            if ref not in {token.lstrip("-") for token in ordering}:
                ordering.append(ref)
        return ordering

    def _response_columns(self) -> list[dict[str, str]]:
        return [
            {"field": column.field, "label": column.label or column.field}
            for column in self.definition.visible_columns
        ]

    @staticmethod
    def _directed(ref: str, direction: SortDirection) -> str:
        return f"-{ref}" if direction == SortDirection.DESC else ref


__all__ = ["AggregationMixin", "QueryPlan", "AGGREGATION_MAP"]
