"""
ReportExecutionEngine package.

This module provides the ReportExecutionEngine class that runs a validated
ReportDefinition against one registered data source, scoped to the caller's
organisation.
"""

from __future__ import annotations

from .aggregation import AggregationMixin, QueryPlan
from .base import ReportExecutionEngineBase
from .execution import ExecutionMixin
from .filters import CompiledPredicate, FilterCompilerMixin


class ReportExecutionEngine(
    ExecutionMixin,
    AggregationMixin,
    FilterCompilerMixin,
    ReportExecutionEngineBase,
):
    """
    Executes a report definition against its data source.

    This class combines functionality from multiple mixins:
    - ReportExecutionEngineBase: validation, model loading and field lookup
    - FilterCompilerMixin: tenant, filter and date range predicates
    - AggregationMixin: query shape selection and projection
    - ExecutionMixin: row and count queries, pagination, last run tracking
    """


__all__ = [
    "ReportExecutionEngine",
    "ReportExecutionEngineBase",
    "FilterCompilerMixin",
    "AggregationMixin",
    "ExecutionMixin",
    "CompiledPredicate",
    "QueryPlan",
]
