"""
Execution mixin for ReportExecutionEngine.

This module contains the execute() method and its per-mode helpers: the
row query, the matching count query and the saved report ``last_run_at``
bookkeeping.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import sentry_sdk
from django.db import DatabaseError
from django.utils import timezone

from ....config_proxy import get_setting
from ..types import (
    Pagination,
    QueryMode,
    ReportExecutionError,
    ReportResult,
)
from ..utils import _json_sanitize, _total_pages, resolve_pagination
from .aggregation import QueryPlan

logger = logging.getLogger(__name__)


class ExecutionMixin:
    """
    Mixin providing query execution for the engine.

    All validation and compilation happens before the first query is sent,
    so a rejected definition never reaches the database.
    """

    def execute(
        self,
        page: Any = 1,
        page_size: Any = None,
        *,
        report_id: Optional[Any] = None,
    ) -> ReportResult:
        page, page_size = resolve_pagination(page, page_size)
        predicates = self.compile_predicates()
        plan = self.build_plan()
        queryset = self.model._default_manager.filter(self._where(predicates))

        try:
            if plan.mode == QueryMode.SCALAR:
                rows, total = self._run_scalar(queryset, plan, page)
            elif plan.mode == QueryMode.GROUPED:
                rows, total = self._run_grouped(queryset, plan, page, page_size)
            else:
                rows, total = self._run_plain(queryset, plan, page, page_size)
        except DatabaseError as exc:
            logger.exception(
                "Report execution failed for data source %s", self.source.name
            )
            sentry_sdk.capture_exception(exc)
            raise ReportExecutionError(
                "The report could not be executed.",
                details={"dataSource": self.source.name},
            ) from exc

        if report_id is not None:
            self._record_last_run(report_id)

        logger.debug(
            "Report on %s ran in %s mode: %s rows of %s",
            self.source.name,
            plan.mode.value,
            len(rows),
            total,
        )
        return ReportResult(
            data=_json_sanitize(rows),
            pagination=Pagination(
                page=page,
                page_size=page_size,
                total=total,
                total_pages=_total_pages(total, page_size),
            ),
            columns=plan.columns,
            mode=plan.mode,
        )

    def _window(self, page: int, page_size: int, total: int) -> Optional[tuple[int, int]]:
        start = (page - 1) * page_size
        end = min(start + page_size, total)
        if start >= end:
            return None
        return start, end

    def _capped_total(self, total: int) -> int:
        limit = self.definition.limit
        if limit is not None:
            return min(total, limit)
        return total

    def _run_plain(self, queryset, plan: QueryPlan, page: int, page_size: int):
        total = self._capped_total(queryset.count())
        window = self._window(page, page_size, total)
        if window is None:
            return [], total
        start, end = window
        rows = queryset.order_by(*plan.ordering).values(*plan.projection.values())
        return [plan.shape_row(row) for row in rows[start:end]], total

    def _run_scalar(self, queryset, plan: QueryPlan, page: int):
        values = queryset.aggregate(**plan.annotations)
        # single row regardless of page; later pages are empty
        if page > 1:
            return [], 1
        return [plan.shape_row(values)], 1

    def _run_grouped(self, queryset, plan: QueryPlan, page: int, page_size: int):
        total = self._capped_total(
            queryset.values(*plan.grouping).order_by().distinct().count()
        )
        window = self._window(page, page_size, total)
        if window is None:
            return [], total
        start, end = window
        rows = (
            queryset.values(*plan.grouping)
            .order_by()
            .annotate(**plan.annotations)
            .order_by(*plan.ordering)
        )
        return [plan.shape_row(row) for row in rows[start:end]], total

    def _record_last_run(self, report_id: Any) -> None:
        if not get_setting("reporting_settings.record_last_run", True):
            return
        from ..models import CustomReport

        try:
            CustomReport.objects.filter(
                pk=report_id, organisation_id=self.organisation_id
            ).update(last_run_at=timezone.now())
        except DatabaseError:
            logger.warning(
                "Could not record last run for report %s", report_id, exc_info=True
            )


__all__ = ["ExecutionMixin"]
