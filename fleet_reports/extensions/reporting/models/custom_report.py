"""
CustomReport model for the custom report module.

A saved report couples a data source with a JSON report definition. It is
owned by one user, optionally shared with the rest of the organisation, and
remembers when it last ran.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from django.conf import settings
from django.db import models

from ..definition import definition_from_dict
from ..registry import DATA_SOURCE_CHOICES
from ..types import ReportDefinition, ReportResult


class CustomReport(models.Model):
    """User-authored report definition persisted per organisation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organisation = models.ForeignKey(
        "fleet_reports.Organisation",
        on_delete=models.CASCADE,
        related_name="custom_reports",
        verbose_name="Organisation",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="custom_reports",
        verbose_name="Owner",
    )
    name = models.CharField(max_length=200, verbose_name="Name")
    description = models.TextField(blank=True, verbose_name="Description")
    data_source = models.CharField(
        max_length=40, choices=DATA_SOURCE_CHOICES, verbose_name="Data source"
    )
    definition = models.JSONField(
        default=dict,
        verbose_name="Definition",
        help_text="Columns, filters, date range, grouping, aggregations and ordering.",
    )
    is_shared = models.BooleanField(default=False, verbose_name="Shared")
    is_archived = models.BooleanField(default=False, verbose_name="Archived")
    last_run_at = models.DateTimeField(null=True, blank=True, verbose_name="Last run")
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Created")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="Updated")

    class Meta:
        app_label = "fleet_reports"
        verbose_name = "Custom report"
        verbose_name_plural = "Custom reports"
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["organisation"], name="custom_report_org_idx"),
            models.Index(fields=["owner"], name="custom_report_owner_idx"),
            models.Index(fields=["data_source"], name="custom_report_source_idx"),
            models.Index(fields=["is_shared"], name="custom_report_shared_idx"),
            models.Index(fields=["is_archived"], name="custom_report_archived_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.data_source})"

    def get_definition(self) -> ReportDefinition:
        return definition_from_dict(self.definition or {})

    def run(self, page: Any = 1, page_size: Optional[Any] = None) -> ReportResult:
        """Execute the stored definition and record the run."""
        from ..engine import ReportExecutionEngine

        engine = ReportExecutionEngine(
            self.data_source,
            self.get_definition(),
            organisation_id=self.organisation_id,
        )
        return engine.execute(page, page_size, report_id=self.pk)


__all__ = ["CustomReport"]
