"""
Base ReportExecutionEngine class with core initialization.

Construction validates the definition against the registry and loads the
backing model; nothing here touches the database.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from django.db import models

from ..registry import DataSourceRegistry, get_registry
from ..types import ReportDefinition, TenantRequiredError
from ..validation import validate_definition

logger = logging.getLogger(__name__)


class ReportExecutionEngineBase:
    """
    Base class for ReportExecutionEngine.

    Holds the validated data source, the definition and the caller's
    organisation. The full engine is built by combining this base with the
    filter compiler, aggregation planner and executor mixins.
    """

    def __init__(
        self,
        data_source: Optional[str],
        definition: ReportDefinition,
        *,
        organisation_id: Any,
        registry: Optional[DataSourceRegistry] = None,
    ):
        if organisation_id in (None, ""):
            raise TenantRequiredError("A tenant scope is required to run reports.")
        self.registry = registry or get_registry()
        self.definition = definition
        self.organisation_id = organisation_id
        self.source = validate_definition(
            data_source, definition, registry=self.registry
        )
        self.model = self._load_model()

    def _load_model(self) -> type[models.Model]:
        return self.registry.get_model(self.source)

    def _default_pk_field(self) -> str:
        pk = getattr(self.model._meta, "pk", None)
        name = getattr(pk, "name", None)
        return name or "id"

    def _physical_ref(self, field_name: str) -> str:
        return self.source.columns[field_name].physical_ref


__all__ = ["ReportExecutionEngineBase"]
