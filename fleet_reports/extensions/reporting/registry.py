"""
Column metadata registry for the custom report engine.

The registry is the single place that knows which tables can be reported on,
which ORM path backs each user-facing field and what semantic type drives
operator validity and value coercion. It is built once at import time and
never mutated afterwards.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from .types import ColumnMeta, DataSource, SemanticType, UnknownDataSourceError

logger = logging.getLogger(__name__)

S = SemanticType.STRING
N = SemanticType.NUMBER
D = SemanticType.DATE
B = SemanticType.BOOLEAN
U = SemanticType.UUID

TENANT_COLUMN = "organisation_id"

_TIMESTAMPS = (
    ("createdAt", "created_at", D),
    ("updatedAt", "updated_at", D),
)

_SOURCE_DEFINITIONS: tuple[tuple[str, str, str, tuple], ...] = (
    (
        "assets",
        "fleet_reports.Asset",
        "Assets",
        (
            ("id", "id", U),
            ("assetNumber", "asset_number", S),
            ("make", "make", S),
            ("model", "model", S),
            ("year", "year", N),
            ("licensePlate", "license_plate", S),
            ("status", "status", S),
            ("mileage", "mileage", N),
            ("operationalHours", "operational_hours", N),
            ("vin", "vin", S),
            ("categoryId", "category_id", U),
            ("isArchived", "is_archived", B),
        )
        + _TIMESTAMPS,
    ),
    (
        "work_orders",
        "fleet_reports.WorkOrder",
        "Work orders",
        (
            ("id", "id", U),
            ("workOrderNumber", "work_order_number", S),
            ("title", "title", S),
            ("status", "status", S),
            ("priority", "priority", S),
            ("assetId", "asset_id", U),
            ("assignedToId", "assigned_to_id", U),
            ("dueDate", "due_date", D),
            ("completedAt", "completed_at", D),
            ("laborCost", "labor_cost", N),
            ("partsCost", "parts_cost", N),
            ("totalCost", "total_cost", N),
            ("estimatedDuration", "estimated_duration", N),
            ("actualDuration", "actual_duration", N),
        )
        + _TIMESTAMPS,
    ),
    (
        "maintenance_schedules",
        "fleet_reports.MaintenanceSchedule",
        "Maintenance schedules",
        (
            ("id", "id", U),
            ("name", "name", S),
            ("scheduleType", "schedule_type", S),
            ("assetId", "asset_id", U),
            ("categoryId", "category_id", U),
            ("intervalType", "interval_type", S),
            ("intervalValue", "interval_value", N),
            ("intervalMileage", "interval_mileage", N),
            ("intervalHours", "interval_hours", N),
            ("nextDueDate", "next_due_date", D),
            ("lastGeneratedAt", "last_generated_at", D),
            ("isActive", "is_active", B),
        )
        + _TIMESTAMPS,
    ),
    (
        "fuel_transactions",
        "fleet_reports.FuelTransaction",
        "Fuel transactions",
        (
            ("id", "id", U),
            ("assetId", "asset_id", U),
            ("quantity", "quantity", N),
            ("unitCost", "unit_cost", N),
            ("totalCost", "total_cost", N),
            ("fuelType", "fuel_type", S),
            ("odometer", "odometer", N),
            ("engineHours", "engine_hours", N),
            ("vendor", "vendor", S),
            ("transactionDate", "transaction_date", D),
            ("hasDiscrepancy", "has_discrepancy", B),
            ("source", "source", S),
        )
        + _TIMESTAMPS,
    ),
    (
        "inspections",
        "fleet_reports.Inspection",
        "Inspections",
        (
            ("id", "id", U),
            ("assetId", "asset_id", U),
            ("templateId", "template_id", U),
            ("operatorId", "operator_id", U),
            ("status", "status", S),
            ("initiationMethod", "initiation_method", S),
            ("overallResult", "overall_result", S),
            ("startedAt", "started_at", D),
            ("completedAt", "completed_at", D),
            ("syncStatus", "sync_status", S),
        )
        + _TIMESTAMPS,
    ),
)


def _build_source(
    name: str, model_label: str, label: str, columns: tuple
) -> DataSource:
    column_map = {
        field_name: ColumnMeta(
            field=field_name, physical_ref=physical_ref, semantic_type=semantic_type
        )
        for field_name, physical_ref, semantic_type in columns
    }
    return DataSource(
        name=name,
        model_label=model_label,
        tenant_column=TENANT_COLUMN,
        columns=MappingProxyType(column_map),
        label=label,
    )


class DataSourceRegistry:
    """Read-only lookup of the registered data sources."""

    def __init__(self, sources: Mapping[str, DataSource]):
        self._sources = MappingProxyType(dict(sources))

    def __contains__(self, name: object) -> bool:
        return name in self._sources

    def __iter__(self) -> Iterator[DataSource]:
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)

    def names(self) -> list[str]:
        return list(self._sources.keys())

    def get(self, name: Optional[str]) -> Optional[DataSource]:
        if not isinstance(name, str):
            return None
        return self._sources.get(name)

    def resolve(self, name: Optional[str]) -> DataSource:
        source = self.get(name)
        if source is None:
            raise UnknownDataSourceError(
                f"Unknown data source '{name}'.",
                field="dataSource",
                details={"dataSource": name, "available": self.names()},
            )
        return source

    def get_model(self, source: DataSource):
        """Return the Django model class backing a data source."""
        from django.apps import apps

        app_label, model_name = source.model_label.split(".", 1)
        return apps.get_model(app_label, model_name)

    def describe(self) -> list[dict[str, Any]]:
        """JSON-friendly description of every data source and its columns."""
        return [
            {
                "name": source.name,
                "label": source.label or source.name,
                "columns": [
                    {"field": column.field, "type": column.semantic_type.value}
                    for column in source.columns.values()
                ],
            }
            for source in self._sources.values()
        ]

    def check_models(self) -> list[str]:
        """
        Verify every physical reference against the backing models.

        Returns a list of human readable problems; an empty list means the
        registry matches the installed models.
        """
        from django.core.exceptions import FieldDoesNotExist

        problems: list[str] = []
        for source in self._sources.values():
            try:
                model = self.get_model(source)
            except LookupError:
                problems.append(f"{source.name}: model {source.model_label} not found")
                continue
            refs = [source.tenant_column] + [
                column.physical_ref for column in source.columns.values()
            ]
            concrete = {
                getattr(field, "attname", field.name)
                for field in model._meta.concrete_fields
            } | {field.name for field in model._meta.concrete_fields}
            for ref in refs:
                if ref in concrete:
                    continue
                try:
                    model._meta.get_field(ref)
                except FieldDoesNotExist:
                    problems.append(f"{source.name}: unknown column '{ref}'")
        return problems


registry = DataSourceRegistry(
    {
        name: _build_source(name, model_label, label, columns)
        for name, model_label, label, columns in _SOURCE_DEFINITIONS
    }
)

DATA_SOURCE_CHOICES = [(source.name, source.label) for source in registry]


def get_registry() -> DataSourceRegistry:
    return registry


__all__ = [
    "DataSourceRegistry",
    "registry",
    "get_registry",
    "DATA_SOURCE_CHOICES",
    "TENANT_COLUMN",
]
