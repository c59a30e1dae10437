"""
Fleet tables backing the report data sources.

Only the columns exposed through the report registry are modelled here; the
CRUD surface for these tables belongs to the wider platform. Every table is
scoped by an ``organisation`` foreign key, which is the tenant column used
by the report engine.
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Organisation(models.Model):
    """A tenant of the platform."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, verbose_name="Name")
    created_at = models.DateTimeField(default=timezone.now, verbose_name="Created")

    class Meta:
        app_label = "fleet_reports"
        verbose_name = "Organisation"
        verbose_name_plural = "Organisations"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class OrganisationMember(models.Model):
    """Links a platform user to the organisation they act for."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="organisation_membership",
    )
    organisation = models.ForeignKey(
        Organisation, on_delete=models.CASCADE, related_name="members"
    )
    role = models.CharField(max_length=60, default="viewer", blank=True)

    class Meta:
        app_label = "fleet_reports"
        verbose_name = "Organisation member"
        verbose_name_plural = "Organisation members"

    def __str__(self) -> str:
        return f"{self.user} @ {self.organisation}"


class TenantScopedModel(models.Model):
    """Abstract base adding the tenant foreign key and timestamps."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organisation = models.ForeignKey(
        Organisation,
        on_delete=models.CASCADE,
        related_name="%(app_label)s_%(class)s_set",
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Asset(TenantScopedModel):
    asset_number = models.CharField(max_length=50)
    make = models.CharField(max_length=100, blank=True)
    model = models.CharField(max_length=100, blank=True)
    year = models.IntegerField(null=True, blank=True)
    license_plate = models.CharField(max_length=20, blank=True)
    status = models.CharField(max_length=30, default="active")
    mileage = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    operational_hours = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    vin = models.CharField(max_length=17, blank=True)
    category_id = models.UUIDField(null=True, blank=True)
    is_archived = models.BooleanField(default=False)

    class Meta:
        app_label = "fleet_reports"
        verbose_name = "Asset"
        verbose_name_plural = "Assets"

    def __str__(self) -> str:
        return self.asset_number


class WorkOrder(TenantScopedModel):
    work_order_number = models.CharField(max_length=50)
    title = models.CharField(max_length=200)
    status = models.CharField(max_length=30, default="open")
    priority = models.CharField(max_length=20, default="medium")
    asset = models.ForeignKey(
        Asset, on_delete=models.CASCADE, related_name="work_orders"
    )
    assigned_to_id = models.UUIDField(null=True, blank=True)
    due_date = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    labor_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    parts_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    estimated_duration = models.IntegerField(null=True, blank=True)
    actual_duration = models.IntegerField(null=True, blank=True)

    class Meta:
        app_label = "fleet_reports"
        verbose_name = "Work order"
        verbose_name_plural = "Work orders"

    def __str__(self) -> str:
        return self.work_order_number


class MaintenanceSchedule(TenantScopedModel):
    name = models.CharField(max_length=200)
    schedule_type = models.CharField(max_length=30, default="time_based")
    asset = models.ForeignKey(
        Asset,
        on_delete=models.CASCADE,
        related_name="maintenance_schedules",
        null=True,
        blank=True,
    )
    category_id = models.UUIDField(null=True, blank=True)
    interval_type = models.CharField(max_length=30, blank=True)
    interval_value = models.IntegerField(null=True, blank=True)
    interval_mileage = models.IntegerField(null=True, blank=True)
    interval_hours = models.IntegerField(null=True, blank=True)
    next_due_date = models.DateTimeField(null=True, blank=True)
    last_generated_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        app_label = "fleet_reports"
        verbose_name = "Maintenance schedule"
        verbose_name_plural = "Maintenance schedules"

    def __str__(self) -> str:
        return self.name


class FuelTransaction(TenantScopedModel):
    asset = models.ForeignKey(
        Asset, on_delete=models.CASCADE, related_name="fuel_transactions"
    )
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)
    total_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    fuel_type = models.CharField(max_length=30, default="diesel")
    odometer = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    engine_hours = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    vendor = models.CharField(max_length=200, blank=True)
    transaction_date = models.DateTimeField(default=timezone.now)
    has_discrepancy = models.BooleanField(default=False)
    source = models.CharField(max_length=30, default="manual")

    class Meta:
        app_label = "fleet_reports"
        verbose_name = "Fuel transaction"
        verbose_name_plural = "Fuel transactions"


class Inspection(TenantScopedModel):
    asset = models.ForeignKey(
        Asset, on_delete=models.CASCADE, related_name="inspections"
    )
    template_id = models.UUIDField(null=True, blank=True)
    operator_id = models.UUIDField(null=True, blank=True)
    status = models.CharField(max_length=30, default="in_progress")
    initiation_method = models.CharField(max_length=30, default="manual")
    overall_result = models.CharField(max_length=30, blank=True)
    started_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    sync_status = models.CharField(max_length=30, default="synced")

    class Meta:
        app_label = "fleet_reports"
        verbose_name = "Inspection"
        verbose_name_plural = "Inspections"


__all__ = [
    "Organisation",
    "OrganisationMember",
    "TenantScopedModel",
    "Asset",
    "WorkOrder",
    "MaintenanceSchedule",
    "FuelTransaction",
    "Inspection",
]
