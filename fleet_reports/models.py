"""
Model registry for fleet_reports.

Imports the fleet source tables and the saved report model so Django
auto-discovery registers them under the ``fleet_reports`` app label.
"""

from fleet_reports.extensions.reporting.models import CustomReport
from fleet_reports.fleet.models import (
    Asset,
    FuelTransaction,
    Inspection,
    MaintenanceSchedule,
    Organisation,
    OrganisationMember,
    WorkOrder,
)

__all__ = [
    "Organisation",
    "OrganisationMember",
    "Asset",
    "WorkOrder",
    "MaintenanceSchedule",
    "FuelTransaction",
    "Inspection",
    "CustomReport",
]
