"""
Fleet tables exposed to the report engine.
"""

from .models import (
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
]
