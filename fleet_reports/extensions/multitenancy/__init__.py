"""
Row-level tenant isolation for fleet-reports.
"""

from .applicator import apply_tenant_queryset, build_tenant_q
from .resolver import require_tenant_id, resolve_tenant_id
from .settings import MultitenancySettings, get_multitenancy_settings

__all__ = [
    "MultitenancySettings",
    "get_multitenancy_settings",
    "resolve_tenant_id",
    "require_tenant_id",
    "build_tenant_q",
    "apply_tenant_queryset",
]
