"""
Multitenancy settings and configurations.
"""

from dataclasses import dataclass
from typing import Any

from ...config_proxy import get_setting


@dataclass(frozen=True)
class MultitenancySettings:
    tenant_claim: str


def _coerce_str(value: Any, default: str) -> str:
    if value is None:
        return default
    value = str(value).strip()
    return value or default


def get_multitenancy_settings() -> MultitenancySettings:
    tenant_claim = _coerce_str(
        get_setting("multitenancy_settings.tenant_claim", "organisation_id"),
        "organisation_id",
    )
    return MultitenancySettings(tenant_claim=tenant_claim)
