"""
Tenant application logic for querysets.
"""

from typing import Any

from django.db import models
from django.db.models import Q

from ..reporting.types import TenantRequiredError

DEFAULT_TENANT_COLUMN = "organisation_id"


def build_tenant_q(tenant_id: Any, *, tenant_column: str = DEFAULT_TENANT_COLUMN) -> Q:
    """Predicate restricting rows to ``tenant_id``; never optional."""
    if tenant_id in (None, ""):
        raise TenantRequiredError("A tenant scope is required for this query.")
    return Q(**{tenant_column: tenant_id})


def apply_tenant_queryset(
    queryset: models.QuerySet,
    tenant_id: Any,
    *,
    tenant_column: str = DEFAULT_TENANT_COLUMN,
) -> models.QuerySet:
    return queryset.filter(build_tenant_q(tenant_id, tenant_column=tenant_column))


__all__ = ["build_tenant_q", "apply_tenant_queryset", "DEFAULT_TENANT_COLUMN"]
