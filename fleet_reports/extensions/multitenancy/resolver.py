"""
Tenant resolution logic.

The caller's organisation is taken, in order, from an explicit
``request.tenant_id``, the configured JWT claim, and finally the
authenticated user's ``OrganisationMember`` row.
"""

import logging
import uuid
from typing import Any, Optional

from django.db import models

from ..reporting.types import TenantRequiredError
from .settings import get_multitenancy_settings

logger = logging.getLogger(__name__)

_TENANT_CACHE_ATTR = "_fleet_tenant_id"
_MISSING = object()


def _normalize_tenant_value(value: Any) -> Optional[uuid.UUID]:
    if value in (None, ""):
        return None
    if isinstance(value, models.Model):
        value = value.pk
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed tenant identifier %r", value)
        return None


def _get_existing_tenant_value(request: Any) -> Any:
    existing = getattr(request, "tenant_id", None)
    if existing not in (None, ""):
        return existing
    existing = getattr(request, "tenant", None)
    if existing not in (None, ""):
        return existing
    return None


def _get_membership_tenant(request: Any) -> Any:
    user = getattr(request, "user", None)
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    from ...fleet.models import OrganisationMember

    return (
        OrganisationMember.objects.filter(user_id=user.pk)
        .values_list("organisation_id", flat=True)
        .first()
    )


def resolve_tenant_id(request: Any) -> Optional[uuid.UUID]:
    """Return the caller's organisation id, or ``None`` when unresolved."""
    if request is None:
        return None
    cached = getattr(request, _TENANT_CACHE_ATTR, _MISSING)
    if cached is not _MISSING:
        return cached

    settings = get_multitenancy_settings()
    tenant_id = _normalize_tenant_value(_get_existing_tenant_value(request))

    if tenant_id is None and settings.tenant_claim:
        payload = getattr(request, "jwt_payload", None)
        if isinstance(payload, dict):
            tenant_id = _normalize_tenant_value(payload.get(settings.tenant_claim))

    if tenant_id is None:
        tenant_id = _normalize_tenant_value(_get_membership_tenant(request))

    setattr(request, _TENANT_CACHE_ATTR, tenant_id)
    return tenant_id


def require_tenant_id(request: Any) -> uuid.UUID:
    tenant_id = resolve_tenant_id(request)
    if tenant_id is None:
        raise TenantRequiredError(
            "No organisation is associated with this request.",
        )
    return tenant_id


__all__ = ["resolve_tenant_id", "require_tenant_id"]
