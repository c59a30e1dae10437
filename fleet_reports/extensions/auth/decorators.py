"""
Authentication decorators for Django views.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional

from django.contrib.auth import get_user_model
from django.http import JsonResponse

from .jwt import JWTManager

logger = logging.getLogger(__name__)


def _get_bearer_token(request: Any) -> Optional[str]:
    header = request.META.get("HTTP_AUTHORIZATION", "")
    if not header:
        return None
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() not in ("bearer", "jwt"):
        return None
    return parts[1]


def get_user_from_jwt(token: str):
    """Return ``(user, payload)`` for a valid access token, else ``(None, None)``."""
    payload = JWTManager.verify_token(token, expected_type="access")
    if not payload:
        return None, None
    User = get_user_model()
    user = User.objects.filter(pk=payload.get("user_id"), is_active=True).first()
    if user is None:
        logger.warning("JWT user %s not found or inactive", payload.get("user_id"))
        return None, None
    return user, payload


def jwt_required(view_func: Callable) -> Callable:
    """
    Require an authenticated caller.

    A valid ``Authorization: Bearer <token>`` header authenticates the
    request and exposes the decoded claims as ``request.jwt_payload``. A
    session-authenticated user is accepted without a token.
    """

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        token = _get_bearer_token(request)
        if token:
            user, payload = get_user_from_jwt(token)
            if user is None:
                return JsonResponse(
                    {"error": "Invalid or expired token", "code": "UNAUTHENTICATED"},
                    status=401,
                )
            request.user = user
            request.jwt_payload = payload
            return view_func(request, *args, **kwargs)

        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            request.jwt_payload = None
            return view_func(request, *args, **kwargs)

        return JsonResponse(
            {"error": "Authentication required", "code": "UNAUTHENTICATED"},
            status=401,
        )

    return wrapper


__all__ = ["jwt_required", "get_user_from_jwt"]
