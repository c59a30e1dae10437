"""
JWT token management for authentication.

Access tokens are HS256-signed with ``JWT_SECRET_KEY`` (falling back to
``SECRET_KEY``) and carry the caller's organisation as a claim so report
requests can be scoped without a database lookup.
"""

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Optional

import jwt
from django.conf import settings
from django.utils import timezone

from ..multitenancy.settings import get_multitenancy_settings

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractUser

logger = logging.getLogger(__name__)


class JWTManager:
    """
    Manager for JWT token operations.

    Example:
        token_data = JWTManager.generate_token(user, organisation_id=org.pk)
        payload = JWTManager.verify_token(token_data["token"], expected_type="access")
    """

    @staticmethod
    def get_jwt_secret() -> str:
        return getattr(settings, "JWT_SECRET_KEY", settings.SECRET_KEY)

    @staticmethod
    def get_jwt_expiration() -> int:
        """
        Retrieve the access token expiration duration in seconds.

        ``JWT_ACCESS_TOKEN_LIFETIME`` may be an int or a timedelta; 0 or a
        negative value produces tokens without an ``exp`` claim.
        """
        lifetime = getattr(settings, "JWT_ACCESS_TOKEN_LIFETIME", 3600)
        if isinstance(lifetime, timedelta):
            return int(lifetime.total_seconds())
        return int(lifetime)

    @classmethod
    def generate_token(
        cls, user: "AbstractUser", *, organisation_id: Optional[Any] = None
    ) -> dict[str, Any]:
        now = timezone.now()
        access_lifetime = cls.get_jwt_expiration()
        expiration = (
            None if access_lifetime <= 0 else now + timedelta(seconds=access_lifetime)
        )

        payload: dict[str, Any] = {
            "user_id": user.pk,
            "username": user.get_username(),
            "iat": now,
            "type": "access",
        }
        if organisation_id is not None:
            payload[get_multitenancy_settings().tenant_claim] = str(organisation_id)
        if expiration is not None:
            payload["exp"] = expiration

        token = jwt.encode(payload, cls.get_jwt_secret(), algorithm="HS256")
        return {"token": token, "expires_at": expiration}

    @classmethod
    def verify_token(
        cls, token: str, expected_type: Optional[str] = None
    ) -> Optional[dict[str, Any]]:
        """
        Verify and decode a JWT token.

        Returns the decoded payload, or ``None`` if the token is invalid,
        expired or of the wrong type.
        """
        try:
            payload = jwt.decode(token, cls.get_jwt_secret(), algorithms=["HS256"])
            if expected_type and payload.get("type") != expected_type:
                logger.warning(
                    "JWT refused: expected type '%s', got '%s'",
                    expected_type,
                    payload.get("type"),
                )
                return None
            return payload
        except jwt.ExpiredSignatureError:
            logger.warning("JWT expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning("Invalid JWT: %s", e)
            return None


__all__ = ["JWTManager"]
