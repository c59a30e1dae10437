"""
Bearer token authentication for the report endpoints.
"""

from .decorators import get_user_from_jwt, jwt_required
from .jwt import JWTManager

__all__ = ["JWTManager", "jwt_required", "get_user_from_jwt"]
