"""FastAPI dependencies for authentication and authorization.

The principal is built from the bearer token alone; the role inside the
token is trusted until the token expires. Handlers that need the live user
record load it themselves.

Usage:
    @router.get("/documents")
    def list_documents(principal: CurrentPrincipal):
        ...

    @router.get("/users")
    def list_users(admin: AuthedPrincipal = Depends(require_admin)):
        ...
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Optional
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..errors import AuthenticationError, ForbiddenError
from .jwt import decode_token
from .roles import UserRole

logger = logging.getLogger(__name__)

# auto_error is off so a missing header yields our own 401 body
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthedPrincipal:
    """Identity extracted from a verified session token."""
    id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthedPrincipal:
    """Validate the bearer token and return the principal it names.

    Raises:
        AuthenticationError: If the token is missing, malformed, tampered
            with, expired, or carries unusable claims
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("missing bearer token")

    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("token has expired")
    except jwt.InvalidTokenError as e:
        logger.info("Rejected bearer token", extra={"reason": str(e)})
        raise AuthenticationError("invalid token")

    try:
        user_id = UUID(str(payload.get("sub")))
        role = UserRole(payload.get("role"))
    except ValueError:
        raise AuthenticationError("invalid token claims")

    return AuthedPrincipal(id=user_id, role=role)


def require_admin(
    principal: AuthedPrincipal = Depends(get_current_principal),
) -> AuthedPrincipal:
    """Dependency for ADMIN-only endpoints.

    Raises:
        ForbiddenError: If the principal is not an admin
    """
    if not principal.is_admin:
        raise ForbiddenError("admin role required")
    return principal


# Type aliases for dependency injection
CurrentPrincipal = Annotated[AuthedPrincipal, Depends(get_current_principal)]
AdminPrincipal = Annotated[AuthedPrincipal, Depends(require_admin)]
