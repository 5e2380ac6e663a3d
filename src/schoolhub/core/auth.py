"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.
Access tokens are issued by the identity service; this module validates
them and applies role-based access control.

SECURITY NOTE:
- Development mode test tokens are ONLY accepted when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production to disable them
"""

import logging
import os
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from schoolhub.core.config import settings
from schoolhub.core.security import decode_token
from schoolhub.modules.users.models import UserRole

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)


@dataclass
class CurrentUser:
    """
    The authenticated caller, populated from JWT claims.

    Attributes:
        id: User id (UUID string)
        role: User role
        email: User's email address
        username: User's username (optional)
    """

    id: str
    role: UserRole
    email: str = ""
    username: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id}, role={self.role.value})"


def _is_dev_mode_safe() -> bool:
    """
    Check if development test tokens may be accepted.

    Both the settings and the raw PYTHON_ENV variable must agree that this
    is a development environment.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()

    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var not in ("production", "staging")
    )

    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )

    return is_safe


_DEVELOPMENT_MODE = _is_dev_mode_safe()

# Fixed ids for the "dev-<role>" test tokens
_DEV_USER_IDS = {
    UserRole.ADMIN: "00000000-0000-0000-0000-000000000001",
    UserRole.TEACHER: "00000000-0000-0000-0000-000000000002",
    UserRole.STUDENT: "00000000-0000-0000-0000-000000000003",
}


def _parse_role(value: str) -> UserRole:
    for role in UserRole:
        if role.value.lower() == value.lower():
            return role
    raise ValueError(f"Unknown role: {value}")


def _dev_token_user(token: str) -> CurrentUser | None:
    """
    Resolve development test tokens.

    Accepted forms:
        dev-admin, dev-teacher, dev-student
        <role>:<uuid>   e.g. teacher:3f0c...  (acts as that user)
    """
    if token.startswith("dev-"):
        try:
            role = _parse_role(token[4:])
        except ValueError:
            return None
        return CurrentUser(id=_DEV_USER_IDS[role], role=role, email=f"{token}@schoolhub.dev")

    if ":" in token:
        role_part, _, id_part = token.partition(":")
        try:
            role = _parse_role(role_part)
            user_id = str(UUID(id_part))
        except ValueError:
            return None
        return CurrentUser(id=user_id, role=role, email=f"{role.value.lower()}@schoolhub.dev")

    return None


def _validate_jwt_token(token: str) -> CurrentUser:
    """
    Validate a JWT and extract the caller.

    Raises:
        HTTPException 401: If the token is invalid, expired, or has bad claims
    """
    if _DEVELOPMENT_MODE:
        dev_user = _dev_token_user(token)
        if dev_user is not None:
            logger.debug(f"Development mode: using test token for {dev_user}")
            return dev_user

    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "error": "INVALID_TOKEN",
                "message": "Invalid token. Please log in again.",
            },
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = payload.get("sub")
        if not user_id:
            raise ValueError("Missing 'sub' claim in token")

        if payload.get("type", "access") != "access":
            raise ValueError(f"Invalid token type: {payload.get('type')}")

        return CurrentUser(
            id=str(UUID(user_id)),
            role=_parse_role(payload.get("role", "")),
            email=payload.get("email", ""),
            username=payload.get("username"),
        )

    except ValueError as e:
        logger.warning(f"Invalid token claims: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "error": "INVALID_TOKEN_CLAIMS",
                "message": "Token contains invalid or missing claims.",
            },
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """
    FastAPI dependency that validates the bearer token and returns the caller.

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
    """
    user = _validate_jwt_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user}")
    return user


def require_roles(*roles: UserRole) -> Callable[..., Coroutine[Any, Any, CurrentUser]]:
    """
    Build a dependency that only admits callers with one of ``roles``.

    Usage:
        @router.post("", dependencies=[Depends(require_roles(UserRole.ADMIN))])

    Raises:
        HTTPException 403: If the caller's role is not in ``roles``
    """

    async def _dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            logger.warning(
                f"Access denied: user {user.id} has role '{user.role.value}', "
                f"requires one of {[r.value for r in roles]}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "success": False,
                    "error": "ROLE_NOT_AUTHORIZED",
                    "message": f"User role '{user.role.value}' is not authorized to access this route",
                },
            )
        return user

    return _dependency


__all__ = [
    "CurrentUser",
    "get_current_user",
    "require_roles",
]
