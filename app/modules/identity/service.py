"""Caller resolution from identity provider tokens."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from app.core.enums import RoleEnum
from app.core.security import bearer_scheme, decode_token
from app.modules.identity.schemas import Caller
from app.shared.exceptions import UnauthorizedException


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_caller(token: str) -> Caller:
    """Resolve caller identity and role from access token claims."""
    payload = decode_token(token)
    if payload.get("type") != "access":
        raise _unauthenticated("Invalid access token")

    subject = payload.get("sub")
    if not subject:
        raise _unauthenticated("Token subject is missing")

    try:
        caller_id = UUID(str(subject))
        role = RoleEnum(str(payload.get("role", "")).lower())
    except ValueError as exc:
        raise _unauthenticated("Token claims are invalid") from exc

    return Caller(id=caller_id, role=role)


async def get_current_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Caller:
    """Resolve currently authenticated caller from bearer token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthenticated("Not authenticated")
    return resolve_caller(credentials.credentials)


def require_roles(*roles: RoleEnum):
    """Dependency factory for role-based access."""

    async def _checker(current_caller: Caller = Depends(get_current_caller)) -> Caller:
        if current_caller.role not in roles:
            raise UnauthorizedException("Operation not permitted for your role")
        return current_caller

    return _checker
