"""Auth middleware -- FastAPI dependencies for the service graph and current user.

Authentication is ``Authorization: Bearer <session_token>``; tokens come from
``POST /api/auth/login``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from campusvoice.auth.models import Role, User
from campusvoice.auth.permissions import require_role
from campusvoice.config import load_settings
from campusvoice.services import Services, build_services

# Shared service graph
_services: Optional[Services] = None


def get_services() -> Services:
    """Return the singleton :class:`Services`, built from settings on first use."""
    global _services
    if _services is None:
        _services = build_services(load_settings())
    return _services


def set_services(services: Optional[Services]) -> None:
    """Replace (or with *None*, reset) the shared service graph."""
    global _services
    _services = services


def bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Extract the raw token from an ``Authorization: Bearer`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_optional_user(
    token: Optional[str] = Depends(bearer_token),
    services: Services = Depends(get_services),
) -> Optional[User]:
    """Current user, or ``None`` for anonymous requests.

    Use this for endpoints that work for both anonymous and authenticated users.
    """
    return services.auth.current_user(token)


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """FastAPI dependency that requires a valid session.

    Raises ``401 Unauthorized`` if no valid credentials are provided.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_staff_user(user: User = Depends(get_current_user)) -> User:
    """Moderators and admins."""
    require_role(user, Role.moderator)
    return user


async def get_admin_user(user: User = Depends(get_current_user)) -> User:
    require_role(user, Role.admin)
    return user
