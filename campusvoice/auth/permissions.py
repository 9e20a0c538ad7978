"""Role-based access control.

Role hierarchy: admin > moderator > student
"""

from __future__ import annotations

from campusvoice.auth.models import Role, User
from campusvoice.errors import PermissionDeniedError


def has_permission(user: User, required_role: Role) -> bool:
    """Check if a user's role meets or exceeds the required role level.

    Parameters
    ----------
    user:
        The user to check.
    required_role:
        The minimum role required.

    Returns
    -------
    bool
        True if user's role level >= required role level.
    """
    user_role = user.role if isinstance(user.role, Role) else Role(user.role)
    return user_role.level >= required_role.level


def require_role(user: User, role: Role) -> None:
    """Validate that a user has at least the given role.

    Raises :class:`PermissionDeniedError` (HTTP 403 at the API edge) if the
    user lacks the required role.
    """
    if not has_permission(user, role):
        raise PermissionDeniedError(f"Requires role '{role.value}' or higher")
