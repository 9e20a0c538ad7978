"""Accounts, sessions and role checks."""

from campusvoice.auth.models import Role, Session, User
from campusvoice.auth.passwords import hash_password, verify_password
from campusvoice.auth.permissions import has_permission, require_role

__all__ = [
    "Role",
    "Session",
    "User",
    "has_permission",
    "hash_password",
    "require_role",
    "verify_password",
]
