"""Auth domain models for users and sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from campusvoice.complaints.models import new_id, utcnow


class Role(str, Enum):
    """Role hierarchy: admin > moderator > student."""

    admin = "admin"
    moderator = "moderator"
    student = "student"

    @property
    def level(self) -> int:
        """Return numeric level for comparison (higher = more privileges)."""
        return {
            Role.admin: 30,
            Role.moderator: 20,
            Role.student: 10,
        }[self]


@dataclass
class User:
    """A registered student, faculty member or staff account."""

    username: str
    email: str
    password_hash: str
    role: Role = Role.student
    roll_number: str = ""
    user_type: str = "student"  # student | faculty
    banned_until: Optional[datetime] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if isinstance(self.role, str):
            self.role = Role(self.role)

    def is_banned(self, now: Optional[datetime] = None) -> bool:
        return self.banned_until is not None and self.banned_until > (now or utcnow())


@dataclass
class Session:
    """An active login session identified by an opaque bearer token."""

    user_id: str
    token: str
    expires_at: datetime
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
