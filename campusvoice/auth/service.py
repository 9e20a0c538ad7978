"""Account management: signup, login sessions, passwords, bans and roles."""

from __future__ import annotations

import logging
import re
import secrets
from datetime import timedelta
from typing import Optional

from campusvoice.auth.models import Role, Session, User
from campusvoice.auth.passwords import hash_password, verify_password
from campusvoice.complaints.models import utcnow
from campusvoice.config import Settings
from campusvoice.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from campusvoice.moderation import ban_expiration
from campusvoice.storage.base import Storage

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
ROLL_NUMBER_PATTERN = re.compile(r"^(2[2-6])(cs|ce|me|ee)\d{2}$", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USER_TYPES = ("student", "faculty")


class AuthService:
    """Users and sessions on top of a :class:`Storage`."""

    def __init__(self, storage: Storage, settings: Optional[Settings] = None) -> None:
        self._storage = storage
        self._settings = settings or Settings()

    # -- accounts ------------------------------------------------------------

    def signup(
        self,
        username: str,
        email: str,
        password: str,
        roll_number: str = "",
        user_type: str = "student",
    ) -> User:
        """Create an account. The very first account becomes an admin.

        Raises
        ------
        ValidationError
            On a missing username, malformed email, short password, bad roll
            number or unknown user type.
        ConflictError
            If the username or email is taken.
        """
        username = (username or "").strip()
        email = (email or "").strip()
        if not username:
            raise ValidationError("Username is required")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email address")
        self._check_password(password)
        if user_type not in USER_TYPES:
            raise ValidationError(f"User type must be one of: {', '.join(USER_TYPES)}")
        if roll_number and not ROLL_NUMBER_PATTERN.match(roll_number):
            raise ValidationError("Invalid roll number format (e.g. 23cs45)")

        with self._storage.transaction():
            if self._storage.get_user_by_username(username) is not None:
                raise ConflictError("Username already exists")
            if self._storage.get_user_by_email(email) is not None:
                raise ConflictError("Email already registered")

            first = not self._storage.list_users()
            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                role=Role.admin if first else Role.student,
                roll_number=roll_number.lower(),
                user_type=user_type,
            )
            self._storage.add_user(user)

        logger.info("Registered user %s as %s", user.username, user.role.value)
        return user

    def get_user(self, user_id: str) -> User:
        user = self._storage.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    def list_users(self) -> list[User]:
        return self._storage.list_users()

    # -- sessions ------------------------------------------------------------

    def login(self, username: str, password: str) -> tuple[User, Session]:
        """Verify credentials and open a session."""
        user = self._storage.get_user_by_username(username or "")
        if user is None or not verify_password(password or "", user.password_hash):
            raise AuthenticationError("Invalid credentials")

        session = Session(
            user_id=user.id,
            token=secrets.token_urlsafe(48),
            expires_at=utcnow() + timedelta(hours=self._settings.session_hours),
        )
        self._storage.add_session(session)
        logger.info("User %s logged in", user.username)
        return user, session

    def logout(self, token: str) -> bool:
        return self._storage.delete_session(token)

    def current_user(self, token: Optional[str]) -> Optional[User]:
        """Return the user behind a live session token, or None.

        Expired sessions are removed on sight.
        """
        if not token:
            return None
        session = self._storage.get_session(token)
        if session is None:
            return None
        if session.expires_at <= utcnow():
            self._storage.delete_session(token)
            return None
        return self._storage.get_user(session.user_id)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = self.get_user(user_id)
        if not verify_password(current_password or "", user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        self._check_password(new_password, label="New password")
        user.password_hash = hash_password(new_password)
        self._storage.save_user(user)
        logger.info("Password changed for %s", user.username)

    @staticmethod
    def _check_password(password: Optional[str], label: str = "Password") -> None:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters")

    # -- administration ------------------------------------------------------

    def ban(self, user_id: str, hours: Optional[int] = None) -> User:
        """Ban a user for *hours*, or for the abuse ban length when omitted."""
        if hours is None:
            hours = self._settings.abuse_ban_hours
        if hours <= 0:
            raise ValidationError("Ban duration must be positive")
        user = self.get_user(user_id)
        user.banned_until = ban_expiration(hours)
        self._storage.save_user(user)
        logger.warning("User %s banned until %s", user.username, user.banned_until.isoformat())
        return user

    def unban(self, user_id: str) -> User:
        user = self.get_user(user_id)
        user.banned_until = None
        self._storage.save_user(user)
        logger.info("User %s unbanned", user.username)
        return user

    def set_role(self, user_id: str, role: Role | str) -> User:
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError(f"Invalid role: {role}") from None
        user = self.get_user(user_id)
        user.role = role
        self._storage.save_user(user)
        logger.info("User %s is now %s", user.username, role.value)
        return user
