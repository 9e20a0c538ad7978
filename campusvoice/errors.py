"""Exception taxonomy shared by the services and the web layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class CampusVoiceError(Exception):
    """Base class for every error raised on purpose by campusvoice."""


class ValidationError(CampusVoiceError):
    """Input was missing or malformed."""


class NotFoundError(CampusVoiceError):
    """A referenced record does not exist."""


class ConflictError(CampusVoiceError):
    """The operation would duplicate an existing record."""


class AuthenticationError(CampusVoiceError):
    """Credentials or session token were not accepted."""


class PermissionDeniedError(CampusVoiceError):
    """The caller is authenticated but not allowed to do this."""


class BannedError(PermissionDeniedError):
    """The caller is serving a temporary ban."""

    def __init__(self, banned_until: datetime, message: Optional[str] = None) -> None:
        self.banned_until = banned_until
        super().__init__(message or "Your account is temporarily banned")
