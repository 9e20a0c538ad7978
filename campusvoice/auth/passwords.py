"""Password hashing with scrypt.

Stored form is ``<hex digest>.<hex salt>``.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

_KEY_LENGTH = 64
_SALT_BYTES = 16


def _derive(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=16384,
        r=8,
        p=1,
        dklen=_KEY_LENGTH,
    )


def hash_password(password: str) -> str:
    salt = secrets.token_hex(_SALT_BYTES)
    return f"{_derive(password, salt).hex()}.{salt}"


def verify_password(password: str, stored: str) -> bool:
    """Constant-time check of *password* against a stored hash.

    Malformed stored values never verify.
    """
    digest, sep, salt = stored.partition(".")
    if not sep or not digest or not salt:
        return False
    try:
        expected = bytes.fromhex(digest)
    except ValueError:
        return False
    return hmac.compare_digest(_derive(password, salt), expected)
