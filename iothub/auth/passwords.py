"""
Password hashing and verification.

Stored values are base64(salt || key) where salt is 16 random bytes and
key is PBKDF2-HMAC-SHA256 (100,000 iterations, 32 bytes) of the UTF-8
password. The format is self-describing only by convention, so the
parameters below must never change for existing rows.
"""

import base64
import re
import secrets

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..utils.exceptions import ValidationError

SALT_BYTES = 16
KEY_BYTES = 32
PBKDF2_ITERATIONS = 100_000

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARS = '!@#$%^&*(),.?":{}|<>'
PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 chars and include 1 alphabet/1 special character."
)

_HAS_ALPHA = re.compile(r"[a-zA-Z]")


def _kdf(salt: bytes) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_BYTES,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt."""
    salt = secrets.token_bytes(SALT_BYTES)
    key = _kdf(salt).derive(password.encode("utf-8"))
    return base64.b64encode(salt + key).decode("ascii")


def verify_password(password: str, stored_hash: str) -> bool:
    """
    Verify a password against its stored hash.

    PBKDF2HMAC.verify compares in constant time. Any decode problem fails
    closed.
    """
    try:
        combined = base64.b64decode(stored_hash.encode("ascii"), validate=True)
        if len(combined) != SALT_BYTES + KEY_BYTES:
            return False
        salt, expected = combined[:SALT_BYTES], combined[SALT_BYTES:]
        _kdf(salt).verify(password.encode("utf-8"), expected)
        return True
    except Exception:
        return False


def check_password_policy(password: str) -> None:
    """Raise ValidationError unless the password meets the signup policy."""
    if (
        len(password) < PASSWORD_MIN_LENGTH
        or not _HAS_ALPHA.search(password)
        or not any(c in PASSWORD_SPECIAL_CHARS for c in password)
    ):
        raise ValidationError(PASSWORD_POLICY_MESSAGE)
