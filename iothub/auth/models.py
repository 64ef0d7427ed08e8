"""
Auth models.

Users are keyed by email. Sessions are not persisted: the signed token
is the session, so the only session-side model is the identity a valid
token resolves to.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Registered user (email-based)."""

    email: str
    password_hash: str
    created_at: Optional[datetime] = None

    class Config:
        frozen = True


class AuthenticatedUser(BaseModel):
    """Identity carried by a verified session token."""

    email: str
