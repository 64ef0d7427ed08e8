"""
Authentication service layer.

- Email/password users with PBKDF2 hashes (see passwords.py)
- Stateless HS256 session tokens with a 24 hour lifetime (see tokens.py)
- Users persisted in the SQLite users table

Login failures use one generic message whether the email is unknown or
the password is wrong.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from ..stores import users_store
from ..stores.database import Database
from ..utils.config_loader import AuthSettings
from ..utils.exceptions import AuthError, ConflictError, ValidationError
from ..utils.logger import get_logger
from .models import AuthenticatedUser, User
from .passwords import check_password_policy, hash_password, verify_password
from .tokens import issue_token, verify_token

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials."
INVALID_TOKEN = "Invalid or Expired Token. Please log in again."
MISSING_TOKEN = "Missing Authorization Token."


class AuthService:
    """Signup, login and token resolution against one store."""

    def __init__(self, db: Database, settings: AuthSettings):
        self.db = db
        self.settings = settings

    def signup(self, email: str, password: str) -> User:
        """
        Create a new user.

        - Email must be unique.
        - Password must pass the policy and is stored only as a hash.
        """
        if not email or not password:
            raise ValidationError("Email and password required.")
        check_password_policy(password)

        password_hash = hash_password(password)
        with self.db.connect() as conn:
            try:
                user = users_store.insert_user(conn, email, password_hash)
            except sqlite3.IntegrityError as e:
                raise ConflictError("User with this email already exists.") from e
        logger.info("User created", email=email)
        return user

    def login(self, email: str, password: str) -> str:
        """Return a session token if the credentials are valid."""
        if not email or not password:
            raise ValidationError("Email and password required.")
        with self.db.connect() as conn:
            user = users_store.get_user_by_email(conn, email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login rejected", email=email)
            raise AuthError(INVALID_CREDENTIALS)
        logger.info("Login succeeded", email=email)
        return self.issue(email)

    def issue(self, email: str) -> str:
        return issue_token(
            email,
            self.settings.jwt_secret,
            ttl_hours=self.settings.token_ttl_hours,
            issuer=self.settings.issuer,
            audience=self.settings.audience,
        )

    def resolve_token(self, token: Optional[str]) -> AuthenticatedUser:
        """Return the identity behind a token or raise AuthError."""
        if not token:
            raise AuthError(MISSING_TOKEN)
        identity = verify_token(
            token,
            self.settings.jwt_secret,
            issuer=self.settings.issuer,
            audience=self.settings.audience,
        )
        if identity is None:
            raise AuthError(INVALID_TOKEN)
        return identity
