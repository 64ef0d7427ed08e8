"""User rows. Email is the primary key, so duplicate signups fail in the insert."""

import sqlite3
from datetime import datetime, timezone
from typing import Optional

from ..auth.models import User


def insert_user(conn: sqlite3.Connection, email: str, password_hash: str) -> User:
    """Insert a user. Raises sqlite3.IntegrityError if the email is taken."""
    created_at = datetime.now(timezone.utc)
    conn.execute(
        "INSERT INTO users (email, password_hash, created_at) VALUES (?, ?, ?)",
        (email, password_hash, created_at.isoformat()),
    )
    return User(email=email, password_hash=password_hash, created_at=created_at)


def get_user_by_email(conn: sqlite3.Connection, email: str) -> Optional[User]:
    row = conn.execute(
        "SELECT email, password_hash, created_at FROM users WHERE email = ?",
        (email,),
    ).fetchone()
    if row is None:
        return None
    return User(
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )
