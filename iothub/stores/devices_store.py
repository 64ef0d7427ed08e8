"""
Device rows.

Mutations are filtered on both id and owner in a single statement, so
ownership is enforced by the predicate rather than by a prior lookup.
"""

import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

from ..models import Device


def _row_to_device(row: sqlite3.Row) -> Device:
    return Device(
        id=row["id"],
        owner_email=row["user_email"],
        name=row["name"],
        device_key=row["device_key"],
        created_at=row["created_at"],
    )


def count_devices(conn: sqlite3.Connection, owner_email: str) -> int:
    row = conn.execute(
        "SELECT COUNT(id) AS device_count FROM devices WHERE user_email = ?",
        (owner_email,),
    ).fetchone()
    return int(row["device_count"] or 0)


def insert_device(conn: sqlite3.Connection, owner_email: str, name: str, device_key: str) -> int:
    """Insert a device and return its id. Raises sqlite3.IntegrityError on a duplicate key."""
    cur = conn.execute(
        "INSERT INTO devices (user_email, name, device_key, created_at) VALUES (?, ?, ?, ?)",
        (owner_email, name, device_key, datetime.now(timezone.utc).isoformat()),
    )
    return int(cur.lastrowid)


def list_devices(conn: sqlite3.Connection, owner_email: str) -> List[Device]:
    rows = conn.execute(
        """
        SELECT id, user_email, name, device_key, created_at
        FROM devices
        WHERE user_email = ?
        ORDER BY id ASC
        """,
        (owner_email,),
    ).fetchall()
    return [_row_to_device(r) for r in rows]


def get_owned_device(conn: sqlite3.Connection, owner_email: str, device_id: int) -> Optional[Device]:
    row = conn.execute(
        """
        SELECT id, user_email, name, device_key, created_at
        FROM devices
        WHERE id = ? AND user_email = ?
        """,
        (device_id, owner_email),
    ).fetchone()
    return _row_to_device(row) if row else None


def delete_device(conn: sqlite3.Connection, owner_email: str, device_id: int) -> int:
    """Delete an owned device (schedules cascade). Returns the number of devices removed."""
    cur = conn.execute(
        "DELETE FROM devices WHERE id = ? AND user_email = ?",
        (device_id, owner_email),
    )
    return cur.rowcount
