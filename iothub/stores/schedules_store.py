"""Schedule rows."""

import sqlite3
from datetime import datetime, timezone
from typing import List

from ..models import ActiveSchedule, Schedule, ScheduleAction


def count_schedules(conn: sqlite3.Connection, owner_email: str) -> int:
    row = conn.execute(
        "SELECT COUNT(id) AS schedule_count FROM schedules WHERE user_email = ?",
        (owner_email,),
    ).fetchone()
    return int(row["schedule_count"] or 0)


def insert_schedule(
    conn: sqlite3.Connection,
    owner_email: str,
    device_id: int,
    cron_expression: str,
    action: ScheduleAction,
) -> int:
    cur = conn.execute(
        """
        INSERT INTO schedules (user_email, device_id, cron_expression, action, is_active, created_at)
        VALUES (?, ?, ?, ?, 1, ?)
        """,
        (
            owner_email,
            device_id,
            cron_expression,
            action.value,
            datetime.now(timezone.utc).isoformat(),
        ),
    )
    return int(cur.lastrowid)


def list_schedules(conn: sqlite3.Connection, owner_email: str) -> List[Schedule]:
    """Owner's schedules with the device display name, newest first."""
    rows = conn.execute(
        """
        SELECT s.id, s.user_email, s.device_id, s.cron_expression, s.action,
               s.is_active, s.created_at, d.name AS device_name
        FROM schedules s
        JOIN devices d ON s.device_id = d.id
        WHERE s.user_email = ?
        ORDER BY s.created_at DESC, s.id DESC
        """,
        (owner_email,),
    ).fetchall()
    return [
        Schedule(
            id=r["id"],
            owner_email=r["user_email"],
            device_id=r["device_id"],
            cron_expression=r["cron_expression"],
            action=ScheduleAction(r["action"]),
            is_active=bool(r["is_active"]),
            device_name=r["device_name"],
            created_at=r["created_at"],
        )
        for r in rows
    ]


def delete_schedule(conn: sqlite3.Connection, owner_email: str, schedule_id: int) -> int:
    cur = conn.execute(
        "DELETE FROM schedules WHERE id = ? AND user_email = ?",
        (schedule_id, owner_email),
    )
    return cur.rowcount


def set_schedule_active(conn: sqlite3.Connection, owner_email: str, schedule_id: int, active: bool) -> int:
    cur = conn.execute(
        "UPDATE schedules SET is_active = ? WHERE id = ? AND user_email = ?",
        (1 if active else 0, schedule_id, owner_email),
    )
    return cur.rowcount


def list_active_schedules(conn: sqlite3.Connection) -> List[ActiveSchedule]:
    """All active schedules across owners, joined to their device's dispatch key."""
    rows = conn.execute(
        """
        SELECT s.id, s.cron_expression, s.action, d.device_key
        FROM schedules s
        JOIN devices d ON s.device_id = d.id
        WHERE s.is_active = 1
        ORDER BY s.id ASC
        """
    ).fetchall()
    return [
        ActiveSchedule(
            schedule_id=r["id"],
            device_key=r["device_key"],
            cron_expression=r["cron_expression"],
            action=ScheduleAction(r["action"]),
        )
        for r in rows
    ]
