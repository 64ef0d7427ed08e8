"""
SQLite database handle and schema.

Foreign keys are enabled on every connection so deleting a device removes
its schedules in the same statement.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from ..utils.exceptions import InternalError
from ..utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    email TEXT PRIMARY KEY,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS devices (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_email TEXT NOT NULL,
    name TEXT NOT NULL,
    device_key TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_devices_user_email ON devices(user_email);

CREATE TABLE IF NOT EXISTS schedules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_email TEXT NOT NULL,
    device_id INTEGER NOT NULL REFERENCES devices(id) ON DELETE CASCADE,
    cron_expression TEXT NOT NULL,
    action TEXT NOT NULL CHECK (action IN ('ON', 'OFF')),
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_schedules_user_email ON schedules(user_email);
CREATE INDEX IF NOT EXISTS idx_schedules_active ON schedules(is_active);
"""


class Database:
    """Opens short-lived connections to a single SQLite file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def initialize(self) -> None:
        """Create the data directory and tables if they do not exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.connect() as conn:
            conn.executescript(SCHEMA)
        logger.info("Database initialized", path=str(self.path))

    @contextmanager
    def connect(self, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        """
        Yield a connection in autocommit mode.

        With immediate=True the block runs inside BEGIN IMMEDIATE, holding
        the write lock from the first read until commit.

        IntegrityError propagates so callers can map constraint violations;
        every other sqlite3.Error becomes InternalError.
        """
        conn = None
        try:
            conn = sqlite3.connect(str(self.path), isolation_level=None, timeout=10)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            if immediate:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    yield conn
                except BaseException:
                    conn.execute("ROLLBACK")
                    raise
                conn.execute("COMMIT")
            else:
                yield conn
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            logger.exception("Database error", path=str(self.path), error=str(e))
            raise InternalError("Database operation failed") from e
        finally:
            if conn is not None:
                conn.close()
