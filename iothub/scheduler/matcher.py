"""
Schedule evaluation pass.

run_once() reads every active schedule with its device key, checks each
against the current UTC minute and hour, and submits the due ones to the
Dispatcher. Evaluation is isolated per schedule: a failure on one is
logged and the pass moves on. Schedules changed by concurrent requests
may or may not be seen by a pass in progress.
"""

from datetime import datetime
from typing import List, Optional

from ..models import ActiveSchedule
from ..stores import schedules_store
from ..stores.database import Database
from ..utils.clock import Clock, as_utc, utc_now
from ..utils.logger import get_logger
from .cron import is_due
from .dispatch import Dispatcher

logger = get_logger(__name__)


class ScheduleMatcher:
    """Evaluates active schedules against the clock."""

    def __init__(self, db: Database, dispatcher: Dispatcher, clock: Optional[Clock] = None):
        self.db = db
        self.dispatcher = dispatcher
        self.clock = clock or utc_now

    def _load_active(self) -> List[ActiveSchedule]:
        with self.db.connect() as conn:
            return schedules_store.list_active_schedules(conn)

    def run_once(self, now: Optional[datetime] = None) -> List[ActiveSchedule]:
        """Run one pass and return the schedules that were dispatched."""
        now_utc = as_utc(now) if now is not None else as_utc(self.clock())
        logger.info("Scheduler pass started", utc_time=now_utc.isoformat())

        try:
            active = self._load_active()
        except Exception as e:
            logger.exception("Scheduler could not load active schedules", error=str(e))
            return []

        if not active:
            logger.info("No active schedules found")
            return []

        dispatched: List[ActiveSchedule] = []
        for schedule in active:
            try:
                if not is_due(schedule.cron_expression, now_utc):
                    continue
                logger.info(
                    "Schedule due",
                    schedule_id=schedule.schedule_id,
                    cron_expression=schedule.cron_expression,
                )
                self.dispatcher.submit(schedule.device_key, schedule.action)
                dispatched.append(schedule)
            except Exception as e:
                logger.exception(
                    "Schedule evaluation failed",
                    schedule_id=schedule.schedule_id,
                    error=str(e),
                )

        logger.info(
            "Scheduler pass completed",
            active=len(active),
            dispatched=len(dispatched),
        )
        return dispatched
