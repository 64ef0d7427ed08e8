"""Background trigger that runs the schedule matcher at second :00 of every minute."""

import threading
from typing import Optional

import schedule

from ..utils.logger import get_logger
from .matcher import ScheduleMatcher

logger = get_logger(__name__)


class MinuteTrigger:
    """Runs schedule.run_pending() for one matcher job on a daemon thread."""

    def __init__(self, matcher: ScheduleMatcher, poll_seconds: float = 1.0):
        self.matcher = matcher
        self.poll_seconds = poll_seconds
        self._jobs = schedule.Scheduler()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _fire(self) -> None:
        try:
            self.matcher.run_once()
        except Exception as e:
            logger.exception("Scheduler pass crashed", error=str(e))

    def _loop(self) -> None:
        logger.info("Minute trigger loop started")
        while not self._stop.is_set():
            try:
                self._jobs.run_pending()
            except Exception as e:
                logger.error("Error in minute trigger loop", error=str(e))
            self._stop.wait(self.poll_seconds)
        logger.info("Minute trigger loop stopped")

    def start(self) -> None:
        if self._thread is not None:
            logger.warning("Minute trigger already running")
            return
        self._jobs.clear()
        self._jobs.every().minute.at(":00").do(self._fire)
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            daemon=True,
            name="schedule-matcher",
        )
        self._thread.start()
        logger.info("Minute trigger started")

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            if self._thread.is_alive():
                logger.warning("Minute trigger thread still alive after timeout, continuing shutdown")
            self._thread = None
        self._jobs.clear()
        logger.info("Minute trigger stopped")
