"""
Dispatch of due actions to devices.

A DispatchSink performs the device-facing side effect for one
(device_key, action) pair. The Dispatcher runs each call on a worker
thread and returns at once, so a slow or hanging sink never holds up the
evaluation pass. Sink failures are logged inside the worker and never
reach the matcher. Nothing is retried.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import requests

from ..models import ScheduleAction
from ..utils.config_loader import DispatchSettings
from ..utils.exceptions import ConfigError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class DispatchSink(ABC):
    """Base interface for device-facing dispatch"""

    @abstractmethod
    def dispatch(self, device_key: str, action: ScheduleAction) -> None:
        """Signal the device. May raise; the Dispatcher logs and drops errors."""
        pass


class LoggingDispatchSink(DispatchSink):
    """Records the action in the log only. Stand-in until a device protocol is wired."""

    def dispatch(self, device_key: str, action: ScheduleAction) -> None:
        logger.info("Action dispatched", device_key=device_key, action=action.value)


class WebhookDispatchSink(DispatchSink):
    """POSTs {device_key, action} as JSON to a configured URL."""

    def __init__(self, url: str, timeout_seconds: float = 5.0, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def dispatch(self, device_key: str, action: ScheduleAction) -> None:
        response = self.session.post(
            self.url,
            json={"device_key": device_key, "action": action.value},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        logger.info(
            "Action delivered to webhook",
            device_key=device_key,
            action=action.value,
            status_code=response.status_code,
        )


def build_dispatch_sink(settings: DispatchSettings) -> DispatchSink:
    if settings.mode == "webhook":
        if not settings.webhook_url:
            raise ConfigError("dispatch.webhook_url is required when dispatch.mode is 'webhook'")
        return WebhookDispatchSink(settings.webhook_url, timeout_seconds=settings.timeout_seconds)
    return LoggingDispatchSink()


class Dispatcher:
    """Fire-and-forget front for a DispatchSink."""

    def __init__(self, sink: DispatchSink, max_workers: int = 4):
        self.sink = sink
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="dispatch")

    def submit(self, device_key: str, action: ScheduleAction) -> Future:
        """Queue one dispatch and return without waiting for it."""
        return self._executor.submit(self._run, device_key, action)

    def _run(self, device_key: str, action: ScheduleAction) -> bool:
        try:
            self.sink.dispatch(device_key, action)
            return True
        except Exception as e:
            logger.exception(
                "Dispatch failed",
                device_key=device_key,
                action=action.value,
                error=str(e),
            )
            return False

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
