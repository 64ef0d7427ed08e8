"""
Quota-enforced device and schedule registry.

Every operation is scoped to an authenticated owner email. Quotas are
checked as count, compare, insert. Without strict_quota these run as
separate autocommit statements, so concurrent creations by the same
owner can each see a count below the limit and overshoot it by the
number of racers. With strict_quota the three steps share one
BEGIN IMMEDIATE transaction.
"""

import sqlite3
from typing import List, Optional, Union

from ..models import Device, Schedule, ScheduleAction
from ..scheduler.cron import validate_cron_expression
from ..stores import devices_store, schedules_store
from ..stores.database import Database
from ..utils.config_loader import RegistrySettings
from ..utils.exceptions import (
    ConflictError,
    NotFoundError,
    OwnershipError,
    QuotaExceededError,
    ValidationError,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _parse_action(action: Union[str, ScheduleAction, None]) -> ScheduleAction:
    if isinstance(action, ScheduleAction):
        return action
    try:
        return ScheduleAction(action)
    except ValueError:
        raise ValidationError('Action must be "ON" or "OFF".')


class ResourceRegistry:
    """Devices and schedules for one store. Holds no per-request state."""

    def __init__(self, db: Database, settings: Optional[RegistrySettings] = None):
        self.db = db
        self.settings = settings or RegistrySettings()

    # ------------------------------------------------------------------
    # Devices
    # ------------------------------------------------------------------

    def add_device(self, owner_email: str, name: str, device_key: str) -> int:
        """Register a device and return the owner's new device count."""
        if not name or not device_key:
            raise ValidationError("Device name and key are required.")
        max_label = self.settings.max_label_length
        if len(name) > max_label:
            raise ValidationError(f"Device name cannot exceed {max_label} characters.")

        max_devices = self.settings.max_devices
        with self.db.connect(immediate=self.settings.strict_quota) as conn:
            current = devices_store.count_devices(conn, owner_email)
            if current >= max_devices:
                logger.info("Device quota reached", owner=owner_email, limit=max_devices)
                raise QuotaExceededError(
                    f"Limit reached: Free Tier users can register a maximum of {max_devices} devices.",
                    limit=max_devices,
                )
            try:
                device_id = devices_store.insert_device(conn, owner_email, name, device_key)
            except sqlite3.IntegrityError as e:
                raise ConflictError("This unique device key is already registered.") from e

        logger.info("Device registered", owner=owner_email, device_id=device_id)
        return current + 1

    def list_devices(self, owner_email: str) -> List[Device]:
        with self.db.connect() as conn:
            return devices_store.list_devices(conn, owner_email)

    def delete_device(self, owner_email: str, device_id: int) -> None:
        """Delete an owned device together with its schedules."""
        with self.db.connect() as conn:
            removed = devices_store.delete_device(conn, owner_email, device_id)
        if not removed:
            raise NotFoundError("Device not found or not owned by this user.")
        logger.info("Device deleted", owner=owner_email, device_id=device_id)

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------

    def add_schedule(
        self,
        owner_email: str,
        device_id: int,
        cron_expression: str,
        action: Union[str, ScheduleAction],
    ) -> int:
        """Attach a schedule to an owned device and return the owner's new schedule count."""
        if not device_id or not cron_expression or not action:
            raise ValidationError("Missing device_id, cron_expression, or action.")
        parsed_action = _parse_action(action)
        cron = validate_cron_expression(cron_expression)

        max_schedules = self.settings.max_schedules
        with self.db.connect(immediate=self.settings.strict_quota) as conn:
            current = schedules_store.count_schedules(conn, owner_email)
            if current >= max_schedules:
                logger.info("Schedule quota reached", owner=owner_email, limit=max_schedules)
                raise QuotaExceededError(
                    f"Limit reached: Free Tier users can set a maximum of {max_schedules} schedules.",
                    limit=max_schedules,
                )

            if devices_store.get_owned_device(conn, owner_email, device_id) is None:
                raise OwnershipError("Device ID is invalid or does not belong to your account.")

            try:
                schedule_id = schedules_store.insert_schedule(
                    conn, owner_email, device_id, cron, parsed_action
                )
            except sqlite3.IntegrityError as e:
                # device removed between the ownership check and the insert
                raise OwnershipError(
                    "Device ID is invalid or does not belong to your account."
                ) from e

        logger.info(
            "Schedule created",
            owner=owner_email,
            schedule_id=schedule_id,
            device_id=device_id,
            cron_expression=cron,
            action=parsed_action.value,
        )
        return current + 1

    def list_schedules(self, owner_email: str) -> List[Schedule]:
        with self.db.connect() as conn:
            return schedules_store.list_schedules(conn, owner_email)

    def delete_schedule(self, owner_email: str, schedule_id: int) -> None:
        with self.db.connect() as conn:
            removed = schedules_store.delete_schedule(conn, owner_email, schedule_id)
        if not removed:
            raise NotFoundError("Schedule not found or not owned by this user.")
        logger.info("Schedule deleted", owner=owner_email, schedule_id=schedule_id)

    def toggle_schedule(self, owner_email: str, schedule_id: int, active: bool) -> None:
        with self.db.connect() as conn:
            updated = schedules_store.set_schedule_active(conn, owner_email, schedule_id, active)
        if not updated:
            raise NotFoundError("Schedule not found or not owned by this user.")
        logger.info("Schedule toggled", owner=owner_email, schedule_id=schedule_id, active=active)
