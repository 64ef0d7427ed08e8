"""Resource models"""

from .device import Device
from .schedule import ActiveSchedule, Schedule, ScheduleAction

__all__ = ["ActiveSchedule", "Device", "Schedule", "ScheduleAction"]
