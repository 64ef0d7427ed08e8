"""Schedule data models"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ScheduleAction(str, Enum):
    """Action sent to a device when its schedule is due"""
    ON = "ON"
    OFF = "OFF"


class Schedule(BaseModel):
    """Timer attached to one of the owner's devices"""
    id: int
    owner_email: str
    device_id: int
    cron_expression: str
    action: ScheduleAction
    is_active: bool = True
    device_name: Optional[str] = None
    created_at: Optional[str] = None


class ActiveSchedule(BaseModel):
    """Active schedule joined with the dispatch key of its device"""
    schedule_id: int
    device_key: str
    cron_expression: str
    action: ScheduleAction
