"""Request and response bodies for the JSON API."""

from typing import List, Optional

from pydantic import BaseModel, EmailStr

from iothub.models import Device, Schedule


class CredentialsIn(BaseModel):
    email: EmailStr
    password: str


class DeviceAddIn(BaseModel):
    name: str
    device_key: str


class ScheduleSetIn(BaseModel):
    device_id: int
    cron_expression: str
    action: str


class ResourceIdIn(BaseModel):
    id: int


class ScheduleToggleIn(BaseModel):
    id: int
    active: bool


class MessageOut(BaseModel):
    success: bool
    message: str


class LoginOut(MessageOut):
    token: str


class MeOut(BaseModel):
    success: bool = True
    email: str


class DeviceAddOut(MessageOut):
    current_devices: int


class DeviceOut(BaseModel):
    id: int
    name: str
    device_key: str
    created_at: Optional[str] = None


class DeviceListOut(BaseModel):
    success: bool = True
    count: int
    devices: List[DeviceOut]


class ScheduleSetOut(MessageOut):
    current_schedules: int


class ScheduleOut(BaseModel):
    id: int
    device_id: int
    device_name: Optional[str] = None
    cron_expression: str
    action: str
    is_active: bool
    created_at: Optional[str] = None


class ScheduleListOut(BaseModel):
    success: bool = True
    count: int
    schedules: List[ScheduleOut]


def device_to_out(device: Device) -> DeviceOut:
    return DeviceOut(
        id=device.id,
        name=device.name,
        device_key=device.device_key,
        created_at=device.created_at,
    )


def schedule_to_out(schedule: Schedule) -> ScheduleOut:
    return ScheduleOut(
        id=schedule.id,
        device_id=schedule.device_id,
        device_name=schedule.device_name,
        cron_expression=schedule.cron_expression,
        action=schedule.action.value,
        is_active=schedule.is_active,
        created_at=schedule.created_at,
    )
