"""
Device routes (prefix: /api/device). All require a session.
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from iothub.auth.models import AuthenticatedUser
from iothub.services.registry import ResourceRegistry
from .auth_middleware import get_registry, require_user
from .schemas import (
    DeviceAddIn,
    DeviceAddOut,
    DeviceListOut,
    MessageOut,
    ResourceIdIn,
    device_to_out,
)


router = APIRouter(prefix="/api/device", tags=["device"])


@router.post("/add", response_model=DeviceAddOut, status_code=status.HTTP_201_CREATED)
def add_device(
    body: DeviceAddIn,
    current_user: AuthenticatedUser = Depends(require_user),
    registry: ResourceRegistry = Depends(get_registry),
) -> Any:
    """Register a device. 403 once the owner is at the device limit, 409 on a taken key."""
    count = registry.add_device(current_user.email, body.name, body.device_key)
    return DeviceAddOut(
        success=True,
        message="Device added successfully!",
        current_devices=count,
    )


@router.get("/list", response_model=DeviceListOut)
def list_devices(
    current_user: AuthenticatedUser = Depends(require_user),
    registry: ResourceRegistry = Depends(get_registry),
) -> Any:
    devices = registry.list_devices(current_user.email)
    return DeviceListOut(count=len(devices), devices=[device_to_out(d) for d in devices])


@router.delete("/delete", response_model=MessageOut)
def delete_device(
    body: ResourceIdIn,
    current_user: AuthenticatedUser = Depends(require_user),
    registry: ResourceRegistry = Depends(get_registry),
) -> Any:
    """Delete an owned device. Its schedules go with it."""
    registry.delete_device(current_user.email, body.id)
    return MessageOut(success=True, message="Device deleted successfully.")
