"""
Schedule routes.

Prefix: /api/schedule

- POST   /set      attach a daily timer to an owned device
- GET    /list     owner's schedules, newest first
- DELETE /delete   remove one schedule
- POST   /toggle   pause or resume one schedule
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from iothub.auth.models import AuthenticatedUser
from iothub.services.registry import ResourceRegistry
from .auth_middleware import get_registry, require_user
from .schemas import (
    MessageOut,
    ResourceIdIn,
    ScheduleListOut,
    ScheduleSetIn,
    ScheduleSetOut,
    ScheduleToggleIn,
    schedule_to_out,
)


router = APIRouter(prefix="/api/schedule", tags=["schedule"])


@router.post("/set", response_model=ScheduleSetOut, status_code=status.HTTP_201_CREATED)
def set_schedule(
    body: ScheduleSetIn,
    current_user: AuthenticatedUser = Depends(require_user),
    registry: ResourceRegistry = Depends(get_registry),
) -> Any:
    count = registry.add_schedule(
        current_user.email,
        body.device_id,
        body.cron_expression,
        body.action,
    )
    return ScheduleSetOut(
        success=True,
        message="Schedule set successfully!",
        current_schedules=count,
    )


@router.get("/list", response_model=ScheduleListOut)
def list_schedules(
    current_user: AuthenticatedUser = Depends(require_user),
    registry: ResourceRegistry = Depends(get_registry),
) -> Any:
    schedules = registry.list_schedules(current_user.email)
    return ScheduleListOut(
        count=len(schedules),
        schedules=[schedule_to_out(s) for s in schedules],
    )


@router.delete("/delete", response_model=MessageOut)
def delete_schedule(
    body: ResourceIdIn,
    current_user: AuthenticatedUser = Depends(require_user),
    registry: ResourceRegistry = Depends(get_registry),
) -> Any:
    registry.delete_schedule(current_user.email, body.id)
    return MessageOut(success=True, message="Schedule deleted successfully.")


@router.post("/toggle", response_model=MessageOut)
def toggle_schedule(
    body: ScheduleToggleIn,
    current_user: AuthenticatedUser = Depends(require_user),
    registry: ResourceRegistry = Depends(get_registry),
) -> Any:
    registry.toggle_schedule(current_user.email, body.id, body.active)
    state = "activated" if body.active else "paused"
    return MessageOut(success=True, message=f"Schedule {state}.")
