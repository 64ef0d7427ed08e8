import sqlite3

import pytest

from iothub.models import ScheduleAction
from iothub.services.registry import ResourceRegistry
from iothub.stores import devices_store, schedules_store
from iothub.utils.config_loader import RegistrySettings
from iothub.utils.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    OwnershipError,
    QuotaExceededError,
    ValidationError,
)

OWNER = "owner@example.com"
OTHER = "other@example.com"


def _add_device(registry: ResourceRegistry, owner: str = OWNER, key: str = "key-1") -> int:
    registry.add_device(owner, f"Device {key}", key)
    return next(d.id for d in registry.list_devices(owner) if d.device_key == key)


def test_add_device_returns_running_count(registry):
    assert registry.add_device(OWNER, "Lamp", "lamp-1") == 1
    assert registry.add_device(OWNER, "Fan", "fan-1") == 2
    assert [d.name for d in registry.list_devices(OWNER)] == ["Lamp", "Fan"]


def test_device_quota_is_enforced(registry):
    for i in range(5):
        registry.add_device(OWNER, f"Device {i}", f"key-{i}")

    with pytest.raises(QuotaExceededError) as exc_info:
        registry.add_device(OWNER, "One too many", "key-6")

    assert exc_info.value.limit == 5
    assert "maximum of 5 devices" in str(exc_info.value)
    assert len(registry.list_devices(OWNER)) == 5


def test_quota_is_per_owner(registry):
    for i in range(5):
        registry.add_device(OWNER, f"Device {i}", f"key-{i}")
    assert registry.add_device(OTHER, "Theirs", "their-key") == 1


def test_strict_quota_mode_enforces_same_limit(db):
    registry = ResourceRegistry(db, RegistrySettings(max_devices=2, strict_quota=True))
    registry.add_device(OWNER, "A", "a")
    registry.add_device(OWNER, "B", "b")
    with pytest.raises(QuotaExceededError):
        registry.add_device(OWNER, "C", "c")
    assert len(registry.list_devices(OWNER)) == 2


def test_duplicate_device_key_conflicts_across_owners(registry):
    registry.add_device(OWNER, "Lamp", "shared-key")
    with pytest.raises(ConflictError):
        registry.add_device(OTHER, "Lamp", "shared-key")
    assert registry.list_devices(OTHER) == []


def test_device_name_length_limit(registry):
    registry.add_device(OWNER, "x" * 50, "ok-key")
    with pytest.raises(ValidationError):
        registry.add_device(OWNER, "x" * 51, "long-key")


@pytest.mark.parametrize("name,key", [("", "k"), ("Lamp", ""), (None, "k")])
def test_device_fields_required(registry, name, key):
    with pytest.raises(ValidationError):
        registry.add_device(OWNER, name, key)


def test_delete_device_cascades_schedules(registry, db):
    device_id = _add_device(registry)
    registry.add_schedule(OWNER, device_id, "0 10 * * *", "ON")
    registry.add_schedule(OWNER, device_id, "0 22 * * *", "OFF")

    registry.delete_device(OWNER, device_id)

    assert registry.list_devices(OWNER) == []
    assert registry.list_schedules(OWNER) == []
    with db.connect() as conn:
        assert schedules_store.count_schedules(conn, OWNER) == 0


def test_delete_foreign_device_reports_not_found(registry):
    device_id = _add_device(registry)
    with pytest.raises(NotFoundError):
        registry.delete_device(OTHER, device_id)
    assert len(registry.list_devices(OWNER)) == 1


def test_schedule_on_foreign_device_is_rejected_without_insert(registry, db):
    device_id = _add_device(registry)
    with pytest.raises(OwnershipError):
        registry.add_schedule(OTHER, device_id, "0 10 * * *", "ON")
    with db.connect() as conn:
        assert schedules_store.count_schedules(conn, OTHER) == 0


def test_schedule_on_missing_device_is_rejected(registry):
    with pytest.raises(OwnershipError):
        registry.add_schedule(OWNER, 999, "0 10 * * *", "ON")


def test_schedule_quota_is_enforced(registry):
    device_id = _add_device(registry)
    for minute in range(5):
        registry.add_schedule(OWNER, device_id, f"{minute} 10 * * *", "ON")
    with pytest.raises(QuotaExceededError) as exc_info:
        registry.add_schedule(OWNER, device_id, "30 10 * * *", "ON")
    assert exc_info.value.limit == 5
    assert len(registry.list_schedules(OWNER)) == 5


@pytest.mark.parametrize("action", ["on", "TOGGLE", ""])
def test_schedule_action_must_be_on_or_off(registry, action):
    device_id = _add_device(registry)
    with pytest.raises(ValidationError):
        registry.add_schedule(OWNER, device_id, "0 10 * * *", action)


def test_schedule_cron_is_validated(registry):
    device_id = _add_device(registry)
    with pytest.raises(ValidationError):
        registry.add_schedule(OWNER, device_id, "*/5 * * * *", "ON")


def test_list_schedules_newest_first_with_device_name(registry):
    device_id = _add_device(registry, key="lamp")
    registry.add_schedule(OWNER, device_id, "0 8 * * *", "ON")
    registry.add_schedule(OWNER, device_id, "0 20 * * *", ScheduleAction.OFF)

    schedules = registry.list_schedules(OWNER)

    assert [s.cron_expression for s in schedules] == ["0 20 * * *", "0 8 * * *"]
    assert schedules[0].action is ScheduleAction.OFF
    assert schedules[0].device_name == "Device lamp"
    assert all(s.is_active for s in schedules)


def test_toggle_schedule(registry):
    device_id = _add_device(registry)
    registry.add_schedule(OWNER, device_id, "0 8 * * *", "ON")
    schedule_id = registry.list_schedules(OWNER)[0].id

    registry.toggle_schedule(OWNER, schedule_id, False)
    assert registry.list_schedules(OWNER)[0].is_active is False

    registry.toggle_schedule(OWNER, schedule_id, True)
    assert registry.list_schedules(OWNER)[0].is_active is True


def test_foreign_schedule_toggle_and_delete_not_found(registry):
    device_id = _add_device(registry)
    registry.add_schedule(OWNER, device_id, "0 8 * * *", "ON")
    schedule_id = registry.list_schedules(OWNER)[0].id

    with pytest.raises(NotFoundError):
        registry.toggle_schedule(OTHER, schedule_id, False)
    with pytest.raises(NotFoundError):
        registry.delete_schedule(OTHER, schedule_id)

    assert registry.list_schedules(OWNER)[0].is_active is True


def test_delete_schedule(registry):
    device_id = _add_device(registry)
    registry.add_schedule(OWNER, device_id, "0 8 * * *", "ON")
    schedule_id = registry.list_schedules(OWNER)[0].id

    registry.delete_schedule(OWNER, schedule_id)

    assert registry.list_schedules(OWNER) == []
    assert len(registry.list_devices(OWNER)) == 1


def test_store_failure_surfaces_as_internal_error(registry, monkeypatch):
    def broken(conn, owner_email):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(devices_store, "count_devices", broken)

    with pytest.raises(InternalError) as exc_info:
        registry.add_device(OWNER, "Lamp", "lamp-1")

    assert "disk I/O" not in str(exc_info.value)


def test_schedule_device_id_zero_is_missing(registry):
    _add_device(registry)
    with pytest.raises(ValidationError, match="Missing device_id"):
        registry.add_schedule(OWNER, 0, "0 10 * * *", "ON")
