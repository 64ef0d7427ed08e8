import threading
from datetime import datetime, timezone

from iothub.models import ScheduleAction
from iothub.scheduler import matcher as matcher_module
from iothub.scheduler.dispatch import Dispatcher, DispatchSink
from iothub.scheduler.matcher import ScheduleMatcher
from iothub.stores import schedules_store


def at(hour: int, minute: int) -> datetime:
    return datetime(2025, 1, 15, hour, minute, tzinfo=timezone.utc)


def _device(registry, owner: str, key: str) -> int:
    registry.add_device(owner, key, key)
    return next(d.id for d in registry.list_devices(owner) if d.device_key == key)


def test_due_schedule_is_dispatched_once(db, registry, dispatcher, sink):
    device_id = _device(registry, "a@x.com", "lamp")
    registry.add_schedule("a@x.com", device_id, "0 14 * * *", "ON")
    registry.add_schedule("a@x.com", device_id, "30 14 * * *", "OFF")

    dispatched = ScheduleMatcher(db, dispatcher).run_once(now=at(14, 0))
    dispatcher.shutdown(wait=True)

    assert [s.device_key for s in dispatched] == ["lamp"]
    assert sink.calls == [("lamp", ScheduleAction.ON)]


def test_uses_injected_clock(db, registry, dispatcher, sink):
    device_id = _device(registry, "a@x.com", "fan")
    registry.add_schedule("a@x.com", device_id, "45 6", "OFF")

    ScheduleMatcher(db, dispatcher, clock=lambda: at(6, 45)).run_once()
    dispatcher.shutdown(wait=True)

    assert sink.calls == [("fan", ScheduleAction.OFF)]


def test_inactive_schedule_is_skipped(db, registry, dispatcher, sink):
    device_id = _device(registry, "a@x.com", "lamp")
    registry.add_schedule("a@x.com", device_id, "0 14 * * *", "ON")
    schedule_id = registry.list_schedules("a@x.com")[0].id
    registry.toggle_schedule("a@x.com", schedule_id, False)

    assert ScheduleMatcher(db, dispatcher).run_once(now=at(14, 0)) == []
    dispatcher.shutdown(wait=True)
    assert sink.calls == []


def test_schedules_across_owners_all_evaluated(db, registry, dispatcher, sink):
    for owner, key in (("a@x.com", "a-lamp"), ("b@x.com", "b-lamp")):
        device_id = _device(registry, owner, key)
        registry.add_schedule(owner, device_id, "* 9", "ON")

    ScheduleMatcher(db, dispatcher).run_once(now=at(9, 12))
    dispatcher.shutdown(wait=True)

    assert sorted(key for key, _ in sink.calls) == ["a-lamp", "b-lamp"]


def test_failing_sink_does_not_abort_pass(db, registry):
    class FlakySink(DispatchSink):
        def __init__(self):
            self.delivered = []

        def dispatch(self, device_key, action):
            if device_key == "broken":
                raise RuntimeError("device unreachable")
            self.delivered.append(device_key)

    flaky = FlakySink()
    dispatcher = Dispatcher(flaky, max_workers=1)
    for key in ("broken", "healthy"):
        device_id = _device(registry, "a@x.com", key)
        registry.add_schedule("a@x.com", device_id, "0 7", "ON")

    dispatched = ScheduleMatcher(db, dispatcher).run_once(now=at(7, 0))
    dispatcher.shutdown(wait=True)

    assert len(dispatched) == 2
    assert flaky.delivered == ["healthy"]


def test_evaluation_error_is_isolated(db, registry, dispatcher, sink, monkeypatch):
    for key, cron in (("bad", "0 7"), ("good", "0 8")):
        device_id = _device(registry, "a@x.com", key)
        registry.add_schedule("a@x.com", device_id, cron, "ON")

    real_is_due = matcher_module.is_due

    def exploding_is_due(expression, now):
        if expression == "0 7":
            raise RuntimeError("boom")
        return real_is_due(expression, now.replace(hour=8))

    monkeypatch.setattr(matcher_module, "is_due", exploding_is_due)

    ScheduleMatcher(db, dispatcher).run_once(now=at(7, 0))
    dispatcher.shutdown(wait=True)

    assert sink.calls == [("good", ScheduleAction.ON)]


def test_load_failure_returns_empty(db, dispatcher, monkeypatch):
    def broken(conn):
        raise RuntimeError("store offline")

    monkeypatch.setattr(schedules_store, "list_active_schedules", broken)

    assert ScheduleMatcher(db, dispatcher).run_once(now=at(7, 0)) == []


def test_dispatch_is_not_awaited(db, registry):
    release = threading.Event()
    finished = threading.Event()

    class SlowSink(DispatchSink):
        def dispatch(self, device_key, action):
            release.wait(5)
            finished.set()

    dispatcher = Dispatcher(SlowSink(), max_workers=1)
    device_id = _device(registry, "a@x.com", "slow")
    registry.add_schedule("a@x.com", device_id, "0 7", "ON")

    dispatched = ScheduleMatcher(db, dispatcher).run_once(now=at(7, 0))

    assert len(dispatched) == 1
    assert not finished.is_set()
    release.set()
    dispatcher.shutdown(wait=True)
    assert finished.is_set()
