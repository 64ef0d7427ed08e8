from pathlib import Path
from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient

from iothub.models import ScheduleAction
from iothub.scheduler.dispatch import Dispatcher, DispatchSink
from iothub.services.registry import ResourceRegistry
from iothub.stores.database import Database
from iothub.utils.config_loader import AuthSettings, Config, SchedulerSettings
from iothub_web.main import create_app


class RecordingSink(DispatchSink):
    """Collects (device_key, action) pairs instead of signalling devices."""

    def __init__(self):
        self.calls: List[Tuple[str, ScheduleAction]] = []

    def dispatch(self, device_key: str, action: ScheduleAction) -> None:
        self.calls.append((device_key, action))


@pytest.fixture
def db(tmp_path: Path) -> Database:
    database = Database(tmp_path / "iothub.db")
    database.initialize()
    return database


@pytest.fixture
def registry(db: Database) -> ResourceRegistry:
    return ResourceRegistry(db)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def dispatcher(sink: RecordingSink):
    dispatcher = Dispatcher(sink, max_workers=2)
    yield dispatcher
    dispatcher.shutdown(wait=True)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(
        auth=AuthSettings(jwt_secret="test-secret"),
        database={"path": str(tmp_path / "api.db")},
        scheduler=SchedulerSettings(enabled=False),
        logging={"file_path": None},
    )


@pytest.fixture
def client(config: Config, sink: RecordingSink):
    app = create_app(config=config, dispatch_sink=sink)
    with TestClient(app) as test_client:
        yield test_client
