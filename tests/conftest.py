# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import threading
import pytest
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock


# =============================================================================
# FAKES
# =============================================================================

class FakeClock:
    """Deterministic clock; every call moves one second forward."""

    def __init__(self, start: datetime = datetime(2024, 6, 1, 9, 0, 0), step: float = 1.0):
        self.current = start
        self.step = timedelta(seconds=step)

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


class FakeTimer:
    """threading.Timer stand-in that only runs when fire() is called."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or []
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled:
            self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    def __init__(self):
        self.timers: List[FakeTimer] = []

    def __call__(self, interval, function, *args, **kwargs) -> FakeTimer:
        timer = FakeTimer(interval, function, *args, **kwargs)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> Optional[FakeTimer]:
        return self.timers[-1] if self.timers else None


class FakeRemoteClient:
    """
    In-memory remote service.

    By default every submitted record is accepted. Set `reject` to ids the
    server should report as failed, `omit` to ids it should leave out of both
    lists, or `exception` to make the call fail.
    """

    def __init__(self):
        self.submitted: List[List[Any]] = []
        self.reject: Dict[str, str] = {}
        self.omit: set = set()
        self.exception: Optional[Exception] = None
        self.schema = None
        self.schema_exception: Optional[Exception] = None
        self.schema_calls = 0
        # Concurrency control for in-flight tests
        self.block = False
        self.entered = threading.Event()
        self.release = threading.Event()

    @property
    def calls(self) -> int:
        return len(self.submitted)

    def submit_records(self, records):
        from capture_core.api.remote_service import SyncResponse

        self.submitted.append(list(records))
        if self.block:
            self.entered.set()
            self.release.wait(timeout=5)
        if self.exception is not None:
            raise self.exception

        success_ids = [r.id for r in records if r.id not in self.reject and r.id not in self.omit]
        failed = [{"id": rid, "reason": reason} for rid, reason in self.reject.items()]
        return SyncResponse(
            total=len(records),
            successful=len(success_ids),
            success_ids=success_ids,
            failed=failed,
        )

    def fetch_schema(self):
        self.schema_calls += 1
        if self.schema_exception is not None:
            raise self.schema_exception
        return self.schema


# =============================================================================
# STORAGE FIXTURES
# =============================================================================

@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "local_data" / "capture.db"


@pytest.fixture
def db(db_path):
    """Initialized LocalDatabase on a temporary file"""
    from capture_core.offline.local_database import LocalDatabase

    database = LocalDatabase(db_path)
    database.initialize()
    yield database
    database.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(db, clock):
    from capture_core.offline.record_store import RecordStore

    return RecordStore(db, clock=clock)


@pytest.fixture
def schema_cache(db, clock):
    from capture_core.offline.schema_cache import SchemaCache

    return SchemaCache(db, clock=clock)


# =============================================================================
# REMOTE / CONNECTIVITY FIXTURES
# =============================================================================

@pytest.fixture
def fake_client():
    client = FakeRemoteClient()
    yield client
    client.release.set()


@pytest.fixture
def timer_factory():
    return FakeTimerFactory()


@pytest.fixture
def connection():
    """ConnectionManager without a probe host, driven through set_status()"""
    from capture_core.offline.connection_manager import ConnectionManager

    return ConnectionManager(probe_host=None)


@pytest.fixture
def online_connection(connection):
    from capture_core.offline.connection_manager import ConnectionStatus

    connection.set_status(ConnectionStatus.ONLINE)
    return connection


@pytest.fixture
def coordinator(store, fake_client, online_connection, db, timer_factory, clock):
    from capture_core.offline.sync_engine import SyncCoordinator

    sync = SyncCoordinator(
        store,
        fake_client,
        online_connection,
        db=db,
        clock=clock,
        timer_factory=timer_factory,
    )
    sync.start()
    yield sync
    sync.stop()


@pytest.fixture
def mock_session():
    """requests.Session stand-in; set session.request.return_value per test"""
    session = MagicMock()
    session.headers = {}
    return session


def make_response(status_code: int = 200, body: Any = None):
    """Build a requests.Response-like mock"""
    import requests

    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} Error")
    else:
        response.raise_for_status.return_value = None
    return response


# =============================================================================
# SCHEMA FIXTURES
# =============================================================================

@pytest.fixture
def remote_schema():
    """A small published schema (version 3)"""
    from capture_core.schema import Schema

    return Schema.from_dict({
        "version": 3,
        "elements": [
            {"name": "firstName", "label": "First Name", "type": "text", "required": True},
            {"name": "dob", "label": "Date of Birth", "type": "date"},
            {"name": "baptized", "label": "Baptized?", "type": "boolean"},
            {
                "name": "baptismDate",
                "label": "Baptism Date",
                "type": "date",
                "required": True,
                "conditional": {"field": "baptized", "value": True},
            },
        ],
    })


@pytest.fixture
def response_factory():
    return make_response
