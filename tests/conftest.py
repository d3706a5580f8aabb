from datetime import datetime, timedelta, timezone

import pytest

from tenantnotes.database import create_db_engine
from tenantnotes.services.tenant_store import TenantStore
from tenantnotes.storage import MemoryStorage, SQLStorage


class FakeClock:
    """Clock that advances one second per call."""

    def __init__(self, start=None):
        self.current = start or datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

    def __call__(self):
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(storage, clock):
    return TenantStore(storage, clock=clock)


@pytest.fixture
def sql_storage(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'notes.db'}")
    yield SQLStorage(engine)
    engine.dispose()


@pytest.fixture
def team(store):
    """A free-plan team owned by owner@acme.com."""
    return store.create_team("Acme", "Owner@Acme.com").tenant
