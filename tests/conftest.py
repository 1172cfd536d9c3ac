"""Pytest fixtures for ark-manager tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from ark_manager import config
from ark_manager.dispatch import Dispatcher
from ark_manager.state import NavigationState
from ark_manager.store import RecordStore
from ark_manager.types import Mod, Server


FIXED_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def ark_env(tmp_path, monkeypatch):
    """Point the config directory at a temp dir and clear env overrides."""
    config_dir = tmp_path / "ark-manager"
    config_dir.mkdir()
    monkeypatch.setattr(config, "get_config_dir", lambda: config_dir)
    monkeypatch.delenv(config.DB_ENV_VAR, raising=False)
    monkeypatch.delenv("ARK_MANAGER_THEME", raising=False)
    return config_dir


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "db.json"


@pytest.fixture
def make_store(db_path):
    """Create a store file holding the given servers."""

    def _make(servers: list[Server] | None = None) -> RecordStore:
        store = RecordStore(db_path)
        store.save(servers or [])
        return store

    return _make


@pytest.fixture
def server_factory():
    """Build servers with deterministic timestamps."""

    def _server(name: str, id: int = 0, mods: list[str] | None = None, **kwargs) -> Server:
        return Server(
            id=id,
            name=name,
            created_at=FIXED_TIME,
            mods=[Mod(id=i, name=m, created_at=FIXED_TIME) for i, m in enumerate(mods or [])],
            **kwargs,
        )

    return _server


class FakeServices:
    """Records service submissions instead of running anything."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.shut_down = False

    def submit(self, action, service_name, server_name):
        self.calls.append((action, service_name, server_name))

    def shutdown(self):
        self.shut_down = True


@pytest.fixture
def fake_services():
    return FakeServices()


class CountingStore(RecordStore):
    """RecordStore that counts writes."""

    def __init__(self, path):
        super().__init__(path)
        self.saves = 0

    def save(self, servers):
        self.saves += 1
        super().save(servers)


@pytest.fixture
def session(db_path, fake_services):
    """Factory returning (store, dispatcher, state) for a seeded collection."""

    def _session(servers: list[Server] | None = None):
        RecordStore(db_path).save(servers or [])
        store = CountingStore(db_path)
        dispatcher = Dispatcher(store, fake_services)
        state = NavigationState.initial(store.load())
        return store, dispatcher, state

    return _session
