"""
Pytest fixtures for JDex tests.
"""
import os
from typing import Any, Dict, Optional

import pytest

from jdex.database import IndexDatabase
from jdex.logic.actions import EntityType
from jdex.logic.history import HistoryManager
from jdex.logic.kv_store import MemoryStore
from jdex.logic.persistence import HistoryStorage

NOW = 1_730_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1):
        self.now += ms


class RecordingStore:
    """In-memory EntityStore that records every call made to it."""

    def __init__(self):
        self.records: Dict[EntityType, Dict[int, Dict[str, Any]]] = {
            EntityType.FOLDER: {},
            EntityType.ITEM: {},
        }
        self.calls = []
        self.next_id = 100
        self.fail_with: Optional[Exception] = None
        self.commit_error: Optional[Exception] = None

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def create_entity(self, kind, data):
        self._check()
        self.calls.append(("create", kind, dict(data)))
        self.next_id += 1
        self.records[kind][self.next_id] = {**data, "id": self.next_id}
        return self.next_id

    def update_entity(self, kind, entity_id, patch):
        self._check()
        self.calls.append(("update", kind, entity_id, dict(patch)))
        if entity_id in self.records[kind]:
            self.records[kind][entity_id].update(patch)

    def delete_entity(self, kind, entity_id):
        self._check()
        self.calls.append(("delete", kind, entity_id))
        self.records[kind].pop(entity_id, None)

    def get_entity(self, kind, entity_id):
        record = self.records[kind].get(entity_id)
        return dict(record) if record else None

    def commit(self):
        if self.commit_error is not None:
            error, self.commit_error = self.commit_error, None
            raise error
        self.calls.append(("commit",))

    def rollback(self):
        self.calls.append(("rollback",))

    def mutations(self):
        return [c for c in self.calls if c[0] not in ("commit", "rollback")]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_store():
    return RecordingStore()


@pytest.fixture
def kv():
    return MemoryStore()


@pytest.fixture
def storage(kv, clock):
    return HistoryStorage(kv, clock=clock)


@pytest.fixture
def history(fake_store, storage, clock):
    return HistoryManager(fake_store, storage, clock=clock)


@pytest.fixture
def db():
    database = IndexDatabase(":memory:")
    yield database
    database.close()


@pytest.fixture
def db_history(db, storage, clock):
    return HistoryManager(db, storage, clock=clock)


@pytest.fixture
def qapp():
    """A QApplication on the offscreen platform; skipped where Qt widgets cannot load."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    widgets = pytest.importorskip("PyQt6.QtWidgets")
    app = widgets.QApplication.instance() or widgets.QApplication([])
    yield app
