"""
jdex/logic/persistence.py
Saves and restores the undo/redo stacks through a durable key-value store.
Never raises: storage trouble degrades to a shorter or empty history.
"""
import json
from typing import Callable, List, Optional, Sequence, Tuple

from jdex.logic.actions import Action, action_from_dict, action_to_dict
from jdex.logic.errors import QuotaExceededError
from jdex.utils import log, now_ms

MAX_STACK_SIZE = 50
MAX_AGE_DAYS = 7
FALLBACK_STACK_SIZE = 25
SCHEMA_VERSION = 1
STORAGE_KEY = "jdex_undo_history_v1"

DAY_MS = 24 * 60 * 60 * 1000

Stacks = Tuple[List[Action], List[Action]]


def trim(stack: Sequence[Action], limit: int) -> List[Action]:
    """Keep the most recent `limit` actions (drop from the front)."""
    if limit <= 0:
        return []
    return list(stack[-limit:])


class HistoryStorage:
    def __init__(self, kv_store, key: str = STORAGE_KEY,
                 clock: Optional[Callable[[], int]] = None):
        self.kv_store = kv_store
        self.key = key
        self.clock = clock or now_ms

    def load(self) -> Stacks:
        """Read both stacks, dropping anything older than MAX_AGE_DAYS."""
        try:
            raw = self.kv_store.get(self.key)
        except OSError as e:
            log.warning(f"Undo history unreadable: {e}")
            return [], []
        if not raw:
            return [], []

        try:
            data = json.loads(raw)
            if not isinstance(data, dict) or data.get("schemaVersion") != SCHEMA_VERSION:
                log.info("Discarding undo history with unknown schema version")
                return [], []
            undo_stack = [action_from_dict(a) for a in data.get("undoStack") or []]
            redo_stack = [action_from_dict(a) for a in data.get("redoStack") or []]
        except (KeyError, TypeError, ValueError) as e:
            log.warning(f"Discarding malformed undo history: {e}")
            return [], []

        cutoff = self.clock() - MAX_AGE_DAYS * DAY_MS
        fresh_undo = [a for a in undo_stack if a.timestamp > cutoff]
        fresh_redo = [a for a in redo_stack if a.timestamp > cutoff]

        expired = len(undo_stack) + len(redo_stack) - len(fresh_undo) - len(fresh_redo)
        if expired:
            log.info(f"Dropped {expired} undo entries older than {MAX_AGE_DAYS} days")
        return fresh_undo, fresh_redo

    def _encode(self, undo_stack: Sequence[Action], redo_stack: Sequence[Action],
                limit: int) -> str:
        return json.dumps({
            "schemaVersion": SCHEMA_VERSION,
            "undoStack": [action_to_dict(a) for a in trim(undo_stack, limit)],
            "redoStack": [action_to_dict(a) for a in trim(redo_stack, limit)],
            "savedAt": self.clock(),
        })

    def save(self, undo_stack: Sequence[Action], redo_stack: Sequence[Action]):
        try:
            self.kv_store.set(self.key, self._encode(undo_stack, redo_stack, MAX_STACK_SIZE))
            return
        except (QuotaExceededError, OSError, TypeError, ValueError) as e:
            log.warning(f"Undo history storage full, clearing oldest entries ({e})")

        try:
            self.kv_store.set(self.key, self._encode(undo_stack, redo_stack, FALLBACK_STACK_SIZE))
            return
        except (QuotaExceededError, OSError, TypeError, ValueError) as e:
            log.error(f"Undo history could not be saved, discarding it ({e})")

        self.clear()

    def clear(self):
        try:
            self.kv_store.remove(self.key)
        except OSError as e:
            log.error(f"Could not remove stored undo history: {e}")
