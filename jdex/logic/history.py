"""
jdex/logic/history.py
Manages Undo/Redo stacks for the application.
"""
import threading
import uuid
from dataclasses import replace
from typing import Callable, Optional, Tuple

from jdex.logic.actions import Action, EntityStore, execute_redo, execute_undo
from jdex.logic.persistence import MAX_STACK_SIZE, HistoryStorage
from jdex.logic.status import HistoryStatus, project_status
from jdex.utils import log, now_ms


class HistoryManager:
    """
    Linear undo/redo journal over folder and item mutations.

    The stacks are loaded from `storage` once, at construction, and written
    back after every change of stack membership. Undo and redo either
    complete fully (store mutated, stacks moved, history saved, refresh
    signalled) or leave everything as it was and report the error.
    """

    def __init__(self, store: EntityStore, storage: HistoryStorage,
                 on_refresh: Optional[Callable[[], None]] = None,
                 on_error: Optional[Callable[[str], None]] = None,
                 on_change: Optional[Callable[[HistoryStatus], None]] = None,
                 clock: Optional[Callable[[], int]] = None):
        self.store = store
        self.storage = storage
        self.on_refresh = on_refresh
        self.on_error = on_error
        self.on_change = on_change
        self.clock = clock or now_ms
        # Serializes push/undo/redo so stack changes and saves never interleave
        self.lock = threading.RLock()

        self._undo_stack, self._redo_stack = storage.load()
        self.last_action: Optional[Action] = None
        self.last_action_at: Optional[int] = None
        log.info(
            f"Undo history loaded: {len(self._undo_stack)} undo, "
            f"{len(self._redo_stack)} redo"
        )

    @property
    def undo_stack(self) -> Tuple[Action, ...]:
        return tuple(self._undo_stack)

    @property
    def redo_stack(self) -> Tuple[Action, ...]:
        return tuple(self._redo_stack)

    def status(self) -> HistoryStatus:
        with self.lock:
            return project_status(self._undo_stack, self._redo_stack,
                                  self.last_action, self.last_action_at)

    def push_action(self, action: Action) -> Action:
        """Record a mutation that has already been applied. Clears the redo stack."""
        with self.lock:
            action = replace(
                action,
                id=action.id or str(uuid.uuid4()),
                timestamp=action.timestamp or self.clock(),
                was_undone=False,
                was_redone=False,
            )
            self._undo_stack.append(action)
            if len(self._undo_stack) > MAX_STACK_SIZE:
                del self._undo_stack[:-MAX_STACK_SIZE]
            self._redo_stack = []
            self._set_last(action)
            self._persist()
            log.debug(f"Recorded: {action.description}")
            self._notify()
            return action

    def undo(self) -> Optional[Action]:
        with self.lock:
            if not self._undo_stack:
                return None
            action = self._undo_stack[-1]
            try:
                moved = execute_undo(action, self.store)
            except Exception as e:
                self._fail("Undo", action, e)
                return None

            self._undo_stack.pop()
            self._redo_stack.append(moved)
            if len(self._redo_stack) > MAX_STACK_SIZE:
                del self._redo_stack[:-MAX_STACK_SIZE]
            self._set_last(replace(moved, was_undone=True))
            self._finish("Undid", moved)
            return moved

    def redo(self) -> Optional[Action]:
        with self.lock:
            if not self._redo_stack:
                return None
            action = self._redo_stack[-1]
            try:
                moved = execute_redo(action, self.store)
            except Exception as e:
                self._fail("Redo", action, e)
                return None

            self._redo_stack.pop()
            self._undo_stack.append(moved)
            if len(self._undo_stack) > MAX_STACK_SIZE:
                del self._undo_stack[:-MAX_STACK_SIZE]
            self._set_last(replace(moved, was_redone=True))
            self._finish("Redid", moved)
            return moved

    def clear(self):
        """Forget all history. Used when the whole database has been reset."""
        with self.lock:
            self._undo_stack = []
            self._redo_stack = []
            self.last_action = None
            self.last_action_at = None
            self.storage.clear()
            log.info("Undo history cleared")
            self._notify()

    # --- internals ---
    def _set_last(self, action: Action):
        self.last_action = action
        self.last_action_at = self.clock()

    def _persist(self):
        self.storage.save(self._undo_stack, self._redo_stack)

    def _finish(self, verb: str, action: Action):
        if self.on_refresh:
            self.on_refresh()
        self._persist()
        log.info(f"{verb}: {action.description}")
        self._notify()

    def _fail(self, operation: str, action: Action, error: Exception):
        message = f"{operation} failed: {error}"
        log.error(f"{message} ({action.description})")
        if self.on_error:
            self.on_error(message)

    def _notify(self):
        if self.on_change:
            self.on_change(self.status())


class NullHistory:
    """Stand-in used where no journal is active. Every operation is a no-op."""

    undo_stack: Tuple[Action, ...] = ()
    redo_stack: Tuple[Action, ...] = ()
    last_action = None
    last_action_at = None

    def status(self) -> HistoryStatus:
        return HistoryStatus()

    def push_action(self, action: Action) -> Action:
        return action

    def undo(self) -> Optional[Action]:
        return None

    def redo(self) -> Optional[Action]:
        return None

    def clear(self):
        pass
