"""
jdex/logic/recorder.py
Folder and item mutations that record themselves in the undo journal.
Each call performs the change, commits it, then pushes one action
carrying the snapshots needed to reverse it.
"""
from typing import Any, Dict, Optional

from jdex.logic.actions import (
    CreateAction, DeleteAction, EntityStore, EntityType, UpdateAction
)
from jdex.logic.errors import IndexStoreError


def _label(kind: EntityType, record: Dict[str, Any]) -> str:
    number = record.get('folder_number' if kind is EntityType.FOLDER else 'item_number')
    name = record.get('name', '')
    return f'{kind.value.lower()} "{number} {name}"' if number else f'{kind.value.lower()} "{name}"'


class ActionRecorder:
    def __init__(self, store: EntityStore, history):
        self.store = store
        self.history = history

    def _snapshot(self, kind: EntityType, entity_id: int) -> Dict[str, Any]:
        record = self.store.get_entity(kind, entity_id)
        if record is None:
            raise IndexStoreError(f"{kind.value.title()} {entity_id} does not exist")
        return record

    def _apply(self, mutation, *args):
        """Run one store mutation and commit it, or roll it back on failure."""
        try:
            result = mutation(*args)
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise
        return result

    def create(self, kind: EntityType, data: Dict[str, Any]) -> int:
        entity_id = self._apply(self.store.create_entity, kind, data)
        record = self.store.get_entity(kind, entity_id) or {**data, 'id': entity_id}
        self.history.push_action(CreateAction(
            entity_type=kind,
            entity_id=entity_id,
            entity_data=record,
            description=f"Created {_label(kind, record)}",
        ))
        return entity_id

    def update(self, kind: EntityType, entity_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply changes; only the keys that actually differ are recorded."""
        before = self._snapshot(kind, entity_id)
        changed = {k: v for k, v in changes.items() if k in before and before[k] != v}
        if not changed:
            return None

        self._apply(self.store.update_entity, kind, entity_id, changed)
        self.history.push_action(UpdateAction(
            entity_type=kind,
            entity_id=entity_id,
            previous_state={k: before[k] for k in changed},
            new_state=dict(changed),
            description=f"Updated {_label(kind, before)}",
        ))
        return changed

    def delete(self, kind: EntityType, entity_id: int) -> Dict[str, Any]:
        before = self._snapshot(kind, entity_id)
        self._apply(self.store.delete_entity, kind, entity_id)
        self.history.push_action(DeleteAction(
            entity_type=kind,
            entity_id=entity_id,
            deleted_entity=before,
            description=f"Deleted {_label(kind, before)}",
        ))
        return before

    # --- convenience wrappers ---
    def create_folder(self, data): return self.create(EntityType.FOLDER, data)
    def update_folder(self, folder_id, changes): return self.update(EntityType.FOLDER, folder_id, changes)
    def delete_folder(self, folder_id): return self.delete(EntityType.FOLDER, folder_id)
    def create_item(self, data): return self.create(EntityType.ITEM, data)
    def update_item(self, item_id, changes): return self.update(EntityType.ITEM, item_id, changes)
    def delete_item(self, item_id): return self.delete(EntityType.ITEM, item_id)
