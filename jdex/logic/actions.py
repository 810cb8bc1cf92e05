"""
jdex/logic/actions.py
Reversible actions recorded by the undo journal, and the tables that
replay them backwards (undo) or forwards (redo) against the index store.
"""
import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Optional, Protocol

from jdex.logic.errors import MissingDependencyError, UnknownActionError


class ActionType(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class EntityType(str, Enum):
    FOLDER = "FOLDER"
    ITEM = "ITEM"


# Columns the database assigns itself; never passed back into a create call.
GENERATED_FIELDS = ("id", "created_at", "updated_at")


class EntityStore(Protocol):
    """CRUD collaborator the journal replays actions against."""

    def create_entity(self, kind: EntityType, data: Dict[str, Any]) -> int: ...
    def update_entity(self, kind: EntityType, entity_id: int, patch: Dict[str, Any]) -> None: ...
    def delete_entity(self, kind: EntityType, entity_id: int) -> None: ...
    def get_entity(self, kind: EntityType, entity_id: int) -> Optional[Dict[str, Any]]: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


@dataclass(frozen=True, kw_only=True)
class Action:
    """One recorded mutation of a single folder or item."""

    action_type: ClassVar[ActionType]

    entity_type: EntityType
    entity_id: Optional[int] = None
    description: str = ""
    id: str = ""
    timestamp: int = 0
    # Display-only decoration of the most recently moved action
    was_undone: bool = field(default=False, compare=False)
    was_redone: bool = field(default=False, compare=False)

    def payload(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True, kw_only=True)
class CreateAction(Action):
    action_type: ClassVar[ActionType] = ActionType.CREATE
    entity_data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.entity_id is None and self.entity_data.get("id") is not None:
            object.__setattr__(self, "entity_id", self.entity_data["id"])

    def payload(self) -> Dict[str, Any]:
        return {"entityData": copy.deepcopy(self.entity_data)}


@dataclass(frozen=True, kw_only=True)
class UpdateAction(Action):
    action_type: ClassVar[ActionType] = ActionType.UPDATE
    previous_state: Dict[str, Any] = field(default_factory=dict)
    new_state: Dict[str, Any] = field(default_factory=dict)

    def payload(self) -> Dict[str, Any]:
        return {
            "previousState": copy.deepcopy(self.previous_state),
            "newState": copy.deepcopy(self.new_state),
        }


@dataclass(frozen=True, kw_only=True)
class DeleteAction(Action):
    action_type: ClassVar[ActionType] = ActionType.DELETE
    deleted_entity: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.entity_id is None and self.deleted_entity.get("id") is not None:
            object.__setattr__(self, "entity_id", self.deleted_entity["id"])

    def payload(self) -> Dict[str, Any]:
        return {"deletedEntity": copy.deepcopy(self.deleted_entity)}


ACTION_CLASSES = {cls.action_type: cls for cls in (CreateAction, UpdateAction, DeleteAction)}


def strip_generated(record: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a record snapshot without id and timestamps."""
    return {k: v for k, v in record.items() if k not in GENERATED_FIELDS}


# ----------------------------------------------------------------------
# Serialization (blob shape shared with the persisted history)
# ----------------------------------------------------------------------
def action_to_dict(action: Action) -> Dict[str, Any]:
    data = {
        "id": action.id,
        "type": action.action_type.value,
        "entityType": action.entity_type.value,
        "entityId": action.entity_id,
        "timestamp": action.timestamp,
        "description": action.description,
    }
    data.update(action.payload())
    return data


def action_from_dict(data: Dict[str, Any]) -> Action:
    """
    Rebuild an action from its stored form.

    Raises KeyError, TypeError or ValueError when the record is malformed.
    """
    cls = ACTION_CLASSES[ActionType(data["type"])]
    common = {
        "id": str(data["id"]),
        "entity_type": EntityType(data["entityType"]),
        "entity_id": data.get("entityId"),
        "timestamp": int(data["timestamp"]),
        "description": str(data.get("description", "")),
    }
    if cls is CreateAction:
        return CreateAction(entity_data=dict(data["entityData"]), **common)
    if cls is UpdateAction:
        return UpdateAction(
            previous_state=dict(data["previousState"]),
            new_state=dict(data["newState"]),
            **common,
        )
    return DeleteAction(deleted_entity=dict(data["deletedEntity"]), **common)


# ----------------------------------------------------------------------
# Undo: apply the inverse of the recorded mutation
# ----------------------------------------------------------------------
def _undo_create(action: CreateAction, store: EntityStore) -> Action:
    store.delete_entity(action.entity_type, action.entity_id)
    return action


def _undo_update(action: UpdateAction, store: EntityStore) -> Action:
    store.update_entity(action.entity_type, action.entity_id, dict(action.previous_state))
    return action


def _undo_delete(action: DeleteAction, store: EntityStore) -> Action:
    snapshot = action.deleted_entity
    if action.entity_type is EntityType.ITEM:
        folder_id = snapshot.get("folder_id")
        if folder_id is None or store.get_entity(EntityType.FOLDER, folder_id) is None:
            raise _missing_parent(snapshot)
    new_id = store.create_entity(action.entity_type, strip_generated(snapshot))
    # The recreated record has a new id; redo must delete that one.
    return replace(action, entity_id=new_id, deleted_entity={**snapshot, "id": new_id})


def _missing_parent(snapshot: Dict[str, Any]) -> Exception:
    label = snapshot.get("name") or snapshot.get("item_number") or "item"
    return MissingDependencyError(
        f"Cannot undo: parent folder of '{label}' no longer exists"
    )


# ----------------------------------------------------------------------
# Redo: apply the recorded mutation again
# ----------------------------------------------------------------------
def _redo_create(action: CreateAction, store: EntityStore) -> Action:
    new_id = store.create_entity(action.entity_type, strip_generated(action.entity_data))
    return replace(action, entity_id=new_id, entity_data={**action.entity_data, "id": new_id})


def _redo_update(action: UpdateAction, store: EntityStore) -> Action:
    store.update_entity(action.entity_type, action.entity_id, dict(action.new_state))
    return action


def _redo_delete(action: DeleteAction, store: EntityStore) -> Action:
    store.delete_entity(action.entity_type, action.deleted_entity["id"])
    return action


Handler = Callable[[Any, EntityStore], Action]

UNDO_HANDLERS: Dict[type, Handler] = {
    CreateAction: _undo_create,
    UpdateAction: _undo_update,
    DeleteAction: _undo_delete,
}

REDO_HANDLERS: Dict[type, Handler] = {
    CreateAction: _redo_create,
    UpdateAction: _redo_update,
    DeleteAction: _redo_delete,
}


def _dispatch(table: Dict[type, Handler], action: Action, store: EntityStore) -> Action:
    handler = table.get(type(action))
    if handler is None:
        raise UnknownActionError(f"Unknown action type: {type(action).__name__}")
    try:
        result = handler(action, store)
        store.commit()
    except Exception:
        # Discard any write the handler made before failing
        store.rollback()
        raise
    return result


def execute_undo(action: Action, store: EntityStore) -> Action:
    """Reverse an action. Returns the action as it should be kept on the redo stack."""
    return _dispatch(UNDO_HANDLERS, action, store)


def execute_redo(action: Action, store: EntityStore) -> Action:
    """Re-apply an action. Returns the action as it should be kept on the undo stack."""
    return _dispatch(REDO_HANDLERS, action, store)
