"""Tests for the action model and its undo/redo dispatch tables."""
import pytest

from jdex.logic.actions import (
    Action,
    ActionType,
    CreateAction,
    DeleteAction,
    EntityType,
    UpdateAction,
    action_from_dict,
    action_to_dict,
    execute_redo,
    execute_undo,
    strip_generated,
)
from jdex.logic.errors import MissingDependencyError, UnknownActionError


def test_variants_carry_their_type():
    assert CreateAction(entity_type=EntityType.FOLDER).action_type is ActionType.CREATE
    assert UpdateAction(entity_type=EntityType.ITEM).action_type is ActionType.UPDATE
    assert DeleteAction(entity_type=EntityType.ITEM).action_type is ActionType.DELETE


def test_entity_id_defaults_from_snapshot():
    create = CreateAction(entity_type=EntityType.FOLDER, entity_data={"id": 7, "name": "Invoices"})
    delete = DeleteAction(entity_type=EntityType.ITEM, deleted_entity={"id": 9, "folder_id": 55})
    assert create.entity_id == 7
    assert delete.entity_id == 9


def test_strip_generated_drops_id_and_timestamps():
    record = {"id": 3, "name": "Taxes", "created_at": "x", "updated_at": "y", "folder_id": 1}
    assert strip_generated(record) == {"name": "Taxes", "folder_id": 1}
    assert "id" in record


def test_to_dict_uses_blob_shape_without_display_flags():
    action = UpdateAction(
        id="abc", entity_type=EntityType.FOLDER, entity_id=3, timestamp=1730000000000,
        description="Renamed", previous_state={"name": "Old"}, new_state={"name": "New"},
        was_undone=True,
    )
    assert action_to_dict(action) == {
        "id": "abc",
        "type": "UPDATE",
        "entityType": "FOLDER",
        "entityId": 3,
        "timestamp": 1730000000000,
        "description": "Renamed",
        "previousState": {"name": "Old"},
        "newState": {"name": "New"},
    }


def test_from_dict_rebuilds_each_variant():
    create = action_from_dict({
        "id": "1", "type": "CREATE", "entityType": "FOLDER", "entityId": 7,
        "timestamp": 5, "description": "d", "entityData": {"id": 7, "name": "Invoices"},
    })
    delete = action_from_dict({
        "id": "2", "type": "DELETE", "entityType": "ITEM", "entityId": 9,
        "timestamp": 6, "deletedEntity": {"id": 9, "folder_id": 55},
    })
    assert isinstance(create, CreateAction)
    assert create.entity_data == {"id": 7, "name": "Invoices"}
    assert isinstance(delete, DeleteAction)
    assert delete.entity_type is EntityType.ITEM
    assert delete.description == ""
    assert not delete.was_undone


@pytest.mark.parametrize("data", [
    {"id": "1", "type": "MOVE", "entityType": "FOLDER", "timestamp": 1, "entityData": {}},
    {"id": "1", "type": "CREATE", "entityType": "CATEGORY", "timestamp": 1, "entityData": {}},
    {"id": "1", "type": "UPDATE", "entityType": "ITEM", "timestamp": 1, "previousState": {}},
    {"type": "DELETE", "entityType": "ITEM", "timestamp": 1, "deletedEntity": {}},
])
def test_from_dict_rejects_malformed_records(data):
    with pytest.raises((KeyError, TypeError, ValueError)):
        action_from_dict(data)


# ----------------------------------------------------------------------
# Undo
# ----------------------------------------------------------------------
def test_undo_create_deletes_entity(fake_store):
    action = CreateAction(entity_type=EntityType.FOLDER, entity_id=7, entity_data={"id": 7, "name": "Invoices"})
    result = execute_undo(action, fake_store)
    assert fake_store.calls == [("delete", EntityType.FOLDER, 7), ("commit",)]
    assert result == action


def test_undo_update_applies_previous_state(fake_store):
    action = UpdateAction(entity_type=EntityType.ITEM, entity_id=3,
                          previous_state={"name": "Old"}, new_state={"name": "New"})
    execute_undo(action, fake_store)
    assert fake_store.mutations() == [("update", EntityType.ITEM, 3, {"name": "Old"})]


def test_undo_delete_folder_recreates_without_generated_fields(fake_store):
    snapshot = {"id": 4, "folder_number": "11.01", "name": "Invoices",
                "created_at": "2024-01-01", "updated_at": "2024-01-02"}
    action = DeleteAction(entity_type=EntityType.FOLDER, deleted_entity=snapshot)
    result = execute_undo(action, fake_store)

    assert fake_store.mutations() == [
        ("create", EntityType.FOLDER, {"folder_number": "11.01", "name": "Invoices"})
    ]
    assert fake_store.calls[-1] == ("commit",)
    assert result.entity_id == fake_store.next_id
    assert result.deleted_entity["id"] == fake_store.next_id
    # the original action is left untouched
    assert action.entity_id == 4
    assert action.deleted_entity["id"] == 4


def test_undo_delete_item_checks_parent_folder(fake_store):
    fake_store.records[EntityType.FOLDER][55] = {"id": 55, "name": "Receipts"}
    action = DeleteAction(entity_type=EntityType.ITEM,
                          deleted_entity={"id": 9, "folder_id": 55, "name": "Scan"})
    execute_undo(action, fake_store)
    assert fake_store.mutations() == [("create", EntityType.ITEM, {"folder_id": 55, "name": "Scan"})]


def test_undo_delete_item_fails_without_parent(fake_store):
    action = DeleteAction(entity_type=EntityType.ITEM,
                          deleted_entity={"id": 9, "folder_id": 55, "name": "Scan"})
    with pytest.raises(MissingDependencyError, match="parent folder"):
        execute_undo(action, fake_store)
    assert fake_store.calls == [("rollback",)]


# ----------------------------------------------------------------------
# Redo
# ----------------------------------------------------------------------
def test_redo_create_returns_copy_with_new_id(fake_store):
    action = CreateAction(entity_type=EntityType.FOLDER, entity_id=7,
                          entity_data={"id": 7, "name": "Invoices", "created_at": "x"})
    result = execute_redo(action, fake_store)

    assert fake_store.mutations() == [("create", EntityType.FOLDER, {"name": "Invoices"})]
    assert result.entity_id == fake_store.next_id
    assert result.entity_data["id"] == fake_store.next_id
    assert action.entity_id == 7


def test_redo_update_applies_new_state(fake_store):
    action = UpdateAction(entity_type=EntityType.FOLDER, entity_id=3,
                          previous_state={"name": "Old"}, new_state={"name": "New"})
    execute_redo(action, fake_store)
    assert fake_store.mutations() == [("update", EntityType.FOLDER, 3, {"name": "New"})]


def test_redo_delete_targets_snapshot_id(fake_store):
    action = DeleteAction(entity_type=EntityType.ITEM, entity_id=1,
                          deleted_entity={"id": 12, "folder_id": 2})
    execute_redo(action, fake_store)
    assert fake_store.mutations() == [("delete", EntityType.ITEM, 12)]


def test_store_errors_propagate_without_commit(fake_store):
    fake_store.fail_with = RuntimeError("disk full")
    action = UpdateAction(entity_type=EntityType.FOLDER, entity_id=3,
                          previous_state={"name": "Old"}, new_state={"name": "New"})
    with pytest.raises(RuntimeError, match="disk full"):
        execute_undo(action, fake_store)
    assert ("commit",) not in fake_store.calls
    assert fake_store.calls[-1] == ("rollback",)


def test_failed_commit_rolls_back(fake_store):
    fake_store.commit_error = RuntimeError("database is locked")
    action = DeleteAction(entity_type=EntityType.FOLDER,
                          deleted_entity={"id": 4, "folder_number": "11.01", "name": "Invoices"})
    with pytest.raises(RuntimeError, match="locked"):
        execute_undo(action, fake_store)
    assert fake_store.calls == [
        ("create", EntityType.FOLDER, {"folder_number": "11.01", "name": "Invoices"}),
        ("rollback",),
    ]


def test_unknown_variant_is_rejected(fake_store):
    with pytest.raises(UnknownActionError):
        execute_undo(Action(entity_type=EntityType.FOLDER, entity_id=1), fake_store)
    with pytest.raises(UnknownActionError):
        execute_redo(Action(entity_type=EntityType.FOLDER, entity_id=1), fake_store)
