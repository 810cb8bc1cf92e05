"""
jdex/logic/status.py
UI-facing view of the journal: availability flags, counts and the
wording of the last action. Derived only, holds no state of its own.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

from jdex.logic.actions import Action


@dataclass(frozen=True)
class HistoryStatus:
    can_undo: bool = False
    can_redo: bool = False
    undo_count: int = 0
    redo_count: int = 0
    last_action: Optional[Action] = None
    last_action_description: str = ""
    last_action_at: Optional[int] = None


def describe_action(action: Optional[Action]) -> str:
    if action is None:
        return ""
    if action.was_undone:
        return f"Undid: {action.description}"
    if action.was_redone:
        return f"Redid: {action.description}"
    return action.description


def project_status(undo_stack: Sequence[Action], redo_stack: Sequence[Action],
                   last_action: Optional[Action] = None,
                   last_action_at: Optional[int] = None) -> HistoryStatus:
    return HistoryStatus(
        can_undo=len(undo_stack) > 0,
        can_redo=len(redo_stack) > 0,
        undo_count=len(undo_stack),
        redo_count=len(redo_stack),
        last_action=last_action,
        last_action_description=describe_action(last_action),
        last_action_at=last_action_at,
    )
