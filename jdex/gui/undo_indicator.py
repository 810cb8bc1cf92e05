"""
jdex/gui/undo_indicator.py
Status bar widget: shows the last undo/redo/recorded action for a few
seconds, and the undo/redo counts while either stack is non-empty.
"""
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QLabel
from PyQt6.QtCore import QTimer
import qtawesome as qta

from jdex.logic.actions import ActionType
from jdex.logic.status import HistoryStatus


def action_icon_name(action):
    if action is None:
        return None
    if action.was_undone:
        return 'fa5s.undo'
    if action.was_redone:
        return 'fa5s.redo'
    return {
        ActionType.CREATE: 'fa5s.plus',
        ActionType.UPDATE: 'fa5s.edit',
        ActionType.DELETE: 'fa5s.trash-alt',
    }.get(action.action_type)


ICON_COLORS = {
    'fa5s.undo': '#ffc107',
    'fa5s.redo': '#20c997',
    'fa5s.plus': '#198754',
    'fa5s.edit': '#0d6efd',
    'fa5s.trash-alt': '#dc3545',
}


class UndoStatusIndicator(QWidget):
    def __init__(self, display_seconds=4, parent=None):
        super().__init__(parent)
        self._last_seen = None

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        self.icon_label = QLabel()
        self.description_label = QLabel()
        self.description_label.setObjectName("UndoDescription")
        self.description_label.setMaximumWidth(320)
        self.counts_label = QLabel()
        self.counts_label.setObjectName("UndoCounts")

        layout.addWidget(self.icon_label)
        layout.addWidget(self.description_label)
        layout.addWidget(self.counts_label)

        self.fade_timer = QTimer(self)
        self.fade_timer.setSingleShot(True)
        self.fade_timer.timeout.connect(self.fade)
        self.set_display_seconds(display_seconds)

        self.icon_label.hide()
        self.description_label.hide()
        self.counts_label.hide()

    def set_display_seconds(self, seconds):
        self.fade_timer.setInterval(int(seconds * 1000))

    def is_description_visible(self) -> bool:
        return not self.description_label.isHidden()

    def update_status(self, status: HistoryStatus):
        # The journal builds a new last_action object on every push, undo and redo
        if status.last_action is not None and status.last_action is not self._last_seen:
            self._last_seen = status.last_action
            self._show_action(status)
        elif status.last_action is None:
            self._last_seen = None
            self.fade()

        parts = []
        if status.can_undo:
            parts.append(f"Undo {status.undo_count}")
        if status.can_redo:
            parts.append(f"Redo {status.redo_count}")
        self.counts_label.setText("  ·  ".join(parts))
        self.counts_label.setToolTip(
            f"{status.undo_count} action{'s' if status.undo_count != 1 else ''} to undo, "
            f"{status.redo_count} to redo"
        )
        self.counts_label.setVisible(bool(parts))

    def _show_action(self, status: HistoryStatus):
        icon_name = action_icon_name(status.last_action)
        if icon_name:
            icon = qta.icon(icon_name, color=ICON_COLORS.get(icon_name, '#6c757d'))
            self.icon_label.setPixmap(icon.pixmap(14, 14))
            self.icon_label.show()
        self.description_label.setText(status.last_action_description)
        self.description_label.setToolTip(status.last_action_description)
        self.description_label.show()
        self.fade_timer.start()

    def fade(self):
        self.fade_timer.stop()
        self.icon_label.hide()
        self.description_label.hide()
