"""
jdex/gui/history_bridge.py
Qt signals for the undo journal so widgets can connect to it.
"""
from PyQt6.QtCore import QObject, pyqtSignal

from jdex.logic.status import HistoryStatus


class HistorySignals(QObject):
    changed = pyqtSignal(object)     # HistoryStatus
    refreshed = pyqtSignal()
    failed = pyqtSignal(str)

    def attach(self, history):
        """Route the journal's callbacks through this object's signals."""
        history.on_change = self.changed.emit
        history.on_refresh = self.refreshed.emit
        history.on_error = self.failed.emit
        self.changed.emit(history.status())

    def detach(self, history):
        history.on_change = None
        history.on_refresh = None
        history.on_error = None
        self.changed.emit(HistoryStatus())
