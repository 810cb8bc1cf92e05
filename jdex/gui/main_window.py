"""
jdex/gui/main_window.py
JDex main window.
- Folder / item index tree
- Every create, rename and delete is undoable (Ctrl+Z / Ctrl+Shift+Z)
- Undo history survives restarts
- Last action shown briefly in the status bar
"""
import sqlite3
from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QMessageBox, QDockWidget, QApplication
)
from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QFont, QAction, QKeySequence
import qtawesome as qta
import qdarktheme

from jdex.config import Config
from jdex.database import IndexDatabase
from jdex.gui.entity_dialog import EntityDialog
from jdex.gui.history_bridge import HistorySignals
from jdex.gui.panels.left_panel import IndexPanel
from jdex.gui.panels.log_panel import LogPanel
from jdex.gui.settings_dialog import SettingsDialog
from jdex.gui.styles import STYLESHEET
from jdex.gui.undo_indicator import UndoStatusIndicator
from jdex.logic.actions import EntityType
from jdex.logic.errors import IndexStoreError
from jdex.logic.history import HistoryManager
from jdex.logic.kv_store import JsonFileStore
from jdex.logic.persistence import HistoryStorage
from jdex.logic.recorder import ActionRecorder
from jdex.utils import log


def next_number(numbers, prefix=""):
    """Suggest the number after the highest existing one, e.g. '11.03' -> '11.04'."""
    if not numbers:
        return f"{prefix}.01" if prefix else "10.01"
    head, _, tail = max(numbers).rpartition(".")
    if not tail.isdigit():
        return f"{prefix}.01" if prefix else ""
    return f"{head}.{int(tail) + 1:02d}"


class MainWindow(QMainWindow):
    def __init__(self, config: Config = None):
        super().__init__()

        self.config = config or Config()
        qdarktheme.setup_theme(self.config.theme)

        self.setWindowTitle("JDex")
        self.setWindowIcon(qta.icon('fa5s.archive', color='#0d6efd'))
        self.resize(1100, 750)

        self.db = IndexDatabase(self.config.database_path)
        self.history_signals = HistorySignals(self)
        self.history = HistoryManager(
            self.db, HistoryStorage(JsonFileStore(Path(self.config.history_path)))
        )
        self.recorder = ActionRecorder(self.db, self.history)

        self._setup_ui()
        self._setup_connections()
        self.history_signals.attach(self.history)
        self._restore_state()
        self._refresh()

        self.setFont(QFont("Segoe UI", 10))

    # ----------------------------------------------------------------------
    # UI Setup
    # ----------------------------------------------------------------------
    def _setup_ui(self):
        self.index_panel = IndexPanel()
        self.setCentralWidget(self.index_panel)

        self.dock_log = QDockWidget("Activity Log", self)
        self.dock_log.setAllowedAreas(Qt.DockWidgetArea.BottomDockWidgetArea)
        self.log_panel = LogPanel()
        self.log_panel.attach(log)
        self.dock_log.setWidget(self.log_panel)
        self.addDockWidget(Qt.DockWidgetArea.BottomDockWidgetArea, self.dock_log)

        # Status Bar
        self.status_bar = self.statusBar()
        self.status_bar.showMessage("Ready")
        self.undo_indicator = UndoStatusIndicator(self.config.status_seconds)
        self.status_bar.addPermanentWidget(self.undo_indicator)

        self._create_menubar()
        self.setStyleSheet(self.styleSheet() + STYLESHEET)

    def _create_menubar(self):
        menubar = self.menuBar()
        file_menu = menubar.addMenu("&File")

        new_folder = QAction(qta.icon('fa5s.folder-plus'), "New Folder...", self)
        new_folder.setShortcut("Ctrl+N")
        new_folder.triggered.connect(self._new_folder)
        file_menu.addAction(new_folder)

        new_item = QAction(qta.icon('fa5s.file-medical'), "New Item...", self)
        new_item.setShortcut("Ctrl+Shift+N")
        new_item.triggered.connect(lambda: self._new_item(self.index_panel.current_folder_id()))
        file_menu.addAction(new_item)

        file_menu.addSeparator()

        reset_db = QAction(qta.icon('fa5s.database', color='#dc3545'), "Reset Database...", self)
        reset_db.triggered.connect(self._reset_database)
        file_menu.addAction(reset_db)

        file_menu.addSeparator()

        pref = QAction(qta.icon('fa5s.cog'), "Preferences...", self)
        pref.setShortcut("Ctrl+P")
        pref.triggered.connect(self._show_settings)
        file_menu.addAction(pref)

        file_menu.addSeparator()
        exit_act = QAction(qta.icon('fa5s.power-off', color='#dc3545'), "Exit", self)
        exit_act.triggered.connect(self.close)
        file_menu.addAction(exit_act)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")
        self.undo_act = QAction(qta.icon('fa5s.undo'), "Undo", self)
        self.undo_act.setShortcut(QKeySequence.StandardKey.Undo)
        self.undo_act.triggered.connect(lambda: self.history.undo())
        edit_menu.addAction(self.undo_act)

        self.redo_act = QAction(qta.icon('fa5s.redo'), "Redo", self)
        self.redo_act.setShortcuts([QKeySequence.StandardKey.Redo, QKeySequence("Ctrl+Shift+Z")])
        self.redo_act.triggered.connect(lambda: self.history.redo())
        edit_menu.addAction(self.redo_act)

        # View menu
        view_menu = menubar.addMenu("&View")
        view_menu.addAction(self.dock_log.toggleViewAction())

        refresh = QAction(qta.icon('fa5s.sync'), "Refresh", self)
        refresh.setShortcut("F5")
        refresh.triggered.connect(self._refresh)
        view_menu.addAction(refresh)

    def _setup_connections(self):
        self.history_signals.changed.connect(self._on_history_changed)
        self.history_signals.refreshed.connect(self._refresh)
        self.history_signals.failed.connect(self._on_history_failed)
        self.index_panel.new_folder_requested.connect(self._new_folder)
        self.index_panel.new_item_requested.connect(self._new_item)
        self.index_panel.rename_requested.connect(self._rename)
        self.index_panel.delete_requested.connect(self._delete)

    # ----------------------------------------------------------------------
    # Data
    # ----------------------------------------------------------------------
    def _refresh(self):
        folders = self.db.get_folders()
        items_by_folder = {}
        for item in self.db.get_items():
            items_by_folder.setdefault(item['folder_id'], []).append(item)
        self.index_panel.populate(folders, items_by_folder)
        stats = self.db.get_statistics()
        self.status_bar.showMessage(
            f"{stats['total_folders']} folders, {stats['total_items']} items"
        )

    def _mutate(self, title, operation, *args):
        """Run a recorded mutation; rejected changes are reported, not raised."""
        try:
            result = operation(*args)
        except (IndexStoreError, sqlite3.Error) as e:
            log.error(f"{title} failed: {e}")
            QMessageBox.warning(self, title, str(e))
            self._refresh()
            return None
        self._refresh()
        return result

    def _new_folder(self):
        numbers = [f['folder_number'] for f in self.db.get_folders()]
        dlg = EntityDialog(EntityType.FOLDER, next_number(numbers), self)
        if dlg.exec():
            folder_id = self._mutate("New Folder", self.recorder.create_folder, dlg.values())
            if folder_id is not None:
                self.index_panel.select(EntityType.FOLDER, folder_id)

    def _new_item(self, folder_id):
        folder = self.db.get_folder(folder_id) if folder_id is not None else None
        if folder is None:
            QMessageBox.information(self, "New Item", "Select a folder first.")
            return
        numbers = [i['item_number'] for i in self.db.get_items(folder_id)]
        dlg = EntityDialog(EntityType.ITEM, next_number(numbers, folder['folder_number']), self)
        if dlg.exec():
            data = dlg.values()
            data['folder_id'] = folder_id
            item_id = self._mutate("New Item", self.recorder.create_item, data)
            if item_id is not None:
                self.index_panel.select(EntityType.ITEM, item_id)

    def _rename(self, kind, entity_id, new_name):
        # The tree is rebuilt afterwards; leave the itemChanged handler first
        QTimer.singleShot(0, lambda: self._mutate(
            "Rename", self.recorder.update, kind, entity_id, {'name': new_name}
        ))

    def _delete(self, kind, entity_id):
        self._mutate("Delete", self.recorder.delete, kind, entity_id)

    def _reset_database(self):
        reply = QMessageBox.question(
            self, "Reset Database",
            "Delete every folder and item?\n\nThis also clears the undo history and cannot be undone.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.db.reset()
            self.history.clear()
            self._refresh()

    # ----------------------------------------------------------------------
    # Undo / Redo
    # ----------------------------------------------------------------------
    def _on_history_changed(self, status):
        self.undo_act.setEnabled(status.can_undo)
        self.redo_act.setEnabled(status.can_redo)
        self.undo_act.setToolTip(f"{status.undo_count} action(s) to undo")
        self.redo_act.setToolTip(f"{status.redo_count} action(s) to redo")
        self.undo_indicator.update_status(status)

    def _on_history_failed(self, message):
        QMessageBox.critical(self, "Undo / Redo", message)

    # ----------------------------------------------------------------------
    # Settings & window state
    # ----------------------------------------------------------------------
    def _show_settings(self):
        dlg = SettingsDialog(self.config, self)
        dlg.settings_changed.connect(self._on_settings_changed)
        dlg.exec()

    def _on_settings_changed(self):
        self.undo_indicator.set_display_seconds(self.config.status_seconds)
        log.info(f"Theme: {self.config.theme}, undo indicator: {self.config.status_seconds}s")

    def _restore_state(self):
        if self.config.window_geometry:
            self.restoreGeometry(self.config.window_geometry)

    def closeEvent(self, event):
        self.config.save({"geometry": bytes(self.saveGeometry().toHex()).decode()})
        self.history_signals.detach(self.history)
        self.log_panel.detach(log)
        self.db.close()
        super().closeEvent(event)


def main():
    import sys
    app = QApplication(sys.argv)
    window = MainWindow(Config())
    window.show()
    sys.exit(app.exec())
