"""Tests for the Qt signal bridge and the status bar undo indicator."""
from dataclasses import replace

import pytest

pytest.importorskip("PyQt6.QtWidgets")
pytest.importorskip("qtawesome")
pytest.importorskip("qdarktheme")

from jdex.config import Config  # noqa: E402
from jdex.gui.history_bridge import HistorySignals  # noqa: E402
from jdex.gui.main_window import MainWindow  # noqa: E402
from jdex.gui.panels.log_panel import LogPanel  # noqa: E402
from jdex.gui.settings_dialog import SettingsDialog  # noqa: E402
from jdex.gui.styles import STYLESHEET  # noqa: E402
from jdex.gui.undo_indicator import UndoStatusIndicator, action_icon_name  # noqa: E402
from jdex.logic.actions import CreateAction, EntityType, UpdateAction  # noqa: E402
from jdex.logic.status import HistoryStatus, project_status  # noqa: E402
from jdex.utils import Logger, log  # noqa: E402

CREATED = CreateAction(entity_type=EntityType.FOLDER, entity_data={"id": 1, "name": "Invoices"},
                       description='Created folder "Invoices"')


def rename():
    return UpdateAction(entity_type=EntityType.FOLDER, entity_id=3,
                        previous_state={"name": "Old"}, new_state={"name": "New"},
                        description="Renamed")


def test_icon_names():
    assert action_icon_name(None) is None
    assert action_icon_name(CREATED) == "fa5s.plus"
    assert action_icon_name(replace(CREATED, was_undone=True)) == "fa5s.undo"
    assert action_icon_name(replace(CREATED, was_redone=True)) == "fa5s.redo"


def test_bridge_emits_journal_events(qapp, history):
    signals = HistorySignals()
    statuses, refreshes, failures = [], [], []
    signals.changed.connect(statuses.append)
    signals.refreshed.connect(lambda: refreshes.append(1))
    signals.failed.connect(failures.append)

    signals.attach(history)
    assert statuses[-1] == HistoryStatus()

    history.push_action(rename())
    history.undo()
    assert refreshes == [1]
    assert statuses[-1].last_action_description == "Undid: Renamed"

    history.store.fail_with = RuntimeError("locked")
    history.redo()
    assert failures == ["Redo failed: locked"]


def test_bridge_detach_stops_events(qapp, history):
    signals = HistorySignals()
    statuses = []
    signals.changed.connect(statuses.append)
    signals.attach(history)
    signals.detach(history)
    count = len(statuses)

    history.push_action(rename())
    assert len(statuses) == count
    assert history.on_change is None


def test_indicator_shows_then_fades(qapp):
    indicator = UndoStatusIndicator(display_seconds=2)
    assert indicator.fade_timer.interval() == 2000

    indicator.update_status(project_status([CREATED], [], CREATED, 1000))
    assert indicator.is_description_visible()
    assert indicator.description_label.text() == 'Created folder "Invoices"'
    assert indicator.fade_timer.isActive()
    assert indicator.counts_label.text() == "Undo 1"

    indicator.fade()
    assert not indicator.is_description_visible()
    assert not indicator.fade_timer.isActive()


def test_indicator_ignores_repeated_status(qapp):
    indicator = UndoStatusIndicator()
    status = project_status([CREATED], [], CREATED, 1000)
    indicator.update_status(status)
    indicator.fade()

    indicator.update_status(status)
    assert not indicator.is_description_visible()

    indicator.update_status(project_status([], [CREATED], replace(CREATED, was_undone=True), 2000))
    assert indicator.is_description_visible()
    assert indicator.description_label.text().startswith("Undid: ")
    assert indicator.counts_label.text() == "Redo 1"


def test_indicator_clears_on_empty_history(qapp):
    indicator = UndoStatusIndicator()
    indicator.update_status(project_status([CREATED], [CREATED], CREATED, 1000))
    assert indicator.counts_label.text() == "Undo 1  ·  Redo 1"

    indicator.update_status(HistoryStatus())
    assert not indicator.is_description_visible()
    assert indicator.counts_label.isHidden()


def test_indicator_reshows_undo_within_the_same_millisecond(qapp, history):
    indicator = UndoStatusIndicator()
    history.on_change = indicator.update_status

    history.push_action(rename())
    pushed_at = history.status().last_action_at
    indicator.fade()
    history.undo()

    # the fixed clock never advances, so both events share one timestamp
    assert history.status().last_action_at == pushed_at
    assert indicator.is_description_visible()
    assert indicator.description_label.text() == "Undid: Renamed"


def test_log_panel_detach_stops_mirroring(qapp):
    logger = Logger()
    panel = LogPanel()
    panel.attach(logger)
    logger.info("first")
    panel.detach(logger)
    logger.info("second")

    text = panel.text_area.toPlainText()
    assert "first" in text
    assert "second" not in text
    assert logger.listeners == []


def test_closing_main_window_releases_shared_logger(qapp, tmp_path):
    config = Config(tmp_path / "config.json")
    config.database_path = str(tmp_path / "index.sqlite")
    config.history_path = str(tmp_path / "history.json")
    window = MainWindow(config)
    window.show()
    assert window.log_panel._on_log in log.listeners

    window.close()
    assert window.log_panel._on_log not in log.listeners


def test_settings_switch_theme_and_keep_window_stylesheet(qapp, tmp_path):
    config = Config(tmp_path / "config.json")
    config.database_path = str(tmp_path / "index.sqlite")
    config.history_path = str(tmp_path / "history.json")
    window = MainWindow(config)
    window.show()
    assert window.styleSheet().endswith(STYLESHEET)

    dialog = SettingsDialog(config, window)
    dialog.theme_combo.setCurrentText("dark")
    dialog.seconds_spin.setValue(9)
    dialog.accept()

    assert Config(tmp_path / "config.json").theme == "dark"
    assert qapp.styleSheet()
    assert window.styleSheet().endswith(STYLESHEET)
    window.close()
