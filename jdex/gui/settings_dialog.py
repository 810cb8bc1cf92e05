"""
jdex/gui/settings_dialog.py
Settings dialog with theme selector and undo indicator duration.
"""
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel,
    QComboBox, QPushButton, QGroupBox, QSpinBox
)
from PyQt6.QtCore import pyqtSignal

import qdarktheme


class SettingsDialog(QDialog):
    # Signal emitted when settings change
    settings_changed = pyqtSignal()

    def __init__(self, config, parent=None):
        super().__init__(parent)
        self.config = config
        self.setWindowTitle("Preferences")
        self.setMinimumWidth(400)

        layout = QVBoxLayout(self)

        # Theme selection
        theme_group = QGroupBox("Appearance")
        theme_layout = QHBoxLayout()
        theme_layout.addWidget(QLabel("Theme:"))
        self.theme_combo = QComboBox()
        self.theme_combo.addItems(["auto", "dark", "light"])
        self.theme_combo.setCurrentText(self.config.theme)
        theme_layout.addWidget(self.theme_combo)
        theme_layout.addStretch()
        theme_group.setLayout(theme_layout)
        layout.addWidget(theme_group)

        # Undo indicator
        undo_group = QGroupBox("Undo / Redo")
        undo_layout = QVBoxLayout()
        seconds_layout = QHBoxLayout()
        seconds_layout.addWidget(QLabel("Show last action for:"))
        self.seconds_spin = QSpinBox()
        self.seconds_spin.setRange(1, 30)
        self.seconds_spin.setSuffix(" s")
        self.seconds_spin.setValue(self.config.status_seconds)
        seconds_layout.addWidget(self.seconds_spin)
        seconds_layout.addStretch()
        undo_layout.addLayout(seconds_layout)

        info_label = QLabel(
            "History keeps the last 50 actions for 7 days.\n"
            "Resetting the database clears it."
        )
        info_label.setWordWrap(True)
        info_label.setStyleSheet("color: gray; font-size: 11px;")
        undo_layout.addWidget(info_label)
        undo_group.setLayout(undo_layout)
        layout.addWidget(undo_group)

        # Buttons
        btn_layout = QHBoxLayout()
        btn_layout.addStretch()
        self.ok_btn = QPushButton("OK")
        self.ok_btn.clicked.connect(self.accept)
        self.cancel_btn = QPushButton("Cancel")
        self.cancel_btn.clicked.connect(self.reject)
        btn_layout.addWidget(self.ok_btn)
        btn_layout.addWidget(self.cancel_btn)
        layout.addLayout(btn_layout)

    def accept(self):
        # Save settings
        self.config.save({
            "theme": self.theme_combo.currentText(),
            "status_seconds": self.seconds_spin.value()
        })
        # Apply theme immediately
        qdarktheme.setup_theme(self.config.theme)
        self.settings_changed.emit()
        super().accept()
