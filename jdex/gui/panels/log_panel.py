"""
jdex/gui/panels/log_panel.py
Dockable Log Viewer. Mirrors the package logger in real-time.
"""
import html

from PyQt6.QtWidgets import QWidget, QVBoxLayout, QTextEdit, QLabel, QHBoxLayout, QPushButton
from PyQt6.QtCore import QDateTime
import qtawesome as qta

LEVEL_COLORS = {
    "ERROR": "#dc3545",
    "WARNING": "#ffc107",
}


class LogPanel(QWidget):
    def __init__(self):
        super().__init__()
        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 10, 10, 10)
        layout.setSpacing(5)

        # Header
        header = QHBoxLayout()
        lbl = QLabel("ACTIVITY LOG")
        lbl.setObjectName("SubHeader")
        header.addWidget(lbl)

        btn_clear = QPushButton()
        btn_clear.setIcon(qta.icon('fa5s.trash-alt', color='#6c757d'))
        btn_clear.setFlat(True)
        btn_clear.setToolTip("Clear Log")
        btn_clear.clicked.connect(self.clear_log)
        header.addWidget(btn_clear)

        header.addStretch()
        layout.addLayout(header)

        # Log Area (Read Only)
        self.text_area = QTextEdit()
        self.text_area.setReadOnly(True)
        self.text_area.setObjectName("LogArea")
        layout.addWidget(self.text_area)

    def attach(self, logger):
        """Show everything the given Logger writes (debug lines excluded)."""
        logger.add_listener(self._on_log)

    def detach(self, logger):
        logger.remove_listener(self._on_log)

    def _on_log(self, message, level):
        if level != "DEBUG":
            self.log(message, level)

    def log(self, message, level="info"):
        """Levels: debug, info, warning, error"""
        timestamp = QDateTime.currentDateTime().toString("HH:mm:ss")
        color = LEVEL_COLORS.get(level.upper(), "palette(text)")

        # HTML formatting for color
        line = f'<span style="color:#888;">[{timestamp}]</span> <span style="color:{color};">{html.escape(message)}</span>'
        self.text_area.append(line)

    def clear_log(self):
        self.text_area.clear()
