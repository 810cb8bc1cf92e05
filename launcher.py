"""
launcher.py
Entry point.
Applies the saved theme BEFORE showing any windows.
"""
import sqlite3
import sys

from PyQt6.QtWidgets import QApplication
from jdex.config import Config  # Import config to read theme
import qdarktheme
from jdex.utils import log


def main():
    app = QApplication(sys.argv)

    # 1. Load Config Early
    config = Config()

    # 2. Apply Saved Theme
    qdarktheme.setup_theme(config.theme)

    # 3. Initialize Main Window
    try:
        from jdex.gui.main_window import MainWindow
        window = MainWindow(config)
    except (OSError, ImportError, sqlite3.Error) as e:
        log.error(f"Startup failed: {e}")
        sys.exit(1)

    window.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
