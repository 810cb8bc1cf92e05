from .main_window import MainWindow, main

__all__ = ["MainWindow", "main"]
