"""
Utility functions and helpers
"""
import time
from pathlib import Path
from typing import Callable, List, Optional
from datetime import datetime


class Logger:
    """Simple logging utility"""

    LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

    def __init__(self, log_file: str = None, name: str = "jdex"):
        self.name = name
        self.log_file = Path(log_file) if log_file else None
        self.listeners: List[Callable[[str, str], None]] = []

    def set_log_file(self, log_file: Optional[str]):
        self.log_file = Path(log_file) if log_file else None

    def add_listener(self, callback: Callable[[str, str], None]):
        """Mirror every message to callback(message, level)"""
        self.listeners.append(callback)

    def remove_listener(self, callback: Callable[[str, str], None]):
        if callback in self.listeners:
            self.listeners.remove(callback)

    def log(self, message: str, level: str = "INFO"):
        """Log a message to console and optionally to file"""
        level = level.upper()
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        log_message = f"[{timestamp}] [{level}] {message}"

        print(log_message)

        if self.log_file:
            try:
                self.log_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self.log_file, 'a', encoding='utf-8') as f:
                    f.write(log_message + '\n')
            except OSError as e:
                print(f"[{timestamp}] [ERROR] Cannot write log file {self.log_file}: {e}")

        for listener in list(self.listeners):
            listener(message, level)

    def debug(self, message: str): self.log(message, "DEBUG")
    def info(self, message: str): self.log(message, "INFO")
    def warning(self, message: str): self.log(message, "WARNING")
    def error(self, message: str): self.log(message, "ERROR")


# Shared package logger
log = Logger()


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def format_file_size(size_bytes: Optional[int]) -> str:
    """Format file size in human-readable format"""
    if size_bytes is None:
        return ""
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"
