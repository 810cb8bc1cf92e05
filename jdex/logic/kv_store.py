"""
jdex/logic/kv_store.py
Durable key-value storage for small string blobs (the undo history).
One JSON object on disk, written atomically, with a byte quota.
"""
import json
import threading
from pathlib import Path
from typing import Dict, Optional

from jdex.logic.errors import QuotaExceededError
from jdex.utils import log

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


def _encoded_size(data: Dict[str, str]) -> int:
    return len(json.dumps(data, ensure_ascii=False).encode('utf-8'))


class JsonFileStore:
    def __init__(self, path: Path, quota_bytes: Optional[int] = DEFAULT_QUOTA_BYTES):
        self.path = Path(path)
        self.quota_bytes = quota_bytes
        self.lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        """Load the whole file. A missing or corrupt file reads as empty."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log.warning(f"Key-value store {self.path} unreadable, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]):
        """Write JSON atomically (temp file + replace)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix('.tmp')
        with open(temp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False)
        temp_path.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        with self.lock:
            return self._read().get(key)

    def set(self, key: str, value: str):
        with self.lock:
            data = self._read()
            data[key] = value
            if self.quota_bytes is not None and _encoded_size(data) > self.quota_bytes:
                raise QuotaExceededError(
                    f"Writing '{key}' would exceed the {self.quota_bytes} byte quota"
                )
            self._write(data)

    def remove(self, key: str):
        with self.lock:
            data = self._read()
            if key not in data:
                return
            del data[key]
            self._write(data)


class MemoryStore:
    """Same contract as JsonFileStore, kept in memory."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str):
        candidate = dict(self.data)
        candidate[key] = value
        if self.quota_bytes is not None and _encoded_size(candidate) > self.quota_bytes:
            raise QuotaExceededError(
                f"Writing '{key}' would exceed the {self.quota_bytes} byte quota"
            )
        self.data = candidate

    def remove(self, key: str):
        self.data.pop(key, None)
