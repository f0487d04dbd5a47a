"""
In-memory store for ephemeral workspaces and tests.
"""

from __future__ import annotations

import threading

from scriptorium.stores.base import BaseStore, StoredValue


class MemoryStore(BaseStore):
    """Dict-backed store. Thread-safe; contents vanish with the process."""

    def __init__(self):
        self._data: dict[str, StoredValue] = {}
        self._lock = threading.Lock()

    def initialize(self) -> None:
        pass

    def close(self) -> None:
        pass

    def get(self, key: str) -> StoredValue | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, data: str) -> int:
        with self._lock:
            current = self._data.get(key)
            version = (current.version if current else 0) + 1
            self._data[key] = StoredValue(data=data, version=version)
            return version

    def compare_and_swap(self, key: str, data: str, expected_version: int) -> bool:
        with self._lock:
            current = self._data.get(key)
            current_version = current.version if current else 0
            if current_version != expected_version:
                return False
            self._data[key] = StoredValue(data=data, version=current_version + 1)
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))
