"""Storage backends for Scriptorium workspace trees."""

from scriptorium.stores.base import (
    BaseStore,
    ConcurrentModificationError,
    StorageError,
    StoredValue,
)
from scriptorium.stores.memory_store import MemoryStore
from scriptorium.stores.sqlite_store import SQLiteStore

__all__ = [
    "BaseStore",
    "ConcurrentModificationError",
    "MemoryStore",
    "SQLiteStore",
    "StorageError",
    "StoredValue",
]
