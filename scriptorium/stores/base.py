"""
Abstract base class for Scriptorium workspace stores.

A store is a versioned key-value map of opaque serialized workspace trees.
Every successful write bumps the key's version, which lets callers detect
concurrent modification with compare_and_swap().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class StorageError(Exception):
    """Raised when the underlying store cannot be read or written."""


class ConcurrentModificationError(StorageError):
    """Raised when a mutation keeps losing version races and gives up."""


@dataclass(frozen=True)
class StoredValue:
    """A stored payload and its version (versions start at 1)."""

    data: str
    version: int


class BaseStore(ABC):
    """Abstract base class for workspace storage backends."""

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the backend (open connections, create tables)."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release backend resources."""
        pass

    @abstractmethod
    def get(self, key: str) -> StoredValue | None:
        """Get the payload stored under key, or None."""
        pass

    @abstractmethod
    def set(self, key: str, data: str) -> int:
        """Store data unconditionally. Returns the new version."""
        pass

    @abstractmethod
    def compare_and_swap(self, key: str, data: str, expected_version: int) -> bool:
        """
        Store data only if the key is still at expected_version.

        Args:
            key: Storage key.
            data: Serialized payload.
            expected_version: Version read before modifying. 0 means the key
                must not exist yet.

        Returns:
            True if the write happened, False on a version mismatch.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix."""
        pass

    def __enter__(self) -> "BaseStore":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
