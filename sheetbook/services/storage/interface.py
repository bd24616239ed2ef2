"""
Abstract Storage Interface

DESIGN DECISION: Sheets are stored through a plain key-value interface.
This allows us to:
1. Keep sheets on the device (SQLite) or remotely (Google Sheets)
2. Use in-memory storage for testing
3. Keep the repository logic identical across backends

The interface is intentionally tiny: get, set, remove. The substrate is
not assumed to list keys, so the repository keeps its own index.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for a persistent string-to-string mapping.

    Any backend (in-memory, SQLite, Google Sheets...) must implement
    these methods.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The key to read

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StoreReadError: If the backend could not be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: The key to write
            value: The string to store

        Raises:
            StoreWriteError: If the write failed (I/O error, quota...)
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Args:
            key: The key to remove

        Raises:
            StoreWriteError: If the removal failed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Requested sheet has no record."""
    pass


class CorruptRecordError(NotFoundError):
    """A record exists but could not be parsed as a sheet."""
    pass


class StoreReadError(StorageError):
    """The key-value backend failed a read."""
    pass


class StoreWriteError(StorageError):
    """The key-value backend failed a write."""
    pass


class InvalidPatchError(StorageError):
    """An update named fields that the sheet does not have."""
    pass


class UnauthenticatedError(StorageError):
    """A per-user backend was used without an authenticated user."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
