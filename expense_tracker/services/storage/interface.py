"""
Abstract Storage Interface

DESIGN DECISION: The store talks to a plain async key-value interface,
the same shape as an on-device AsyncStorage:
1. One string value per string key
2. Whole-value reads and writes, no partial updates
3. Swappable backends (JSON files on disk, in-memory for tests)

Encoding the expense collection is the store's job, not the backend's.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for durable key-value storage.

    A successful set_item must be all-or-nothing: a reader never sees
    a partially written value.
    """

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key has never been written

        Raises:
            StorageReadError: If the value exists but cannot be read
        """
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: Storage key
            value: Complete new value

        Raises:
            StorageWriteError: If the value could not be written
        """
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """
        Delete a key. Removing a missing key is not an error.

        Raises:
            StorageWriteError: If the key exists but could not be removed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored data could not be read or deserialized."""
    pass


class StorageWriteError(StorageError):
    """Data could not be persisted."""
    pass
