"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
JSON files on disk are the durable backend; the in-memory backend
serves tests and ephemeral sessions.
"""

from expense_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from expense_tracker.services.storage.json_file import JsonFileStorage
from expense_tracker.services.storage.memory import InMemoryStorage

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
