"""
Storage Services Package

Provides the key-value interface, its backends and the sheet repository
built on top of it.
"""

from sheetbook.services.storage.interface import (
    ConnectionError,
    CorruptRecordError,
    InvalidPatchError,
    KeyValueStoreInterface,
    NotFoundError,
    StorageError,
    StoreReadError,
    StoreWriteError,
    UnauthenticatedError,
)
from sheetbook.services.storage.memory import InMemoryKeyValueStore
from sheetbook.services.storage.sqlite_store import SqliteKeyValueStore
from sheetbook.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
)
from sheetbook.services.storage.repository import (
    SHEET_TYPE_CONFIG,
    SheetRepository,
    default_title,
)

__all__ = [
    # Interfaces
    "KeyValueStoreInterface",
    # Exceptions
    "ConnectionError",
    "CorruptRecordError",
    "InvalidPatchError",
    "NotFoundError",
    "StorageError",
    "StoreReadError",
    "StoreWriteError",
    "UnauthenticatedError",
    # Backends
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    # Repository
    "SHEET_TYPE_CONFIG",
    "SheetRepository",
    "default_title",
]
