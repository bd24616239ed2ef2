"""Services package."""

from sheetbook.services.preferences import CURRENCY_SYMBOLS, CurrencyPreference
from sheetbook.services.storage import (
    ConnectionError,
    CorruptRecordError,
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    InvalidPatchError,
    KeyValueStoreInterface,
    NotFoundError,
    SheetRepository,
    SqliteKeyValueStore,
    StorageError,
    StoreReadError,
    StoreWriteError,
    UnauthenticatedError,
)

__all__ = [
    # Preferences
    "CURRENCY_SYMBOLS",
    "CurrencyPreference",
    # Storage services
    "ConnectionError",
    "CorruptRecordError",
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
    "InMemoryKeyValueStore",
    "InvalidPatchError",
    "KeyValueStoreInterface",
    "NotFoundError",
    "SheetRepository",
    "SqliteKeyValueStore",
    "StorageError",
    "StoreReadError",
    "StoreWriteError",
    "UnauthenticatedError",
]
