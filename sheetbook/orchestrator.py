"""
Application Wiring for Sheetbook

Builds the configured key-value store, one SheetRepository per sheet
type and the currency preference, and hands out form sessions wired to
them.

DESIGN DECISION: Nothing reaches for a global store. Every session gets
its repository and preference passed in, so a test can wire the whole
application onto an in-memory store.
"""

from typing import Optional, Union

from sheetbook.config import AppSettings, StorageBackend, get_settings
from sheetbook.forms import SESSION_TYPES, SheetFormSession
from sheetbook.log import configure_logging, get_logger
from sheetbook.models.sheet import SheetType
from sheetbook.services.preferences import CurrencyPreference
from sheetbook.services.storage import (
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStoreInterface,
    SheetRepository,
    SqliteKeyValueStore,
)


logger = get_logger(__name__)


class AppComponents:
    """Everything a presentation layer needs, bound to one store."""

    def __init__(
        self,
        store: KeyValueStoreInterface,
        settings: Optional[AppSettings] = None,
    ):
        self.store = store
        self.settings = settings or get_settings().app
        self.repositories: dict[SheetType, SheetRepository] = {
            sheet_type: SheetRepository(store, sheet_type) for sheet_type in SheetType
        }
        self.currency = CurrencyPreference(store, self.settings.default_currency)

    def repository(self, sheet_type: Union[SheetType, str]) -> SheetRepository:
        return self.repositories[SheetType(sheet_type)]

    def open_session(self, sheet_type: Union[SheetType, str]) -> SheetFormSession:
        """
        Create a form session for a sheet type.

        Call `await session.initialize(sheet_id)` before using it.
        """
        sheet_type = SheetType(sheet_type)
        session_class = SESSION_TYPES[sheet_type]
        return session_class(
            self.repository(sheet_type),
            currency=self.currency,
            settings=self.settings,
        )


def create_store(
    backend: StorageBackend,
    user_id: Optional[str] = None,
) -> KeyValueStoreInterface:
    """
    Build the key-value store for a backend.

    Raises:
        UnauthenticatedError: If the remote backend is used without a user
    """
    if backend == StorageBackend.MEMORY:
        return InMemoryKeyValueStore()
    if backend == StorageBackend.LOCAL:
        return SqliteKeyValueStore(get_settings().local_store.db_path)
    return GoogleSheetsKeyValueStore(user_id)


def create_app_components(
    backend: Optional[Union[StorageBackend, str]] = None,
    user_id: Optional[str] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        backend: Storage backend; defaults to the configured one
        user_id: Authenticated user, required by the remote backend

    Returns:
        AppComponents bound to the chosen store
    """
    settings = get_settings().app
    configure_logging(settings.log_level)

    backend = StorageBackend(backend) if backend is not None else settings.storage_backend
    store = create_store(backend, user_id)
    logger.info("app_components_created", backend=backend.value)

    return AppComponents(store, settings)
