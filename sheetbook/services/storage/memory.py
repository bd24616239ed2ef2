"""
In-Memory Key-Value Store

Used by tests and by throwaway sessions (`storage_backend=memory`).
Nothing survives the process.
"""

from typing import Optional

from sheetbook.services.storage.interface import KeyValueStoreInterface


class InMemoryKeyValueStore(KeyValueStoreInterface):
    """Dictionary-backed key-value store."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """All stored keys (inspection helper, not part of the interface)."""
        return list(self._data)
