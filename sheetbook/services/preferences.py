"""
User Preferences

Currently only the display currency. The stored value is a currency code
(NGN, USD, EUR, GBP) kept in the same key-value store as the sheets.
No conversion ever happens: the symbol is purely cosmetic.
"""

from typing import Optional

from sheetbook.config import get_settings
from sheetbook.config.settings import SUPPORTED_CURRENCIES
from sheetbook.log import get_logger
from sheetbook.services.storage.interface import KeyValueStoreInterface, StoreReadError


logger = get_logger(__name__)

CURRENCY_KEY = "userCurrency"

CURRENCY_SYMBOLS: dict[str, str] = {
    "NGN": "₦",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


class CurrencyPreference:
    """Reads and writes the user's currency choice."""

    def __init__(
        self,
        store: KeyValueStoreInterface,
        default_code: Optional[str] = None,
    ):
        self._store = store
        self._default_code = default_code or get_settings().app.default_currency

    async def get_code(self) -> str:
        """Stored currency code, or the default if absent/unknown/unreadable."""
        try:
            code = await self._store.get(CURRENCY_KEY)
        except StoreReadError as e:
            logger.warning("currency_unreadable", error=str(e))
            return self._default_code
        if code and code.upper() in CURRENCY_SYMBOLS:
            return code.upper()
        return self._default_code

    async def get_symbol(self) -> str:
        return CURRENCY_SYMBOLS.get(await self.get_code(), CURRENCY_SYMBOLS["NGN"])

    async def set_currency(self, code: str) -> None:
        """
        Store a new currency code.

        Raises:
            ValueError: If the code is not supported
            StoreWriteError: If the write failed
        """
        normalized = code.strip().upper()
        if normalized not in SUPPORTED_CURRENCIES:
            raise ValueError(
                f"Unsupported currency: {code}. Allowed: {', '.join(SUPPORTED_CURRENCIES)}"
            )
        await self._store.set(CURRENCY_KEY, normalized)
