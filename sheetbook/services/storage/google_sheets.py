"""
Google Sheets Storage Implementation

The remote backend. Each authenticated user gets their own worksheet
inside one spreadsheet, holding one key-value pair per row:

    key | value | updated_at

DESIGN DECISION: The remote backend speaks the same key-value interface
as the local one, so the sheet repository (index key + one record key
per sheet) works unchanged on either.

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (index and record are separate rows)
- A cell holds at most 50,000 characters, which bounds a single sheet
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from sheetbook.config import GoogleSheetsSettings, get_settings
from sheetbook.log import get_logger
from sheetbook.models.sheet import utc_now
from sheetbook.services.storage.interface import (
    ConnectionError,
    KeyValueStoreInterface,
    StoreReadError,
    StoreWriteError,
    UnauthenticatedError,
)


logger = get_logger(__name__)

# Column layout of a per-user worksheet
KV_COLUMNS = [
    "key",
    "value",
    "updated_at",
]


# Cell access only; the spreadsheet must already be shared with the
# service account.
SHEETS_SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)


class GoogleSheetsClient:
    """
    Opens the shared spreadsheet and hands out per-user worksheets.

    One spreadsheet holds every user; each user's keys live on a
    worksheet titled "<worksheet_prefix><user_id>", created on first use.
    Worksheet handles are cached per user for the life of the client.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._settings = settings or get_settings().google_sheets
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[str, gspread.Worksheet] = {}

    def worksheet_title(self, user_id: str) -> str:
        return f"{self._settings.worksheet_prefix}{user_id}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _open_spreadsheet(self) -> gspread.Spreadsheet:
        credentials_path = self._settings.credentials_path
        try:
            credentials = Credentials.from_service_account_file(
                credentials_path, scopes=list(SHEETS_SCOPES)
            )
        except FileNotFoundError as e:
            raise ConnectionError(f"No service account file at {credentials_path}") from e
        try:
            return gspread.authorize(credentials).open_by_key(self._settings.spreadsheet_id)
        except gspread.SpreadsheetNotFound as e:
            raise ConnectionError(
                f"Spreadsheet {self._settings.spreadsheet_id} is missing or not shared"
            ) from e
        except Exception as e:
            raise ConnectionError(f"Could not open the sheetbook spreadsheet: {e}") from e

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """The shared spreadsheet, opened once (with retries) and reused."""
        if self._spreadsheet is None:
            self._spreadsheet = self._open_spreadsheet()
        return self._spreadsheet

    def get_user_worksheet(self, user_id: str) -> gspread.Worksheet:
        """Get or create the worksheet holding one user's keys."""
        if user_id in self._worksheets:
            return self._worksheets[user_id]

        spreadsheet = self.get_spreadsheet()
        title = self.worksheet_title(user_id)
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(title=title, rows=200, cols=len(KV_COLUMNS))
            sheet.append_row(KV_COLUMNS)
            logger.info("user_worksheet_created", user_id=user_id, title=title)

        self._worksheets[user_id] = sheet
        return sheet


class GoogleSheetsKeyValueStore(KeyValueStoreInterface):
    """
    Per-user key-value store on a Google Sheets worksheet.

    Refuses to exist without a user: every key belongs to someone.
    """

    def __init__(
        self,
        user_id: Optional[str],
        client: Optional[GoogleSheetsClient] = None,
    ):
        if not user_id:
            raise UnauthenticatedError(
                "Remote storage requires an authenticated user"
            )
        self._user_id = user_id
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet: gspread.Worksheet, key: str) -> Optional[int]:
        """1-based row number holding `key`, None if absent."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
            if row and row[0] == key:
                return idx
        return None

    async def get(self, key: str) -> Optional[str]:
        try:
            sheet = self._client.get_user_worksheet(self._user_id)
            for row in sheet.get_all_values()[1:]:
                if row and row[0] == key:
                    return row[1] if len(row) > 1 else ""
            return None
        except Exception as e:
            raise StoreReadError(f"Failed to read {key!r}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def set(self, key: str, value: str) -> None:
        try:
            sheet = self._client.get_user_worksheet(self._user_id)
            timestamp = utc_now().isoformat()
            idx = self._find_row(sheet, key)
            if idx is None:
                sheet.append_row([key, value, timestamp], value_input_option="RAW")
            else:
                # RAW so stored JSON is never reinterpreted as a formula/number
                sheet.update(
                    range_name=f"B{idx}:C{idx}",
                    values=[[value, timestamp]],
                    value_input_option="RAW",
                )
        except Exception as e:
            logger.error("kv_write_failed", key=key, user_id=self._user_id, error=str(e))
            raise StoreWriteError(f"Failed to write {key!r}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def remove(self, key: str) -> None:
        try:
            sheet = self._client.get_user_worksheet(self._user_id)
            idx = self._find_row(sheet, key)
            if idx is not None:
                sheet.delete_rows(idx)
        except Exception as e:
            logger.error("kv_remove_failed", key=key, user_id=self._user_id, error=str(e))
            raise StoreWriteError(f"Failed to remove {key!r}: {e}")
