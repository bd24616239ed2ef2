"""
Sheet Repository

Durable create/read/update/delete of sheets on top of any
KeyValueStoreInterface.

KEY LAYOUT (per sheet type):
    "<type>Sheets:list"        → JSON array of sheet ids, insertion order
    "<type>Sheets:item:<id>"   → the serialized sheet

DESIGN DECISION: One generic repository, bound to one sheet type at
construction. The per-type differences (key prefix, default title,
record model) live in SHEET_TYPE_CONFIG.

FAILURE SEMANTICS:
- Reads degrade: a missing or corrupt index lists as empty, a missing
  or corrupt record reads as None (corruption is logged).
- Writes propagate: a failed read or write inside create/update/delete/
  clear_all raises, so a caller never believes an unsaved sheet is saved.
- The index write and the record write are separate operations. Readers
  tolerate both halves of an interrupted write: an indexed id with no
  record is skipped, an unindexed record is simply not listed.
"""

import json
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from sheetbook.log import get_logger
from sheetbook.models.sheet import (
    PROTECTED_FIELDS,
    ArtisanSheet,
    SalarySheet,
    SheetBase,
    SheetType,
    TraderSheet,
    new_item_id,
    sheet_from_json,
    sheet_to_json,
    utc_now,
)
from sheetbook.services.storage.interface import (
    CorruptRecordError,
    InvalidPatchError,
    KeyValueStoreInterface,
    NotFoundError,
    StoreReadError,
)


logger = get_logger(__name__)


class SheetTypeConfig(BaseModel):
    """Everything the repository needs to know about one sheet type."""
    model_config = ConfigDict(frozen=True)

    key_prefix: str
    label: str
    model: type[SheetBase]


SHEET_TYPE_CONFIG: dict[SheetType, SheetTypeConfig] = {
    SheetType.TRADER: SheetTypeConfig(
        key_prefix="traderSheets", label="Trader", model=TraderSheet
    ),
    SheetType.SALARY: SheetTypeConfig(
        key_prefix="salarySheets", label="Salary", model=SalarySheet
    ),
    SheetType.ARTISAN: SheetTypeConfig(
        key_prefix="artisanSheets", label="Artisan", model=ArtisanSheet
    ),
}


def default_title(sheet_type: SheetType, on: Optional[date] = None) -> str:
    """Title given to a sheet created without one, e.g. 'Trader Sheet - 2024-12-01'."""
    on = on or date.today()
    return f"{SHEET_TYPE_CONFIG[sheet_type].label} Sheet - {on.isoformat()}"


class SheetRepository:
    """
    Repository for the sheets of one type.

    Usage:
        repo = SheetRepository(store, SheetType.TRADER)
        sheet_id = await repo.create({"title": "March"})
        sheet = await repo.get_by_id(sheet_id)
    """

    def __init__(
        self,
        store: KeyValueStoreInterface,
        sheet_type: Union[SheetType, str],
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self.sheet_type = SheetType(sheet_type)
        self._config = SHEET_TYPE_CONFIG[self.sheet_type]
        self._clock = clock

    @property
    def index_key(self) -> str:
        return f"{self._config.key_prefix}:list"

    def record_key(self, sheet_id: str) -> str:
        return f"{self._config.key_prefix}:item:{sheet_id}"

    # -------------------------------------------------------------------------
    # Index
    # -------------------------------------------------------------------------

    async def _read_index(self) -> list[str]:
        """
        Read the id index.

        Raises StoreReadError; a malformed index is logged and read as empty.
        """
        raw = await self._store.get(self.index_key)
        if raw is None:
            return []
        try:
            ids = json.loads(raw)
        except json.JSONDecodeError:
            ids = None
        if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
            logger.warning("sheet_index_corrupt", key=self.index_key)
            return []
        return ids

    async def _write_index(self, ids: list[str]) -> None:
        await self._store.set(self.index_key, json.dumps(ids))

    async def list_ids(self) -> list[str]:
        """All known sheet ids in insertion order. Never raises."""
        try:
            return await self._read_index()
        except StoreReadError as e:
            logger.warning("sheet_index_unreadable", key=self.index_key, error=str(e))
            return []

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def load(self, sheet_id: str) -> SheetBase:
        """
        Load a sheet, strictly.

        Raises:
            NotFoundError: No record for this id
            CorruptRecordError: A record exists but is not a valid sheet
                of this repository's type
            StoreReadError: The backend could not be read
        """
        raw = await self._store.get(self.record_key(sheet_id))
        if raw is None:
            raise NotFoundError(f"Sheet not found: {sheet_id}")
        try:
            sheet = sheet_from_json(raw)
        except ValidationError as e:
            raise CorruptRecordError(f"Sheet {sheet_id} is unreadable: {e}")
        if sheet.sheet_type != self.sheet_type:
            raise CorruptRecordError(
                f"Sheet {sheet_id} is a {sheet.type} sheet, expected {self.sheet_type.value}"
            )
        return sheet

    async def get_by_id(self, sheet_id: str) -> Optional[SheetBase]:
        """
        Retrieve a sheet by its ID.

        Returns:
            The sheet if found and readable, None otherwise
        """
        try:
            return await self.load(sheet_id)
        except CorruptRecordError as e:
            logger.warning("sheet_record_corrupt", sheet_id=sheet_id, error=str(e))
            return None
        except NotFoundError:
            return None
        except StoreReadError as e:
            logger.warning("sheet_record_unreadable", sheet_id=sheet_id, error=str(e))
            return None

    async def list_sheets(self) -> list[SheetBase]:
        """Every readable sheet, in index order. Dangling ids are skipped."""
        sheets = []
        for sheet_id in await self.list_ids():
            sheet = await self.get_by_id(sheet_id)
            if sheet is None:
                logger.info("sheet_index_dangling", sheet_id=sheet_id)
                continue
            sheets.append(sheet)
        return sheets

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _normalize_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """
        Map camelCase or snake_case field names to model field names.

        Raises:
            InvalidPatchError: If a name is not a field of this sheet type
        """
        model_fields = self._config.model.model_fields
        by_alias = {info.alias: name for name, info in model_fields.items() if info.alias}
        normalized = {}
        unknown = []
        for key, value in fields.items():
            if key in model_fields:
                normalized[key] = value
            elif key in by_alias:
                normalized[by_alias[key]] = value
            else:
                unknown.append(key)
        if unknown:
            raise InvalidPatchError(
                f"Unknown {self.sheet_type.value} sheet fields: {', '.join(sorted(unknown))}"
            )
        return normalized

    async def _put(self, sheet: SheetBase) -> None:
        """Index the sheet's id (if new) then write its record."""
        ids = await self._read_index()
        if sheet.id not in ids:
            ids.append(sheet.id)
            await self._write_index(ids)
        await self._store.set(self.record_key(sheet.id), sheet_to_json(sheet))

    async def create(
        self,
        fields: Optional[Mapping[str, Any]] = None,
        sheet_type: Optional[Union[SheetType, str]] = None,
    ) -> str:
        """
        Create and persist a new sheet.

        Args:
            fields: Initial field values (snake_case or camelCase names)
            sheet_type: Optional; must match the repository's type if given

        Returns:
            The generated sheet id

        Raises:
            ValueError: If `sheet_type` does not match
            InvalidPatchError: If `fields` names unknown fields
            pydantic.ValidationError: If a value is invalid (e.g. negative)
            StorageError: If the backend failed
        """
        if sheet_type is not None and SheetType(sheet_type) != self.sheet_type:
            raise ValueError(
                f"{self.sheet_type.value} repository cannot create a {SheetType(sheet_type).value} sheet"
            )

        data = {
            name: value
            for name, value in self._normalize_fields(fields or {}).items()
            if name not in PROTECTED_FIELDS
        }
        now = self._clock()
        data.update(id=new_item_id(), created_at=now, updated_at=now)
        if not data.get("title"):
            data["title"] = default_title(self.sheet_type, now.date())

        sheet = self._config.model.model_validate(data)
        await self._put(sheet)

        logger.info("sheet_created", sheet_type=self.sheet_type.value, sheet_id=sheet.id)
        return sheet.id

    async def update(self, sheet_id: str, patch: Mapping[str, Any]) -> str:
        """
        Overwrite the given fields of a sheet (update-or-create).

        A missing (or unreadable) sheet is recreated from the patch with
        this id. `id`, `type` and `created_at` are never overwritten.

        Returns:
            The unchanged sheet id
        """
        changes = self._normalize_fields(patch)
        now = self._clock()

        try:
            current = await self.load(sheet_id)
            data = current.model_dump()
        except NotFoundError as e:
            if isinstance(e, CorruptRecordError):
                logger.warning("sheet_record_replaced", sheet_id=sheet_id, error=str(e))
            data = {"id": sheet_id, "created_at": now}

        for name, value in changes.items():
            if name not in PROTECTED_FIELDS:
                data[name] = value
        data["id"] = sheet_id
        data["updated_at"] = now

        sheet = self._config.model.model_validate(data)
        await self._put(sheet)

        logger.info("sheet_updated", sheet_type=self.sheet_type.value, sheet_id=sheet_id)
        return sheet_id

    async def delete(self, sheet_id: str) -> None:
        """Remove a sheet's index entry and record. Idempotent."""
        ids = await self._read_index()
        if sheet_id in ids:
            await self._write_index([i for i in ids if i != sheet_id])
        await self._store.remove(self.record_key(sheet_id))

        logger.info("sheet_deleted", sheet_type=self.sheet_type.value, sheet_id=sheet_id)

    async def clear_all(self) -> None:
        """Remove every indexed record, then the index itself."""
        ids = await self._read_index()
        for sheet_id in ids:
            await self._store.remove(self.record_key(sheet_id))
        await self._store.remove(self.index_key)

        logger.info("sheets_cleared", sheet_type=self.sheet_type.value, count=len(ids))
