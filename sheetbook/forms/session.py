"""
Sheet Form Session

Bridges user input to the calculation engine and the sheet repository,
for one sheet at a time.

Flow:
1. initialize() → load an existing sheet, or fill in the default lines
2. update_field() → store raw text, recompute totals, maybe return a
   stock advisory
3. add_line_item() / remove_line_item() → grow or shrink a collection
4. save() → snapshot the coerced numbers and create or update the sheet

DESIGN DECISION: A session never raises on a storage failure during
save. It returns a SaveResult carrying a message, and keeps every field
as it was so the user can simply retry.

Each sheet type is a small subclass that only declares tables
(scalar fields, collections, defaults) and how to total them.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, Optional, Union

from pydantic import ValidationError

from sheetbook.calculations import (
    STOCK_FIELDS,
    classify_difference,
    current_stock,
    evaluate_stock,
)
from sheetbook.config import AppSettings, get_settings
from sheetbook.forms import messages
from sheetbook.log import get_logger
from sheetbook.models.calculation import SheetTotals, StockAdvisory
from sheetbook.models.form import (
    LINE_ITEM_FIELDS,
    LineDraft,
    LineItemKind,
    SaveResult,
    SheetView,
)
from sheetbook.models.sheet import SheetBase, SheetType
from sheetbook.services.preferences import CURRENCY_SYMBOLS, CurrencyPreference
from sheetbook.services.storage import (
    SHEET_TYPE_CONFIG,
    SheetRepository,
    StorageError,
    UnauthenticatedError,
)


logger = get_logger(__name__)


class FormError(Exception):
    """Invalid operation on a form session (bad path, unsupported removal...)."""
    pass


def number_text(value: Any) -> str:
    """Render a stored number back into an editable field."""
    if isinstance(value, Decimal):
        return messages.quantity(value)
    return "" if value is None else str(value)


class SheetFormSession(ABC):
    """
    Editing session for one sheet.

    Subclasses declare:
        sheet_type: which sheets they edit
        scalar_fields: top-level numeric inputs (salary, costs...)
        collections: collection name → kind of line item it holds
        removable_collections: collections whose lines may be removed
        default_items: lines a new sheet starts with, per collection
    """

    sheet_type: ClassVar[SheetType]
    scalar_fields: ClassVar[tuple[str, ...]] = ()
    collections: ClassVar[dict[str, LineItemKind]] = {}
    removable_collections: ClassVar[frozenset[str]] = frozenset()
    default_items: ClassVar[dict[str, tuple[dict[str, str], ...]]] = {}

    def __init__(
        self,
        repository: SheetRepository,
        currency: Optional[CurrencyPreference] = None,
        settings: Optional[AppSettings] = None,
    ):
        if repository.sheet_type != self.sheet_type:
            raise ValueError(
                f"{type(self).__name__} needs a {self.sheet_type.value} repository, "
                f"got {repository.sheet_type.value}"
            )
        self._repository = repository
        self._currency = currency
        self._settings = settings or get_settings().app

        self.sheet_id: Optional[str] = None
        self.title = ""
        self.currency_symbol = CURRENCY_SYMBOLS[self._settings.default_currency]
        self.fields: dict[str, str] = {name: "" for name in self.scalar_fields}
        self.items: dict[str, list[LineDraft]] = {name: [] for name in self.collections}
        self.notice: Optional[str] = None
        self.totals: SheetTotals = self._calculate()

    @property
    def is_new(self) -> bool:
        return self.sheet_id is None

    # -------------------------------------------------------------------------
    # Per-type hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    def _calculate(self) -> SheetTotals:
        """Totals from the current raw field text."""
        pass

    @abstractmethod
    def _snapshot(self) -> dict[str, Any]:
        """Type-specific persisted fields, with numbers coerced."""
        pass

    def _save_advisories(self) -> list[StockAdvisory]:
        """Advisories to re-surface when saving."""
        return []

    def _on_item_changed(self, draft: LineDraft, field: str) -> Optional[StockAdvisory]:
        """Hook run after a line item field changes."""
        return None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self, existing_id: Optional[str] = None) -> SheetView:
        """
        Load an existing sheet, or start a new one with default lines.

        A missing sheet leaves the fields empty and sets `notice`; the
        session still targets `existing_id`, so saving recreates it.
        """
        if self._currency is not None:
            self.currency_symbol = await self._currency.get_symbol()

        if existing_id:
            self.sheet_id = existing_id
            sheet = await self._repository.get_by_id(existing_id)
            if sheet is None:
                self.notice = messages.SHEET_NOT_FOUND
            else:
                self._load(sheet)
        else:
            self._populate_defaults()
            label = SHEET_TYPE_CONFIG[self.sheet_type].label
            self.title = f"New {label} Sheet - {date.today().isoformat()}"

        self._refresh()
        return self.view()

    def _load(self, sheet: SheetBase) -> None:
        self.title = sheet.title
        for name in self.scalar_fields:
            self.fields[name] = number_text(getattr(sheet, name))
        for name, kind in self.collections.items():
            drafts = []
            for item in getattr(sheet, name):
                draft = LineDraft(
                    id=item.id,
                    kind=kind,
                    fields={f: number_text(getattr(item, f)) for f in LINE_ITEM_FIELDS[kind]},
                )
                if kind == LineItemKind.PRODUCT:
                    draft.current_stock = item.current_stock
                drafts.append(draft)
            self.items[name] = drafts

    def _blank_item(
        self,
        kind: LineItemKind,
        item_id: Optional[str] = None,
        **values: str,
    ) -> LineDraft:
        if kind == LineItemKind.PRODUCT:
            values.setdefault(
                "low_stock_threshold",
                number_text(self._settings.default_low_stock_threshold),
            )
        return LineDraft.blank(kind, item_id, **values)

    def _populate_defaults(self) -> None:
        for name, defaults in self.default_items.items():
            kind = self.collections[name]
            drafts = []
            for default in defaults:
                values = dict(default)
                item_id = values.pop("id", None)
                drafts.append(self._blank_item(kind, item_id, **values))
            self.items[name] = drafts

    def _refresh(self) -> None:
        self.totals = self._calculate()

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def _find_item(self, collection: str, item_id: str) -> LineDraft:
        if collection not in self.items:
            raise FormError(f"Unknown collection: {collection}")
        for draft in self.items[collection]:
            if draft.id == item_id:
                return draft
        raise FormError(f"No line item {item_id!r} in {collection}")

    def update_field(self, path: str, raw_text: str) -> Optional[StockAdvisory]:
        """
        Store raw text at `path` and recompute totals.

        Paths:
            "title"
            "<scalar>"                       e.g. "salary"
            "<collection>.<item_id>.<field>" e.g. "products.ab12.quantity_sold"

        Returns:
            A stock advisory if the change affected a product's stock,
            None otherwise. The change is applied either way.

        Raises:
            FormError: If the path does not name an editable field
        """
        parts = path.split(".")
        advisory = None

        if path == "title":
            self.title = raw_text
        elif len(parts) == 1 and path in self.fields:
            self.fields[path] = raw_text
        elif len(parts) == 3:
            collection, item_id, field = parts
            draft = self._find_item(collection, item_id)
            if field not in LINE_ITEM_FIELDS[draft.kind]:
                raise FormError(f"{draft.kind.value} has no field {field!r}")
            draft.fields[field] = raw_text
            advisory = self._on_item_changed(draft, field)
        else:
            raise FormError(f"Unknown field path: {path!r}")

        self._refresh()
        return advisory

    def add_line_item(self, kind: Union[LineItemKind, str]) -> str:
        """
        Append a blank line item of `kind` to the matching collection.

        Returns:
            The new item's id

        Raises:
            FormError: If this sheet type has no collection of that kind
        """
        kind = LineItemKind(kind)
        for name, collection_kind in self.collections.items():
            if collection_kind == kind:
                draft = self._blank_item(kind)
                self.items[name].append(draft)
                self._refresh()
                return draft.id
        raise FormError(f"{self.sheet_type.value} sheets have no {kind.value} lines")

    def remove_line_item(self, item_id: str) -> None:
        """
        Remove a line item. Only some collections allow it.

        Removing an id that is not present is a no-op.

        Raises:
            FormError: If the item's collection does not allow removal
        """
        if not self.removable_collections:
            raise FormError(f"{self.sheet_type.value} sheets do not support removing lines")
        for name, drafts in self.items.items():
            for draft in drafts:
                if draft.id != item_id:
                    continue
                if name not in self.removable_collections:
                    raise FormError(f"Lines cannot be removed from {name}")
                drafts.remove(draft)
                self._refresh()
                return

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def view(self) -> SheetView:
        return SheetView(
            sheet_id=self.sheet_id,
            sheet_type=self.sheet_type,
            title=self.title,
            is_new=self.is_new,
            currency_symbol=self.currency_symbol,
            fields=dict(self.fields),
            collections={
                name: [draft.model_copy(deep=True) for draft in drafts]
                for name, drafts in self.items.items()
            },
            totals=self.totals,
            outcome=classify_difference(self.totals.difference),
            notice=self.notice,
        )

    async def save(self) -> SaveResult:
        """
        Persist the sheet with a fresh snapshot of its totals.

        Creates the sheet on first save, updates it afterwards. The
        profit/loss classification is returned, never stored.
        """
        self._refresh()
        totals = self.totals
        outcome = classify_difference(totals.difference)
        outcome_text = messages.outcome_message(outcome, self.sheet_type, self.currency_symbol)
        advisories = self._save_advisories()

        payload = self._snapshot()
        payload.update(
            title=self.title,
            total_income=totals.income,
            total_expenses=totals.expenses,
            profit_or_loss=totals.difference,
        )

        try:
            if self.is_new:
                sheet_id = await self._repository.create(payload)
                status = messages.SAVED_NEW
            else:
                sheet_id = await self._repository.update(self.sheet_id, payload)
                status = messages.SAVED_EXISTING
        except UnauthenticatedError as e:
            logger.error("sheet_save_unauthenticated", sheet_type=self.sheet_type.value, error=str(e))
            return SaveResult(
                success=False,
                sheet_id=self.sheet_id,
                outcome=outcome,
                message=messages.NOT_AUTHENTICATED,
                outcome_message=outcome_text,
                advisories=advisories,
            )
        except StorageError as e:
            logger.error(
                "sheet_save_failed",
                sheet_type=self.sheet_type.value,
                sheet_id=self.sheet_id,
                error=str(e),
            )
            return SaveResult(
                success=False,
                sheet_id=self.sheet_id,
                outcome=outcome,
                message=messages.SAVE_FAILED,
                outcome_message=outcome_text,
                advisories=advisories,
            )
        except ValidationError as e:
            invalid = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
            logger.warning("sheet_save_invalid", sheet_type=self.sheet_type.value, fields=invalid)
            return SaveResult(
                success=False,
                sheet_id=self.sheet_id,
                outcome=outcome,
                message=messages.invalid_values(invalid),
                outcome_message=outcome_text,
                advisories=advisories,
            )

        self.sheet_id = sheet_id
        self.notice = None
        return SaveResult(
            success=True,
            sheet_id=sheet_id,
            outcome=outcome,
            message=status,
            outcome_message=outcome_text,
            advisories=advisories,
        )


class StockTrackingMixin:
    """Stock bookkeeping for sessions that hold products."""

    def _evaluate_product(self, draft: LineDraft) -> Optional[StockAdvisory]:
        values = draft.fields
        draft.current_stock = current_stock(values["initial_stock"], values["quantity_sold"])
        advisory = evaluate_stock(
            values["initial_stock"],
            values["quantity_sold"],
            values["low_stock_threshold"],
            product_name=values.get("name", ""),
            product_id=draft.id,
        )
        if advisory is not None:
            logger.info(
                "stock_advisory",
                kind=advisory.kind,
                product_id=draft.id,
                product_name=advisory.product_name,
            )
        return advisory

    def _on_item_changed(self, draft: LineDraft, field: str) -> Optional[StockAdvisory]:
        if draft.kind == LineItemKind.PRODUCT and field in STOCK_FIELDS:
            return self._evaluate_product(draft)
        return None
