"""
Form Session Models

State held by a form session while the user is editing a sheet.

DESIGN DECISION: Everything the user types is kept as raw text.
"1,2" or "abc" stay on screen exactly as typed; only the calculation
engine sees the coerced numbers.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from sheetbook.models.calculation import Outcome, SheetTotals, StockAdvisory
from sheetbook.models.sheet import SheetType, new_item_id


class LineItemKind(str, Enum):
    """Kinds of line item a sheet can hold."""
    PRODUCT = "product"
    EXPENSE = "expense"
    WORK_ENTRY = "work_entry"


# Editable text fields per line item kind, in display order
LINE_ITEM_FIELDS: dict[LineItemKind, tuple[str, ...]] = {
    LineItemKind.PRODUCT: (
        "name",
        "cost_price",
        "selling_price",
        "initial_stock",
        "quantity_sold",
        "low_stock_threshold",
    ),
    LineItemKind.EXPENSE: ("name", "amount"),
    LineItemKind.WORK_ENTRY: ("description", "amount"),
}


class LineDraft(BaseModel):
    """
    An editable line item.

    `fields` maps each field name in LINE_ITEM_FIELDS to its raw text.
    `current_stock` is only tracked for products.
    """

    id: str = Field(default_factory=new_item_id)
    kind: LineItemKind
    fields: dict[str, str] = Field(default_factory=dict)
    current_stock: Optional[Decimal] = None

    @classmethod
    def blank(cls, kind: LineItemKind, item_id: Optional[str] = None, **values: str) -> "LineDraft":
        """Create a draft with every field empty unless given in `values`."""
        fields = {name: values.get(name, "") for name in LINE_ITEM_FIELDS[kind]}
        return cls(
            id=item_id or new_item_id(),
            kind=kind,
            fields=fields,
            current_stock=Decimal("0") if kind == LineItemKind.PRODUCT else None,
        )


class SheetView(BaseModel):
    """Read-only snapshot of a session for the presentation layer."""
    model_config = ConfigDict(frozen=True)

    sheet_id: Optional[str]
    sheet_type: SheetType
    title: str
    is_new: bool
    currency_symbol: str
    fields: dict[str, str]
    collections: dict[str, list[LineDraft]]
    totals: SheetTotals
    outcome: Outcome
    notice: Optional[str] = Field(
        default=None,
        description="Non-fatal message to show, e.g. when a sheet was not found"
    )


class SaveResult(BaseModel):
    """Outcome of a save attempt."""
    model_config = ConfigDict(frozen=True)

    success: bool
    sheet_id: Optional[str] = None
    outcome: Optional[Outcome] = None
    message: str
    outcome_message: Optional[str] = None
    advisories: list[StockAdvisory] = Field(default_factory=list)
