"""
Persisted Sheet Models

A sheet is one ledger of a given type. The three types share a common
header (identity, title, timestamps and a cached snapshot of the totals)
and differ only in their payload:

- trader: products and general expenses
- salary: salary, daily costs, work days and other expenses
- artisan: expenses and workmanship entries

DESIGN DECISION: The sheet is a tagged union on `type`. Parsing a stored
record yields the right variant, and a patch can only touch fields that
exist on that variant.

Records are serialized with camelCase keys (`createdAt`, `profitOrLoss`,
`generalExpenses`...), matching records written by earlier clients.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class SheetType(str, Enum):
    """The three kinds of ledger a user can keep."""
    TRADER = "trader"
    SALARY = "salary"
    ARTISAN = "artisan"


# Monetary amounts and quantities are never negative once persisted
Amount = Annotated[Decimal, Field(ge=0)]

ZERO = Decimal("0")


def utc_now() -> datetime:
    """Current time, timezone aware."""
    return datetime.now(timezone.utc)


def new_item_id() -> str:
    """Identifier for a sheet or a line item."""
    return uuid4().hex


class SheetModel(BaseModel):
    """Base config shared by every persisted model."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# LINE ITEMS
# =============================================================================

class Expense(SheetModel):
    """A named expense line (general, other or fixed-category)."""

    id: str = Field(default_factory=new_item_id, min_length=1)
    name: str = ""
    amount: Amount = ZERO


class WorkEntry(SheetModel):
    """A workmanship income line on an artisan sheet."""

    id: str = Field(default_factory=new_item_id, min_length=1)
    description: str = ""
    amount: Amount = ZERO


class Product(SheetModel):
    """
    A product line on a trader sheet.

    `current_stock` is derived (initial stock minus quantity sold) and is
    the one quantity allowed to go negative; the form session raises a
    stock error advisory whenever it does.
    """

    id: str = Field(default_factory=new_item_id, min_length=1)
    name: str = ""
    cost_price: Amount = ZERO
    selling_price: Amount = ZERO
    initial_stock: Amount = ZERO
    quantity_sold: Amount = ZERO
    low_stock_threshold: Amount = ZERO
    current_stock: Decimal = ZERO


# =============================================================================
# SHEETS
# =============================================================================

class SheetBase(SheetModel):
    """
    Fields common to every sheet.

    The totals are a snapshot taken at save time. They are not
    recomputed when a sheet is read back.
    """

    id: str = Field(..., min_length=1)
    title: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    total_income: Amount = ZERO
    total_expenses: Amount = ZERO
    profit_or_loss: Decimal = Field(
        default=ZERO,
        description="Profit/loss, or remaining balance for salary sheets"
    )

    @property
    def sheet_type(self) -> SheetType:
        return SheetType(self.type)


class TraderSheet(SheetBase):
    type: Literal["trader"] = "trader"
    products: list[Product] = Field(default_factory=list)
    general_expenses: list[Expense] = Field(default_factory=list)


class SalarySheet(SheetBase):
    type: Literal["salary"] = "salary"
    salary: Amount = ZERO
    daily_transport_cost: Amount = ZERO
    daily_lunch_cost: Amount = ZERO
    work_days_monthly: Amount = ZERO
    other_expenses: list[Expense] = Field(default_factory=list)


class ArtisanSheet(SheetBase):
    type: Literal["artisan"] = "artisan"
    expenses: list[Expense] = Field(default_factory=list)
    work_entries: list[WorkEntry] = Field(default_factory=list)


Sheet = Annotated[
    Union[TraderSheet, SalarySheet, ArtisanSheet],
    Field(discriminator="type"),
]

SHEET_MODELS: dict[SheetType, type[SheetBase]] = {
    SheetType.TRADER: TraderSheet,
    SheetType.SALARY: SalarySheet,
    SheetType.ARTISAN: ArtisanSheet,
}

# Fields a caller can never overwrite through a patch
PROTECTED_FIELDS = frozenset({"id", "type", "created_at"})

_sheet_adapter: TypeAdapter[Sheet] = TypeAdapter(Sheet)


def sheet_from_json(raw: str) -> SheetBase:
    """
    Parse a stored record into the matching sheet variant.

    Raises:
        pydantic.ValidationError: If the record is not a valid sheet
    """
    return _sheet_adapter.validate_json(raw)


def sheet_to_json(sheet: SheetBase) -> str:
    """Serialize a sheet for storage (camelCase keys, ISO timestamps)."""
    return sheet.model_dump_json(by_alias=True)
