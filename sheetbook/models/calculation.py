"""
Calculation Result Models

Results produced by the calculation engine: per-type totals, the
profit/loss classification and stock advisories.

None of these are persisted as-is. Only the numeric totals are copied
onto the sheet when it is saved.
"""

from decimal import Decimal
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class OutcomeKind(str, Enum):
    """Three-way classification of a difference."""
    PROFIT = "profit"
    LOSS = "loss"
    BREAK_EVEN = "break_even"


class Outcome(BaseModel):
    """
    Classified difference.

    `amount` is always the magnitude; the sign lives in `kind`.
    """
    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    amount: Decimal = Field(default=Decimal("0"), ge=0)


# =============================================================================
# TOTALS
# =============================================================================

class TraderTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_expenses: Decimal
    total_sales: Decimal
    profit_or_loss: Decimal

    @property
    def income(self) -> Decimal:
        return self.total_sales

    @property
    def expenses(self) -> Decimal:
        return self.total_expenses

    @property
    def difference(self) -> Decimal:
        return self.profit_or_loss


class SalaryTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    salary: Decimal
    daily_expense_total: Decimal
    total_expenses: Decimal
    remaining_balance: Decimal

    @property
    def income(self) -> Decimal:
        return self.salary

    @property
    def expenses(self) -> Decimal:
        return self.total_expenses

    @property
    def difference(self) -> Decimal:
        return self.remaining_balance


class ArtisanTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_expenses: Decimal
    total_workmanship: Decimal
    profit_or_loss: Decimal

    @property
    def income(self) -> Decimal:
        return self.total_workmanship

    @property
    def expenses(self) -> Decimal:
        return self.total_expenses

    @property
    def difference(self) -> Decimal:
        return self.profit_or_loss


SheetTotals = Union[TraderTotals, SalaryTotals, ArtisanTotals]


# =============================================================================
# STOCK ADVISORIES
# =============================================================================

class StockError(BaseModel):
    """More units were sold than were in stock."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["stock_error"] = "stock_error"
    product_id: str = ""
    product_name: str = ""
    initial_stock: Decimal
    quantity_sold: Decimal

    @property
    def remaining_stock(self) -> Decimal:
        return self.initial_stock - self.quantity_sold


class LowStockWarning(BaseModel):
    """Remaining stock is at or under the product's threshold."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["low_stock"] = "low_stock"
    product_id: str = ""
    product_name: str = ""
    remaining_stock: Decimal


StockAdvisory = Union[StockError, LowStockWarning]
