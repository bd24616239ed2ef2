"""
User-Facing Messages

Turns outcomes, stock advisories and failures into the text shown to
the user. Kept apart from the sessions so the wording can change
without touching any calculation.
"""

from decimal import Decimal

from sheetbook.models.calculation import (
    LowStockWarning,
    Outcome,
    OutcomeKind,
    StockAdvisory,
    StockError,
)
from sheetbook.models.sheet import SheetType


SHEET_NOT_FOUND = "Sheet not found."
SAVED_NEW = "New sheet saved!"
SAVED_EXISTING = "Sheet updated!"
SAVE_FAILED = "Failed to save sheet. Your changes are still here, please try again."
NOT_AUTHENTICATED = "You must be logged in to save data."

STOCK_ERROR_TITLE = "Stock Error"
LOW_STOCK_TITLE = "Low Stock Alert! 🚨"


def money(amount: Decimal, symbol: str) -> str:
    return f"{symbol}{amount:.2f}"


def quantity(value: Decimal) -> str:
    """'10' rather than '10.00' or '1E+1'."""
    text = format(value.normalize(), "f")
    return "0" if text in ("-0", "") else text


def outcome_message(outcome: Outcome, sheet_type: SheetType, symbol: str) -> str:
    """Profit / loss / break-even message; salary sheets talk about a balance."""
    amount = money(outcome.amount, symbol)
    if sheet_type == SheetType.SALARY:
        if outcome.kind == OutcomeKind.PROFIT:
            return f"Congratulations, you have {amount} remaining after expenses! 🎉"
        if outcome.kind == OutcomeKind.LOSS:
            return (
                f"Your expenses exceed your salary by {amount}. "
                "Consider reviewing your spending. 📉"
            )
        return "You broke even! No extra cash, no deficit. 📊"

    if outcome.kind == OutcomeKind.PROFIT:
        return f"Congratulations, you made {amount} profit! 🎉"
    if outcome.kind == OutcomeKind.LOSS:
        return f"Sorry, you made a loss of {amount}. Next time can be better. 📉"
    return "You broke even! No profit, no loss. 📊"


def stock_message(advisory: StockAdvisory) -> str:
    name = advisory.product_name or "Product"
    if isinstance(advisory, StockError):
        return (
            f"You are trying to sell more '{name}' than available.\n"
            f"Current stock: {quantity(advisory.initial_stock)}. "
            f"Quantity sold: {quantity(advisory.quantity_sold)}."
        )
    if isinstance(advisory, LowStockWarning):
        return (
            f"'{name}' is now at {quantity(advisory.remaining_stock)} units. "
            "Consider reordering soon."
        )
    raise TypeError(f"Unknown advisory: {advisory!r}")


def stock_title(advisory: StockAdvisory) -> str:
    return STOCK_ERROR_TITLE if isinstance(advisory, StockError) else LOW_STOCK_TITLE


def invalid_values(fields: list[str]) -> str:
    listed = ", ".join(fields) if fields else "some fields"
    return f"Please check these values (they cannot be negative): {listed}."
