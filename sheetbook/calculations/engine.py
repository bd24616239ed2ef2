"""
Calculation Engine

Pure functions that turn the fields of a sheet into totals, a
profit/loss classification and stock advisories.

DESIGN DECISION: Nothing in this module does I/O or keeps state.
The form session calls it on every keystroke, so every function
accepts raw text as readily as numbers:
- "1,234.50" → 1234.50 (thousands separators are stripped)
- "" / "abc" / None → 0
- "12abc" → 12 (leading number, like a lenient numeric input)

Line items can be plain mappings (form drafts) or objects with
attributes (persisted models); both are read the same way.
"""

import math
import re
from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from sheetbook.models.calculation import (
    ArtisanTotals,
    LowStockWarning,
    Outcome,
    OutcomeKind,
    SalaryTotals,
    SheetTotals,
    StockAdvisory,
    StockError,
    TraderTotals,
)
from sheetbook.models.sheet import ArtisanSheet, SalarySheet, SheetBase, TraderSheet


ZERO = Decimal("0")

_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

# Largest decimal exponent a double can hold; beyond it input reads as 0
MAX_EXPONENT = 308


def _in_range(number: Decimal) -> Decimal:
    if not number.is_finite() or abs(number.adjusted()) > MAX_EXPONENT:
        return ZERO
    return number


def coerce_number(value: Any) -> Decimal:
    """
    Coerce user input to a Decimal. Never raises.

    Empty, missing, unparsable, non-finite and out-of-range input
    (magnitude beyond 1e308 or below 1e-308) all become 0, so the
    totals built from the result can never overflow.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return _in_range(value)
    if isinstance(value, int):
        return _in_range(Decimal(value))
    if isinstance(value, float):
        return _in_range(Decimal(str(value))) if math.isfinite(value) else ZERO

    text = str(value).replace(",", "").strip()
    match = _LEADING_NUMBER.match(text)
    if not match:
        return ZERO
    try:
        number = Decimal(match.group(0))
    except InvalidOperation:
        return ZERO
    return _in_range(number)


def field_value(entry: Any, name: str) -> Any:
    """Read `name` from a mapping or an object, None if absent."""
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def _field(name: str) -> Callable[[Any], Any]:
    return lambda entry: field_value(entry, name)


def sum_amounts(
    entries: Iterable[Any],
    selector: Optional[Callable[[Any], Any]] = None,
) -> Decimal:
    """
    Sum the coerced value picked by `selector` from each entry.

    The default selector reads the `amount` field. An empty
    sequence sums to 0.
    """
    selector = selector or _field("amount")
    return sum((coerce_number(selector(entry)) for entry in entries), ZERO)


def _sum_products(
    products: Iterable[Any],
    left: str,
    right: str,
) -> Decimal:
    return sum(
        (
            coerce_number(field_value(p, left)) * coerce_number(field_value(p, right))
            for p in products
        ),
        ZERO,
    )


# =============================================================================
# PER-TYPE TOTALS
# =============================================================================

def calculate_trader_totals(
    products: Iterable[Any],
    general_expenses: Iterable[Any],
) -> TraderTotals:
    """
    Trader sheet totals.

    expenses = Σ(cost price × quantity sold) + Σ(general expenses)
    sales    = Σ(selling price × quantity sold)
    """
    products = list(products)
    total_expenses = (
        _sum_products(products, "cost_price", "quantity_sold")
        + sum_amounts(general_expenses)
    )
    total_sales = _sum_products(products, "selling_price", "quantity_sold")
    return TraderTotals(
        total_expenses=total_expenses,
        total_sales=total_sales,
        profit_or_loss=total_sales - total_expenses,
    )


def calculate_salary_totals(
    salary: Any,
    daily_transport_cost: Any,
    daily_lunch_cost: Any,
    work_days_monthly: Any,
    other_expenses: Iterable[Any],
) -> SalaryTotals:
    """
    Salary sheet totals.

    daily expenses = (transport + lunch) × work days
    remaining      = salary − (daily expenses + Σ(other expenses))
    """
    daily_expense_total = (
        coerce_number(daily_transport_cost) + coerce_number(daily_lunch_cost)
    ) * coerce_number(work_days_monthly)
    total_expenses = daily_expense_total + sum_amounts(other_expenses)
    salary_amount = coerce_number(salary)
    return SalaryTotals(
        salary=salary_amount,
        daily_expense_total=daily_expense_total,
        total_expenses=total_expenses,
        remaining_balance=salary_amount - total_expenses,
    )


def calculate_artisan_totals(
    expenses: Iterable[Any],
    work_entries: Iterable[Any],
) -> ArtisanTotals:
    """Artisan sheet totals: workmanship income minus expenses."""
    total_expenses = sum_amounts(expenses)
    total_workmanship = sum_amounts(work_entries)
    return ArtisanTotals(
        total_expenses=total_expenses,
        total_workmanship=total_workmanship,
        profit_or_loss=total_workmanship - total_expenses,
    )


def calculate_sheet_totals(sheet: SheetBase) -> SheetTotals:
    """Recompute the totals of a persisted sheet from its line items."""
    if isinstance(sheet, TraderSheet):
        return calculate_trader_totals(sheet.products, sheet.general_expenses)
    if isinstance(sheet, SalarySheet):
        return calculate_salary_totals(
            sheet.salary,
            sheet.daily_transport_cost,
            sheet.daily_lunch_cost,
            sheet.work_days_monthly,
            sheet.other_expenses,
        )
    if isinstance(sheet, ArtisanSheet):
        return calculate_artisan_totals(sheet.expenses, sheet.work_entries)
    raise TypeError(f"Unsupported sheet: {type(sheet).__name__}")


def classify_difference(difference: Any) -> Outcome:
    """Classify a difference as profit, loss or break-even (with magnitude)."""
    d = coerce_number(difference)
    if d > 0:
        return Outcome(kind=OutcomeKind.PROFIT, amount=d)
    if d < 0:
        return Outcome(kind=OutcomeKind.LOSS, amount=-d)
    return Outcome(kind=OutcomeKind.BREAK_EVEN, amount=ZERO)


# =============================================================================
# STOCK
# =============================================================================

# Changing any of these on a product triggers a stock evaluation
STOCK_FIELDS = frozenset({"initial_stock", "quantity_sold", "low_stock_threshold"})


def current_stock(initial_stock: Any, quantity_sold: Any) -> Decimal:
    """Remaining stock. Not clamped: overselling gives a negative value."""
    return coerce_number(initial_stock) - coerce_number(quantity_sold)


def evaluate_stock(
    initial_stock: Any,
    quantity_sold: Any,
    low_stock_threshold: Any,
    product_name: str = "",
    product_id: str = "",
) -> Optional[StockAdvisory]:
    """
    Check a product's stock level.

    Returns:
        StockError if more was sold than stocked,
        LowStockWarning if remaining stock is at or under the threshold
        (only once something was stocked and sold), None otherwise.

    This is advisory only; it never prevents the edit that triggered it.
    """
    initial = coerce_number(initial_stock)
    sold = coerce_number(quantity_sold)
    threshold = coerce_number(low_stock_threshold)
    remaining = initial - sold

    if remaining < 0:
        return StockError(
            product_id=product_id,
            product_name=product_name,
            initial_stock=initial,
            quantity_sold=sold,
        )
    if remaining <= threshold and initial > 0 and sold > 0:
        return LowStockWarning(
            product_id=product_id,
            product_name=product_name,
            remaining_stock=remaining,
        )
    return None
