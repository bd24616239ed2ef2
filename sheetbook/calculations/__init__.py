"""Calculation engine package."""

from sheetbook.calculations.engine import (
    STOCK_FIELDS,
    calculate_artisan_totals,
    calculate_salary_totals,
    calculate_sheet_totals,
    calculate_trader_totals,
    classify_difference,
    coerce_number,
    current_stock,
    evaluate_stock,
    field_value,
    sum_amounts,
)

__all__ = [
    "STOCK_FIELDS",
    "calculate_artisan_totals",
    "calculate_salary_totals",
    "calculate_sheet_totals",
    "calculate_trader_totals",
    "classify_difference",
    "coerce_number",
    "current_stock",
    "evaluate_stock",
    "field_value",
    "sum_amounts",
]
