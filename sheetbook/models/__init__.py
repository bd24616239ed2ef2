"""
Data Models Package

Pydantic models for persisted sheets, calculation results and
form session state.
"""

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
from sheetbook.models.form import (
    LINE_ITEM_FIELDS,
    LineDraft,
    LineItemKind,
    SaveResult,
    SheetView,
)
from sheetbook.models.sheet import (
    SHEET_MODELS,
    ArtisanSheet,
    Expense,
    Product,
    SalarySheet,
    Sheet,
    SheetBase,
    SheetType,
    TraderSheet,
    WorkEntry,
    new_item_id,
    sheet_from_json,
    sheet_to_json,
    utc_now,
)

__all__ = [
    # Sheet models
    "SHEET_MODELS",
    "ArtisanSheet",
    "Expense",
    "Product",
    "SalarySheet",
    "Sheet",
    "SheetBase",
    "SheetType",
    "TraderSheet",
    "WorkEntry",
    "new_item_id",
    "sheet_from_json",
    "sheet_to_json",
    "utc_now",
    # Calculation results
    "ArtisanTotals",
    "LowStockWarning",
    "Outcome",
    "OutcomeKind",
    "SalaryTotals",
    "SheetTotals",
    "StockAdvisory",
    "StockError",
    "TraderTotals",
    # Form session state
    "LINE_ITEM_FIELDS",
    "LineDraft",
    "LineItemKind",
    "SaveResult",
    "SheetView",
]
