"""
Form sessions for the three sheet types.

Each class is mostly configuration: which inputs the sheet has, which
lines a new sheet starts with and how the lines add up.
"""

from typing import Any

from sheetbook.calculations import (
    calculate_artisan_totals,
    calculate_salary_totals,
    calculate_trader_totals,
    coerce_number,
    current_stock,
    evaluate_stock,
)
from sheetbook.forms.session import SheetFormSession, StockTrackingMixin
from sheetbook.models.calculation import (
    ArtisanTotals,
    SalaryTotals,
    StockAdvisory,
    StockError,
    TraderTotals,
)
from sheetbook.models.form import LineDraft, LineItemKind
from sheetbook.models.sheet import SheetType


def _expense_lines(drafts: list[LineDraft]) -> list[dict[str, Any]]:
    return [
        {
            "id": d.id,
            "name": d.fields["name"],
            "amount": coerce_number(d.fields["amount"]),
        }
        for d in drafts
    ]


class TraderFormSession(StockTrackingMixin, SheetFormSession):
    """Products bought and sold, plus general running expenses."""

    sheet_type = SheetType.TRADER
    collections = {
        "products": LineItemKind.PRODUCT,
        "general_expenses": LineItemKind.EXPENSE,
    }
    default_items = {
        "products": ({},),
        "general_expenses": (
            {"id": "light", "name": "Light Bills"},
            {"id": "repairs", "name": "Repairs"},
            {"id": "utility", "name": "Utility Bills"},
            {"id": "wages", "name": "Staff Wages"},
        ),
    }

    def _calculate(self) -> TraderTotals:
        return calculate_trader_totals(
            [d.fields for d in self.items["products"]],
            [d.fields for d in self.items["general_expenses"]],
        )

    def _snapshot(self) -> dict[str, Any]:
        products = []
        for d in self.items["products"]:
            values = d.fields
            products.append({
                "id": d.id,
                "name": values["name"],
                "cost_price": coerce_number(values["cost_price"]),
                "selling_price": coerce_number(values["selling_price"]),
                "initial_stock": coerce_number(values["initial_stock"]),
                "quantity_sold": coerce_number(values["quantity_sold"]),
                "low_stock_threshold": coerce_number(values["low_stock_threshold"]),
                "current_stock": current_stock(values["initial_stock"], values["quantity_sold"]),
            })
        return {
            "products": products,
            "general_expenses": _expense_lines(self.items["general_expenses"]),
        }

    def _save_advisories(self) -> list[StockAdvisory]:
        """Oversold products are flagged again on every save."""
        advisories: list[StockAdvisory] = []
        for d in self.items["products"]:
            advisory = evaluate_stock(
                d.fields["initial_stock"],
                d.fields["quantity_sold"],
                d.fields["low_stock_threshold"],
                product_name=d.fields["name"],
                product_id=d.id,
            )
            if isinstance(advisory, StockError):
                advisories.append(advisory)
        return advisories


class SalaryFormSession(SheetFormSession):
    """A monthly salary against daily commuting/lunch costs and other bills."""

    sheet_type = SheetType.SALARY
    scalar_fields = (
        "salary",
        "daily_transport_cost",
        "daily_lunch_cost",
        "work_days_monthly",
    )
    collections = {"other_expenses": LineItemKind.EXPENSE}
    removable_collections = frozenset({"other_expenses"})
    default_items = {
        "other_expenses": (
            {"id": "rent", "name": "Rent"},
            {"id": "subscriptions", "name": "Subscriptions"},
        ),
    }

    def _calculate(self) -> SalaryTotals:
        return calculate_salary_totals(
            self.fields["salary"],
            self.fields["daily_transport_cost"],
            self.fields["daily_lunch_cost"],
            self.fields["work_days_monthly"],
            [d.fields for d in self.items["other_expenses"]],
        )

    def _snapshot(self) -> dict[str, Any]:
        snapshot: dict[str, Any] = {
            name: coerce_number(self.fields[name]) for name in self.scalar_fields
        }
        snapshot["other_expenses"] = _expense_lines(self.items["other_expenses"])
        return snapshot


class ArtisanFormSession(SheetFormSession):
    """Workmanship income against job expenses."""

    sheet_type = SheetType.ARTISAN
    collections = {
        "expenses": LineItemKind.EXPENSE,
        "work_entries": LineItemKind.WORK_ENTRY,
    }
    default_items = {
        "expenses": (
            {"id": "logistics", "name": "Logistics"},
            {"id": "phone", "name": "Phone Calls"},
            {"id": "feeding", "name": "Feeding"},
        ),
        "work_entries": ({},),
    }

    def _calculate(self) -> ArtisanTotals:
        return calculate_artisan_totals(
            [d.fields for d in self.items["expenses"]],
            [d.fields for d in self.items["work_entries"]],
        )

    def _snapshot(self) -> dict[str, Any]:
        return {
            "expenses": _expense_lines(self.items["expenses"]),
            "work_entries": [
                {
                    "id": d.id,
                    "description": d.fields["description"],
                    "amount": coerce_number(d.fields["amount"]),
                }
                for d in self.items["work_entries"]
            ],
        }


SESSION_TYPES: dict[SheetType, type[SheetFormSession]] = {
    SheetType.TRADER: TraderFormSession,
    SheetType.SALARY: SalaryFormSession,
    SheetType.ARTISAN: ArtisanFormSession,
}
