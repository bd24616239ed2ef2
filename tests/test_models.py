"""
Tests for Sheetbook models

Test strategy:
1. Unit tests for individual components (models, calculations)
2. Repository and session tests against in-memory stores
3. No real network calls in tests (remote backend uses a fake worksheet)
"""

import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from sheetbook.models import (
    ArtisanSheet,
    Expense,
    LineDraft,
    LineItemKind,
    Outcome,
    OutcomeKind,
    Product,
    SalarySheet,
    SheetType,
    TraderSheet,
    sheet_from_json,
    sheet_to_json,
)


class TestSheetModels:
    """Tests for persisted sheet models."""

    def test_trader_sheet_creation(self):
        sheet = TraderSheet(
            id="t1",
            title="March",
            products=[Product(name="Rice", cost_price=Decimal("10"))],
        )
        assert sheet.type == "trader"
        assert sheet.sheet_type == SheetType.TRADER
        assert sheet.products[0].cost_price == Decimal("10")
        assert sheet.general_expenses == []

    def test_line_items_get_ids(self):
        first, second = Expense(name="Rent"), Expense(name="Rent")
        assert first.id and second.id
        assert first.id != second.id

    def test_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            Expense(name="Rent", amount=Decimal("-100"))

    def test_current_stock_may_be_negative(self):
        product = Product(initial_stock=Decimal("10"), quantity_sold=Decimal("12"),
                          current_stock=Decimal("-2"))
        assert product.current_stock == Decimal("-2")

    def test_rejects_empty_id(self):
        with pytest.raises(ValidationError):
            SalarySheet(id="")

    def test_serializes_with_camel_case_keys(self):
        sheet = SalarySheet(id="s1", daily_lunch_cost=Decimal("5"))
        data = json.loads(sheet_to_json(sheet))
        assert data["type"] == "salary"
        assert "createdAt" in data
        assert "dailyLunchCost" in data
        assert "profitOrLoss" in data

    def test_accepts_camel_case_input(self):
        sheet = TraderSheet.model_validate({
            "id": "t1",
            "generalExpenses": [{"id": "light", "name": "Light Bills", "amount": "5"}],
        })
        assert sheet.general_expenses[0].amount == Decimal("5")

    def test_parses_the_right_variant(self):
        raw = sheet_to_json(ArtisanSheet(id="a1", title="Job"))
        sheet = sheet_from_json(raw)
        assert isinstance(sheet, ArtisanSheet)
        assert sheet.title == "Job"

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            sheet_from_json('{"id": "x", "type": "farmer"}')


class TestFormModels:
    """Tests for form session models."""

    def test_blank_product_draft(self):
        draft = LineDraft.blank(LineItemKind.PRODUCT, low_stock_threshold="5")
        assert draft.fields["low_stock_threshold"] == "5"
        assert draft.fields["name"] == ""
        assert draft.current_stock == 0

    def test_blank_expense_draft_keeps_given_id(self):
        draft = LineDraft.blank(LineItemKind.EXPENSE, "rent", name="Rent")
        assert draft.id == "rent"
        assert draft.fields == {"name": "Rent", "amount": ""}
        assert draft.current_stock is None

    def test_outcome_amount_is_a_magnitude(self):
        with pytest.raises(ValidationError):
            Outcome(kind=OutcomeKind.LOSS, amount=Decimal("-1"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
