"""Tests for form sessions and application wiring."""

from decimal import Decimal

import pytest

from conftest import FlakyStore, run_async
from sheetbook.forms import (
    ArtisanFormSession,
    FormError,
    SalaryFormSession,
    TraderFormSession,
    messages,
)
from sheetbook.models import (
    LowStockWarning,
    OutcomeKind,
    SheetType,
    StockError,
)
from sheetbook.orchestrator import AppComponents, create_app_components
from sheetbook.services import CurrencyPreference
from sheetbook.services.storage import SheetRepository, UnauthenticatedError


def _session(session_class, store, settings, currency=None):
    repo = SheetRepository(store, session_class.sheet_type)
    return session_class(repo, currency=currency, settings=settings)


@pytest.fixture
def trader(store, app_settings):
    session = _session(TraderFormSession, store, app_settings)
    run_async(session.initialize())
    return session


@pytest.fixture
def salary(store, app_settings):
    session = _session(SalaryFormSession, store, app_settings)
    run_async(session.initialize())
    return session


@pytest.fixture
def artisan(store, app_settings):
    session = _session(ArtisanFormSession, store, app_settings)
    run_async(session.initialize())
    return session


def _product_id(session):
    return session.items["products"][0].id


class TestNewSheetDefaults:
    """Tests for initialize() without an id."""

    def test_trader_defaults(self, trader):
        view = trader.view()
        assert view.is_new is True
        assert view.title.startswith("New Trader Sheet - ")
        assert view.currency_symbol == "₦"
        assert len(view.collections["products"]) == 1
        assert view.collections["products"][0].fields["low_stock_threshold"] == "5"
        assert [e.id for e in view.collections["general_expenses"]] == [
            "light", "repairs", "utility", "wages",
        ]
        assert view.outcome.kind == OutcomeKind.BREAK_EVEN

    def test_salary_defaults(self, salary):
        view = salary.view()
        assert view.fields == {
            "salary": "",
            "daily_transport_cost": "",
            "daily_lunch_cost": "",
            "work_days_monthly": "",
        }
        assert [e.fields["name"] for e in view.collections["other_expenses"]] == [
            "Rent", "Subscriptions",
        ]

    def test_artisan_defaults(self, artisan):
        view = artisan.view()
        assert [e.id for e in view.collections["expenses"]] == ["logistics", "phone", "feeding"]
        assert len(view.collections["work_entries"]) == 1

    def test_repository_type_must_match(self, store, app_settings):
        with pytest.raises(ValueError):
            TraderFormSession(SheetRepository(store, SheetType.SALARY), settings=app_settings)


class TestEditing:
    """Tests for update_field / add_line_item / remove_line_item."""

    def test_raw_text_is_kept(self, trader):
        pid = _product_id(trader)
        trader.update_field(f"products.{pid}.cost_price", "1,0x")
        assert trader.items["products"][0].fields["cost_price"] == "1,0x"

    def test_totals_follow_edits(self, trader):
        pid = _product_id(trader)
        trader.update_field(f"products.{pid}.cost_price", "10")
        trader.update_field(f"products.{pid}.selling_price", "15")
        trader.update_field(f"products.{pid}.initial_stock", "10")
        trader.update_field(f"products.{pid}.quantity_sold", "2")
        trader.update_field("general_expenses.light.amount", "5")

        assert trader.totals.total_expenses == Decimal("25")
        assert trader.totals.total_sales == Decimal("30")
        assert trader.view().outcome.amount == Decimal("5")

    def test_stock_advisories(self, trader):
        pid = _product_id(trader)
        assert trader.update_field(f"products.{pid}.initial_stock", "10") is None

        advisory = trader.update_field(f"products.{pid}.quantity_sold", "12")
        assert isinstance(advisory, StockError)
        assert trader.items["products"][0].current_stock == Decimal("-2")
        # The edit still went through
        assert trader.items["products"][0].fields["quantity_sold"] == "12"

        advisory = trader.update_field(f"products.{pid}.quantity_sold", "9")
        assert isinstance(advisory, LowStockWarning)
        assert advisory.remaining_stock == Decimal("1")

        assert trader.update_field(f"products.{pid}.quantity_sold", "2") is None
        assert trader.items["products"][0].current_stock == Decimal("8")

    def test_non_stock_field_has_no_advisory(self, trader):
        pid = _product_id(trader)
        trader.update_field(f"products.{pid}.initial_stock", "10")
        trader.update_field(f"products.{pid}.quantity_sold", "12")
        assert trader.update_field(f"products.{pid}.name", "Rice") is None

    def test_huge_exponent_reads_as_zero(self, trader):
        pid = _product_id(trader)
        trader.update_field(f"products.{pid}.cost_price", "9e999999")
        trader.update_field(f"products.{pid}.quantity_sold", "9e999999")
        trader.update_field("general_expenses.light.amount", "1e1000000")
        assert trader.totals.total_expenses == 0
        assert trader.view().outcome.kind == OutcomeKind.BREAK_EVEN

        result = run_async(trader.save())
        assert result.success is True

    def test_title_and_scalars(self, salary):
        salary.update_field("title", "June")
        salary.update_field("salary", "1,000")
        assert salary.title == "June"
        assert salary.totals.salary == Decimal("1000")

    @pytest.mark.parametrize("path", [
        "nope",
        "products.missing.name",
        "general_expenses.light.price",
        "general_expenses.light",
        "unknown.light.amount",
    ])
    def test_bad_paths(self, trader, path):
        with pytest.raises(FormError):
            trader.update_field(path, "1")

    def test_add_line_items(self, trader):
        new_id = trader.add_line_item("product")
        assert trader.items["products"][-1].id == new_id
        assert trader.items["products"][-1].fields["low_stock_threshold"] == "5"

        expense_id = trader.add_line_item("expense")
        assert trader.items["general_expenses"][-1].id == expense_id

        with pytest.raises(FormError):
            trader.add_line_item("work_entry")

    def test_salary_can_remove_other_expenses(self, salary):
        salary.update_field("other_expenses.rent.amount", "300")
        salary.remove_line_item("rent")
        assert [e.id for e in salary.items["other_expenses"]] == ["subscriptions"]
        assert salary.totals.total_expenses == 0
        # Unknown ids are ignored
        salary.remove_line_item("rent")

    def test_trader_and_artisan_cannot_remove(self, trader, artisan):
        with pytest.raises(FormError):
            trader.remove_line_item("light")
        with pytest.raises(FormError):
            artisan.remove_line_item("logistics")


class TestSave:
    """Tests for save()."""

    def test_first_save_creates_then_updates(self, trader, store):
        pid = _product_id(trader)
        trader.update_field(f"products.{pid}.name", "Rice")
        trader.update_field(f"products.{pid}.cost_price", "10")
        trader.update_field(f"products.{pid}.selling_price", "15")
        trader.update_field(f"products.{pid}.initial_stock", "10")
        trader.update_field(f"products.{pid}.quantity_sold", "2")
        trader.update_field("general_expenses.light.amount", "5")

        result = run_async(trader.save())
        assert result.success is True
        assert result.message == messages.SAVED_NEW
        assert result.outcome.kind == OutcomeKind.PROFIT
        assert result.outcome.amount == Decimal("5")
        assert "₦5.00 profit" in result.outcome_message
        assert trader.is_new is False

        repo = SheetRepository(store, SheetType.TRADER)
        sheet = run_async(repo.get_by_id(result.sheet_id))
        assert sheet.total_income == Decimal("30")
        assert sheet.total_expenses == Decimal("25")
        assert sheet.profit_or_loss == Decimal("5")
        assert sheet.products[0].current_stock == Decimal("8")
        assert sheet.general_expenses[0].amount == Decimal("5")

        trader.update_field("title", "Renamed")
        second = run_async(trader.save())
        assert second.message == messages.SAVED_EXISTING
        assert second.sheet_id == result.sheet_id
        assert run_async(repo.list_ids()) == [result.sheet_id]

    def test_oversold_products_are_flagged_on_save(self, trader):
        pid = _product_id(trader)
        trader.update_field(f"products.{pid}.initial_stock", "1")
        trader.update_field(f"products.{pid}.quantity_sold", "3")
        trader.update_field(f"products.{pid}.name", "Rice")
        low_id = trader.add_line_item("product")
        trader.update_field(f"products.{low_id}.initial_stock", "10")
        trader.update_field(f"products.{low_id}.quantity_sold", "9")

        result = run_async(trader.save())
        assert result.success is True
        # Only the oversold product; low stock is not repeated on save
        assert len(result.advisories) == 1
        advisory = result.advisories[0]
        assert isinstance(advisory, StockError)
        assert advisory.product_id == pid
        assert advisory.product_name == "Rice"
        assert advisory.remaining_stock == Decimal("-2")

    def test_salary_save_uses_balance_wording(self, salary, store):
        salary.update_field("salary", "1000")
        salary.update_field("daily_transport_cost", "10")
        salary.update_field("daily_lunch_cost", "5")
        salary.update_field("work_days_monthly", "20")
        salary.update_field("other_expenses.rent.amount", "50")

        result = run_async(salary.save())
        assert result.success is True
        assert result.outcome.amount == Decimal("650")
        assert "remaining after expenses" in result.outcome_message

        sheet = run_async(SheetRepository(store, SheetType.SALARY).get_by_id(result.sheet_id))
        assert sheet.salary == Decimal("1000")
        assert sheet.profit_or_loss == Decimal("650")
        assert sheet.total_expenses == Decimal("350")

    def test_failed_save_keeps_state(self, app_settings):
        store = FlakyStore(fail_writes=True)
        session = _session(SalaryFormSession, store, app_settings)
        run_async(session.initialize())
        session.update_field("salary", "500")

        result = run_async(session.save())
        assert result.success is False
        assert result.message == messages.SAVE_FAILED
        assert session.is_new is True
        assert session.fields["salary"] == "500"

        store.fail_writes = False
        retried = run_async(session.save())
        assert retried.success is True

    def test_negative_values_are_reported(self, artisan):
        artisan.update_field("expenses.logistics.amount", "-5")
        result = run_async(artisan.save())
        assert result.success is False
        assert "cannot be negative" in result.message
        assert artisan.is_new is True


class TestReopen:
    """Tests for initialize() with an id."""

    def test_loads_saved_sheet(self, artisan, store, app_settings):
        entry_id = artisan.items["work_entries"][0].id
        artisan.update_field(f"work_entries.{entry_id}.description", "Wardrobe")
        artisan.update_field(f"work_entries.{entry_id}.amount", "400")
        artisan.update_field("expenses.logistics.amount", "150")
        sheet_id = run_async(artisan.save()).sheet_id

        reopened = _session(ArtisanFormSession, store, app_settings)
        view = run_async(reopened.initialize(sheet_id))
        assert view.is_new is False
        assert view.notice is None
        assert view.collections["work_entries"][0].fields == {
            "description": "Wardrobe", "amount": "400",
        }
        assert view.totals.profit_or_loss == Decimal("250")

    def test_reopened_products_keep_stock(self, trader, store, app_settings):
        pid = _product_id(trader)
        trader.update_field(f"products.{pid}.initial_stock", "10")
        trader.update_field(f"products.{pid}.quantity_sold", "4")
        sheet_id = run_async(trader.save()).sheet_id

        reopened = _session(TraderFormSession, store, app_settings)
        run_async(reopened.initialize(sheet_id))
        assert reopened.items["products"][0].current_stock == Decimal("6")
        assert reopened.items["products"][0].fields["initial_stock"] == "10"

    def test_missing_sheet_sets_notice(self, store, app_settings):
        session = _session(SalaryFormSession, store, app_settings)
        view = run_async(session.initialize("gone"))
        assert view.notice == messages.SHEET_NOT_FOUND
        assert view.collections["other_expenses"] == []
        assert view.is_new is False

        session.update_field("title", "Recreated")
        result = run_async(session.save())
        assert result.sheet_id == "gone"
        assert result.message == messages.SAVED_EXISTING

    def test_currency_preference(self, store, app_settings):
        run_async(store.set("userCurrency", "USD"))
        session = _session(
            ArtisanFormSession, store, app_settings,
            currency=CurrencyPreference(store, default_code="NGN"),
        )
        view = run_async(session.initialize())
        assert view.currency_symbol == "$"


class TestAppComponents:
    """Tests for the application factory."""

    def test_memory_backend(self):
        components = create_app_components(backend="memory")
        session = components.open_session("salary")
        assert isinstance(session, SalaryFormSession)
        run_async(session.initialize())
        assert run_async(session.save()).success is True
        assert len(run_async(components.repository(SheetType.SALARY).list_ids())) == 1

    def test_sessions_share_the_store(self, store, app_settings):
        components = AppComponents(store, app_settings)
        assert set(components.repositories) == set(SheetType)
        assert isinstance(components.open_session(SheetType.TRADER), TraderFormSession)

    def test_remote_backend_needs_a_user(self):
        with pytest.raises(UnauthenticatedError):
            create_app_components(backend="remote", user_id=None)
