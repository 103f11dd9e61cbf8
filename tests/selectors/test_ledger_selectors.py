"""
Tests for the read side: ExpenseSelector, CashSelector and HolidaySelector.

Data is written through the services in the same session, then read back
through the selectors.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.domain.spender import Cso
from ledger_kernel.exceptions import (
    CashSnapshotNotFoundError,
    ExpenseNotFoundError,
    InvalidDateError,
    ValidationError,
)

from conftest import MONDAY, TUESDAY


@pytest.fixture
def march_expenses(expense_service, make_draft, deterministic_clock):
    """Five expenses over three March dates and one in April."""
    created = []
    for day, amount in [
        ("2024-03-04", "100"),
        ("2024-03-04", "250.50"),
        ("2024-03-05", "75"),
        ("2024-03-29", "10.10"),
        ("2024-03-29", "0.90"),
        ("2024-04-01", "999"),
    ]:
        created.append(expense_service.create_expense(make_draft(date=day, amount=amount)))
        deterministic_clock.tick()
    return created


class TestExpenseSelector:

    def test_daily_expenses(self, expense_selector, march_expenses):
        day = expense_selector.daily_expenses(MONDAY)
        assert day.count == 2
        assert day.total_amount == Decimal("350.50")
        assert [e.amount for e in day.items] == [Decimal("100"), Decimal("250.50")]

    def test_daily_expenses_empty_day(self, expense_selector):
        day = expense_selector.daily_expenses("2024-03-06")
        assert day.items == ()
        assert day.total_amount == Decimal("0")

    def test_daily_expenses_rejects_malformed_key(self, expense_selector):
        with pytest.raises(InvalidDateError):
            expense_selector.daily_expenses("2024-3-6")

    def test_monthly_summary(self, expense_selector, march_expenses):
        summary = expense_selector.monthly_expense_summary(2024, 3)
        assert [(s.date, s.count, s.total_amount) for s in summary] == [
            ("2024-03-29", 2, Decimal("11.00")),
            ("2024-03-05", 1, Decimal("75")),
            ("2024-03-04", 2, Decimal("350.50")),
        ]

    def test_monthly_total_equals_sum_of_daily_totals(self, expense_selector, march_expenses):
        summary = expense_selector.monthly_expense_summary(2024, 3)
        daily = sum(
            (expense_selector.daily_expenses(s.date).total_amount for s in summary),
            Decimal("0"),
        )
        assert expense_selector.monthly_expense_total(2024, 3) == daily == Decimal("436.50")

    def test_empty_month(self, expense_selector, march_expenses):
        assert expense_selector.monthly_expense_summary(2024, 5) == []
        assert expense_selector.monthly_expense_total(2024, 5) == Decimal("0")

    def test_invalid_month(self, expense_selector):
        with pytest.raises(ValidationError):
            expense_selector.monthly_expense_summary(2024, 13)

    def test_ledger_summary(self, expense_selector, march_expenses):
        summary = expense_selector.expense_ledger_summary()
        assert [e.date for e in summary.entries] == [
            "2024-04-01",
            "2024-03-29",
            "2024-03-05",
            "2024-03-04",
        ]
        assert summary.total_amount == Decimal("1435.50")

    def test_list_expenses_newest_first(self, expense_selector, march_expenses):
        listed = expense_selector.list_expenses()
        assert listed[0].date == "2024-04-01"
        assert [e.amount for e in listed if e.date == MONDAY] == [
            Decimal("250.50"),
            Decimal("100"),
        ]

    def test_moved_expense_counts_on_new_date(
        self, expense_selector, expense_service, march_expenses
    ):
        expense_service.move_expense(march_expenses[0].id, TUESDAY)
        assert expense_selector.daily_expenses(MONDAY).total_amount == Decimal("250.50")
        assert expense_selector.daily_expenses(TUESDAY).total_amount == Decimal("175")
        assert expense_selector.monthly_expense_total(2024, 3) == Decimal("436.50")

    def test_spender_preserved(self, expense_selector, expense_service, make_draft):
        expense_service.create_expense(make_draft(spender=Cso("cso-7")))
        (listed,) = expense_selector.list_expenses()
        assert listed.spender == Cso("cso-7")

    def test_expense_moves_empty_then_recorded(
        self, expense_selector, expense_service, march_expenses
    ):
        target = march_expenses[2]
        assert expense_selector.expense_moves(target.id) == []
        expense_service.move_expense(target.id, "2024-03-06")
        (move,) = expense_selector.expense_moves(str(target.id))
        assert (move.previous_date, move.target_date, move.sequence) == (
            "2024-03-05",
            "2024-03-06",
            1,
        )

    def test_expense_moves_unknown(self, expense_selector):
        with pytest.raises(ExpenseNotFoundError):
            expense_selector.expense_moves(uuid4())


class TestCashSelector:

    @pytest.fixture
    def snapshots(self, cash_service):
        cash_service.set_cash_at_hand("2024-03-01", 500)
        cash_service.set_cash_at_hand("2024-03-15", 620)
        cash_service.set_cash_at_hand("2024-02-29", 480)
        cash_service.set_cash_at_hand("2024-03-01", 510)

    def test_cash_entries_newest_first(self, cash_selector, snapshots):
        assert [(s.date, s.amount) for s in cash_selector.cash_entries()] == [
            ("2024-03-15", Decimal("620")),
            ("2024-03-01", Decimal("510")),
            ("2024-02-29", Decimal("480")),
        ]

    def test_cash_at_hand_recorded(self, cash_selector, snapshots):
        assert cash_selector.cash_at_hand("2024-03-01").amount == Decimal("510")

    def test_cash_at_hand_unrecorded_is_zero(self, cash_selector, snapshots):
        info = cash_selector.cash_at_hand("2024-03-02")
        assert info.amount == Decimal("0")
        assert info.updated_at is None
        assert not info.is_recorded

    def test_get_cash_snapshot_strict(self, cash_selector, snapshots):
        assert cash_selector.get_cash_snapshot("2024-03-15").amount == Decimal("620")
        with pytest.raises(CashSnapshotNotFoundError):
            cash_selector.get_cash_snapshot("2024-03-02")

    def test_cash_history(self, cash_selector, snapshots):
        assert [s.date for s in cash_selector.cash_history(2024, 3)] == [
            "2024-03-15",
            "2024-03-01",
        ]
        assert [s.date for s in cash_selector.cash_history(2024, 2)] == ["2024-02-29"]


class TestHolidaySelector:

    @pytest.fixture
    def holidays(self, calendar_service):
        return {
            "christmas": calendar_service.create_holiday(
                "2019-12-25", reason="Christmas", is_recurring=True
            ),
            "new_year": calendar_service.create_holiday(
                "2020-01-01", reason="New Year", is_recurring=True
            ),
            "closure": calendar_service.create_holiday("2024-06-12", reason="Closure"),
            "old_closure": calendar_service.create_holiday("2023-06-12"),
            "boxing_day": calendar_service.create_holiday("2024-12-25", reason="Extra"),
        }

    def test_list_all_by_stored_date(self, holiday_selector, holidays):
        assert [h.holiday for h in holiday_selector.list_holidays()] == [
            "2019-12-25",
            "2020-01-01",
            "2023-06-12",
            "2024-06-12",
            "2024-12-25",
        ]

    def test_list_for_year_merges_recurring(self, holiday_selector, holidays):
        listed = holiday_selector.list_holidays(2024)
        assert [h.id for h in listed] == [
            holidays["new_year"].id,
            holidays["closure"].id,
            holidays["christmas"].id,
            holidays["boxing_day"].id,
        ]

    def test_recurring_appears_in_future_year(self, holiday_selector, holidays):
        listed = holiday_selector.list_holidays(2031)
        assert [h.reason for h in listed] == ["New Year", "Christmas"]

    def test_yearly_view(self, holiday_selector, holidays):
        view = holiday_selector.yearly_holidays(2023)
        assert [h.month_day for h in view.recurring] == ["01-01", "12-25"]
        assert [h.holiday for h in view.one_time] == ["2023-06-12"]
