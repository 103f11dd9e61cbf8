"""
Aggregation -- day, month and year views over ledger records.

Responsibility:
    Pure projections from stored records (as DTOs) to the views the back
    office reads: one day's expenses, per-date summaries for a month or the
    whole ledger, a month of cash snapshots, and a year's holidays.

Architecture position:
    Kernel > Domain -- pure functional core.  Selectors load rows and call
    these functions; nothing here owns data or touches a session.  There are
    no stored aggregates anywhere in the system.

Invariants enforced:
    - Sums use Decimal addition starting from Decimal("0"); an empty group
      totals exactly 0.
    - Date-grouped views are sorted newest first; holiday views oldest first.
    - Filtering by month/year compares canonical keys as strings.
"""

from collections.abc import Iterable
from decimal import Decimal

from ledger_kernel.domain.dates import month_bounds, year_bounds
from ledger_kernel.domain.dtos import (
    ZERO,
    CashSnapshotInfo,
    DailyExpenses,
    DailyExpenseSummary,
    ExpenseInfo,
    ExpenseLedgerSummary,
    HolidayInfo,
    YearlyHolidays,
)


def total(amounts: Iterable[Decimal]) -> Decimal:
    """Exact Decimal sum; ``Decimal("0")`` for no amounts."""
    return sum(amounts, ZERO)


def daily_expenses(date_key: str, expenses: Iterable[ExpenseInfo]) -> DailyExpenses:
    """Expenses attributed to ``date_key``, in submission order."""
    items = sorted(
        (e for e in expenses if e.date == date_key),
        key=lambda e: (e.submitted_at, str(e.id)),
    )
    return DailyExpenses(
        date=date_key,
        items=tuple(items),
        total_amount=total(e.amount for e in items),
    )


def summarize_by_date(expenses: Iterable[ExpenseInfo]) -> list[DailyExpenseSummary]:
    """One summary per date that has expenses, newest date first."""
    counts: dict[str, int] = {}
    sums: dict[str, Decimal] = {}
    for expense in expenses:
        counts[expense.date] = counts.get(expense.date, 0) + 1
        sums[expense.date] = sums.get(expense.date, ZERO) + expense.amount
    return [
        DailyExpenseSummary(date=key, count=counts[key], total_amount=sums[key])
        for key in sorted(counts, reverse=True)
    ]


def monthly_expense_summary(
    year: int, month: int, expenses: Iterable[ExpenseInfo]
) -> list[DailyExpenseSummary]:
    """Per-date summaries for one month, newest date first."""
    start, end = month_bounds(year, month)
    return summarize_by_date(e for e in expenses if start <= e.date <= end)


def expense_ledger_summary(expenses: Iterable[ExpenseInfo]) -> ExpenseLedgerSummary:
    """Per-date summaries for every date, with the grand total."""
    entries = summarize_by_date(expenses)
    return ExpenseLedgerSummary(
        entries=tuple(entries),
        total_amount=total(entry.total_amount for entry in entries),
    )


def cash_history(
    year: int, month: int, snapshots: Iterable[CashSnapshotInfo]
) -> list[CashSnapshotInfo]:
    """Snapshots recorded in one month, newest date first."""
    start, end = month_bounds(year, month)
    return sorted(
        (s for s in snapshots if start <= s.date <= end),
        key=lambda s: s.date,
        reverse=True,
    )


def yearly_holidays(year: int, holidays: Iterable[HolidayInfo]) -> YearlyHolidays:
    """
    Holidays that apply to ``year``.

    Recurring holidays are included whatever year they were stored under
    and are ordered by month/day; one-time holidays only when their exact
    date falls in ``year``, ordered by date.
    """
    start, end = year_bounds(year)
    recurring: list[HolidayInfo] = []
    one_time: list[HolidayInfo] = []
    for holiday in holidays:
        if holiday.is_recurring:
            recurring.append(holiday)
        elif start <= holiday.holiday <= end:
            one_time.append(holiday)
    recurring.sort(key=lambda h: (h.month_day, h.holiday, str(h.id)))
    one_time.sort(key=lambda h: (h.holiday, str(h.id)))
    return YearlyHolidays(year=year, recurring=tuple(recurring), one_time=tuple(one_time))
