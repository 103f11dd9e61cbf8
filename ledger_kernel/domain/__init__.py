"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database sessions
- The system clock (time is injected)
- I/O

All domain objects are immutable and deterministic.
"""

from ledger_kernel.domain.calendar import DEFAULT_WEEKEND_DAYS, BusinessCalendar
from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.dates import (
    DEFAULT_BUSINESS_TIMEZONE,
    DateCanonicalizer,
    is_date_key,
    month_bounds,
    year_bounds,
)
from ledger_kernel.domain.dtos import (
    CashSnapshotInfo,
    DailyExpenses,
    DailyExpenseSummary,
    ExpenseDraft,
    ExpenseInfo,
    ExpenseLedgerSummary,
    ExpenseMoveInfo,
    ExpenseStatus,
    HolidayInfo,
    YearlyHolidays,
)
from ledger_kernel.domain.spender import (
    Admin,
    Cso,
    Spender,
    SpenderDirectory,
    SpenderType,
    SuperAdmin,
    spender_from_parts,
    spender_to_parts,
)

__all__ = [
    "BusinessCalendar",
    "DEFAULT_WEEKEND_DAYS",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "DateCanonicalizer",
    "DEFAULT_BUSINESS_TIMEZONE",
    "is_date_key",
    "month_bounds",
    "year_bounds",
    "CashSnapshotInfo",
    "DailyExpenses",
    "DailyExpenseSummary",
    "ExpenseDraft",
    "ExpenseInfo",
    "ExpenseLedgerSummary",
    "ExpenseMoveInfo",
    "ExpenseStatus",
    "HolidayInfo",
    "YearlyHolidays",
    "Admin",
    "Cso",
    "Spender",
    "SpenderDirectory",
    "SpenderType",
    "SuperAdmin",
    "spender_from_parts",
    "spender_to_parts",
]
