"""Selectors for the ledger kernel (read side)."""

from ledger_kernel.selectors.cash_selector import CashSelector
from ledger_kernel.selectors.expense_selector import ExpenseSelector
from ledger_kernel.selectors.holiday_selector import HolidaySelector

__all__ = [
    "CashSelector",
    "ExpenseSelector",
    "HolidaySelector",
]
