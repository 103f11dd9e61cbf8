"""Services for the ledger kernel (write side)."""

from ledger_kernel.services.calendar_service import CalendarService
from ledger_kernel.services.cash_service import CashService
from ledger_kernel.services.expense_service import ExpenseService
from ledger_kernel.services.key_locks import KeyLockRegistry

__all__ = [
    "CalendarService",
    "CashService",
    "ExpenseService",
    "KeyLockRegistry",
]
