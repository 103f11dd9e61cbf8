"""SQLAlchemy models for the ledger kernel."""

from ledger_kernel.models.cash_snapshot import CashSnapshot
from ledger_kernel.models.expense import Expense
from ledger_kernel.models.expense_move import ExpenseMove
from ledger_kernel.models.holiday import Holiday

__all__ = [
    "CashSnapshot",
    "Expense",
    "ExpenseMove",
    "Holiday",
]
