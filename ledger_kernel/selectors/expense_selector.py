"""
Module: ledger_kernel.selectors.expense_selector
Responsibility: Read-only expense views: one day, one month, the whole
    ledger, and the move history of a single expense.
Architecture position: Kernel > Selectors.  Row loading only; grouping,
    sorting and summing live in ``ledger_kernel.domain.aggregation``.

Invariants enforced:
    - Totals are exact Decimal sums recomputed on every call.
    - A month's summary totals equal the sum of the daily totals of the
      dates it lists.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain import aggregation
from ledger_kernel.domain.dates import key_to_date, month_bounds
from ledger_kernel.domain.dtos import (
    DailyExpenses,
    DailyExpenseSummary,
    ExpenseInfo,
    ExpenseLedgerSummary,
    ExpenseMoveInfo,
)
from ledger_kernel.domain.ids import coerce_uuid
from ledger_kernel.exceptions import ExpenseNotFoundError
from ledger_kernel.models.expense import Expense
from ledger_kernel.models.expense_move import ExpenseMove
from ledger_kernel.selectors.base import BaseSelector


class ExpenseSelector(BaseSelector[Expense]):
    """Expense read models."""

    def list_expenses(self) -> list[ExpenseInfo]:
        """Every expense, newest date first, then newest submission first."""
        rows = self.session.execute(
            select(Expense).order_by(
                Expense.date_key.desc(), Expense.submitted_at.desc()
            )
        ).scalars().all()
        return [row.to_dto() for row in rows]

    def daily_expenses(self, date_key: str) -> DailyExpenses:
        key_to_date(date_key)
        rows = self.session.execute(
            select(Expense).where(Expense.date_key == date_key)
        ).scalars().all()
        return aggregation.daily_expenses(date_key, (row.to_dto() for row in rows))

    def monthly_expense_summary(self, year: int, month: int) -> list[DailyExpenseSummary]:
        return aggregation.monthly_expense_summary(
            year, month, self._in_month(year, month)
        )

    def monthly_expense_total(self, year: int, month: int) -> Decimal:
        return aggregation.total(e.amount for e in self._in_month(year, month))

    def expense_ledger_summary(self) -> ExpenseLedgerSummary:
        rows = self.session.execute(select(Expense)).scalars().all()
        return aggregation.expense_ledger_summary(row.to_dto() for row in rows)

    def expense_moves(self, expense_id: UUID | str) -> list[ExpenseMoveInfo]:
        """
        Move history for one expense, oldest first.

        Raises:
            ExpenseNotFoundError: no expense has this id.
        """
        expense_uuid = coerce_uuid(expense_id, ExpenseNotFoundError)
        if self.session.get(Expense, expense_uuid) is None:
            raise ExpenseNotFoundError(str(expense_id))
        rows = self.session.execute(
            select(ExpenseMove)
            .where(ExpenseMove.expense_id == expense_uuid)
            .order_by(ExpenseMove.sequence)
        ).scalars().all()
        return [row.to_dto() for row in rows]

    def _in_month(self, year: int, month: int) -> list[ExpenseInfo]:
        start, end = month_bounds(year, month)
        rows = self.session.execute(
            select(Expense).where(
                Expense.date_key >= start,
                Expense.date_key <= end,
            )
        ).scalars().all()
        return [row.to_dto() for row in rows]
