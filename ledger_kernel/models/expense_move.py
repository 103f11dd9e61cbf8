"""
Module: ledger_kernel.models.expense_move
Responsibility: Append-only history of expense date moves.
Architecture position: Kernel > Models.  May import from db/ and domain/dtos.py only.

Invariants enforced:
    - Rows are inserted by ExpenseService.move_expense in the same
      transaction that updates the expense; they are never updated or
      deleted.
    - sequence numbers the moves of one expense from 1 without gaps.
    - previous_date is the expense's date immediately before the move, so
      the chain of rows for one expense replays its full date history.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, UUIDString
from ledger_kernel.db.types import date_key_column_type
from ledger_kernel.domain.dtos import ExpenseMoveInfo


class ExpenseMove(Base):
    """One relocation of an expense from ``previous_date`` to ``target_date``."""

    __tablename__ = "expense_moves"

    __table_args__ = (
        UniqueConstraint("expense_id", "sequence", name="uq_expense_move_sequence"),
    )

    expense_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("expenses.id"),
        nullable=False,
    )

    # 1 for the first move of an expense, then 2, 3, ...
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    previous_date: Mapped[str] = mapped_column(date_key_column_type(), nullable=False)

    target_date: Mapped[str] = mapped_column(date_key_column_type(), nullable=False)

    moved_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<ExpenseMove {self.expense_id} {self.previous_date} -> {self.target_date}>"

    def to_dto(self) -> ExpenseMoveInfo:
        return ExpenseMoveInfo(
            id=self.id,
            expense_id=self.expense_id,
            sequence=self.sequence,
            previous_date=self.previous_date,
            target_date=self.target_date,
            moved_at=self.moved_at,
        )
