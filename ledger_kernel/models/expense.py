"""
Module: ledger_kernel.models.expense
Responsibility: ORM persistence for expenses attributed to a business day.
Architecture position: Kernel > Models.  May import from db/ and domain/ only.
    MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - amount > 0 and purpose non-empty (checked by ExpenseService before any
      write; rows are never inserted unvalidated).
    - date_key was a business day when the row was created and whenever it
      was last moved.
    - spender_id is NULL exactly when spender_type is 'super_admin'.
    - submitted_at is immutable.  moved_at is set only by the move
      transaction; NULL means the expense has never been moved.

Failure modes:
    - ValidationError from to_dto() if a row was edited outside the service
      layer into an impossible spender combination.

Audit relevance:
    The attributed date changes only through ExpenseService.move_expense,
    which also appends an ExpenseMove row recording the previous date.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.db.types import date_key_column_type
from ledger_kernel.domain.dtos import ExpenseInfo
from ledger_kernel.domain.spender import spender_from_parts


class Expense(TrackedBase):
    """
    A single expense with accountability and a receipt reference.

    Contract:
        The business identity is ``id``; the attributed date (``date_key``)
        is mutable only through the move transaction.  ``receipt_img`` is an
        opaque reference returned by the image storage service.
    """

    __tablename__ = "expenses"

    __table_args__ = (
        Index("idx_expense_date", "date_key"),
        Index("idx_expense_spender", "spender_type", "spender_id"),
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    purpose: Mapped[str] = mapped_column(Text, nullable=False)

    date_key: Mapped[str] = mapped_column(date_key_column_type(), nullable=False)

    spender_type: Mapped[str] = mapped_column(String(20), nullable=False)

    spender_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    receipt_img: Mapped[str] = mapped_column(String(1024), nullable=False)

    submitted_at: Mapped[datetime] = mapped_column(nullable=False)

    moved_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<Expense {self.id} {self.date_key}: {self.amount}>"

    def to_dto(self) -> ExpenseInfo:
        return ExpenseInfo(
            id=self.id,
            amount=self.amount,
            purpose=self.purpose,
            date=self.date_key,
            spender=spender_from_parts(self.spender_type, self.spender_id),
            receipt_img=self.receipt_img,
            submitted_at=self.submitted_at,
            moved_at=self.moved_at,
        )
