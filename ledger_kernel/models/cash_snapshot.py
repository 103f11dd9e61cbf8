"""
Module: ledger_kernel.models.cash_snapshot
Responsibility: ORM persistence for the daily cash-at-hand balance.
Architecture position: Kernel > Models.  May import from db/ and domain/dtos.py only.

Invariants enforced:
    - At most one row per date_key (uq_cash_snapshot_date).  Writes for an
      existing date replace amount and updated_at in place.
    - amount >= 0 (checked by CashService before any write).

Audit relevance:
    Only the last committed balance per date is kept; there is no history of
    intermediate edits.  updated_at records when that balance was written.
"""

from decimal import Decimal

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.db.types import date_key_column_type
from ledger_kernel.domain.dtos import CashSnapshotInfo


class CashSnapshot(TrackedBase):
    """The single cash balance recorded for a date."""

    __tablename__ = "cash_snapshots"

    __table_args__ = (
        UniqueConstraint("date_key", name="uq_cash_snapshot_date"),
    )

    date_key: Mapped[str] = mapped_column(date_key_column_type(), nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<CashSnapshot {self.date_key}: {self.amount}>"

    def to_dto(self) -> CashSnapshotInfo:
        return CashSnapshotInfo(
            id=self.id,
            date=self.date_key,
            amount=self.amount,
            updated_at=self.updated_at,
        )
