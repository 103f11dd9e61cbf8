"""
Module: ledger_kernel.selectors.cash_selector
Responsibility: Read-only cash-at-hand views.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - ``cash_at_hand`` never fails for a well-formed date: an unrecorded
      date reads as a zero balance with ``updated_at`` None.
    - History views are newest date first.
"""

from sqlalchemy import select

from ledger_kernel.domain import aggregation
from ledger_kernel.domain.dates import key_to_date, month_bounds
from ledger_kernel.domain.dtos import CashSnapshotInfo
from ledger_kernel.exceptions import CashSnapshotNotFoundError
from ledger_kernel.models.cash_snapshot import CashSnapshot
from ledger_kernel.selectors.base import BaseSelector


class CashSelector(BaseSelector[CashSnapshot]):
    """Cash snapshot read models."""

    def cash_entries(self) -> list[CashSnapshotInfo]:
        """Every recorded snapshot, newest date first."""
        rows = self.session.execute(
            select(CashSnapshot).order_by(CashSnapshot.date_key.desc())
        ).scalars().all()
        return [row.to_dto() for row in rows]

    def find_cash_snapshot(self, date_key: str) -> CashSnapshotInfo | None:
        key_to_date(date_key)
        row = self.session.execute(
            select(CashSnapshot).where(CashSnapshot.date_key == date_key)
        ).scalar_one_or_none()
        return row.to_dto() if row else None

    def get_cash_snapshot(self, date_key: str) -> CashSnapshotInfo:
        """
        Raises:
            CashSnapshotNotFoundError: nothing recorded for ``date_key``.
        """
        snapshot = self.find_cash_snapshot(date_key)
        if snapshot is None:
            raise CashSnapshotNotFoundError(date_key)
        return snapshot

    def cash_at_hand(self, date_key: str) -> CashSnapshotInfo:
        """The recorded snapshot, or a zero placeholder."""
        return self.find_cash_snapshot(date_key) or CashSnapshotInfo.unrecorded(date_key)

    def cash_history(self, year: int, month: int) -> list[CashSnapshotInfo]:
        start, end = month_bounds(year, month)
        rows = self.session.execute(
            select(CashSnapshot).where(
                CashSnapshot.date_key >= start,
                CashSnapshot.date_key <= end,
            )
        ).scalars().all()
        return aggregation.cash_history(year, month, (row.to_dto() for row in rows))
