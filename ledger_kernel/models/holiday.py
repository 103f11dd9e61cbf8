"""
Module: ledger_kernel.models.holiday
Responsibility: ORM persistence for operator-maintained holidays.
Architecture position: Kernel > Models.  May import from db/ and domain/dtos.py only.

Invariants enforced:
    - holiday is a canonical date key.  For recurring holidays the year part
      is a placeholder; month_day (derived on insert) is what matches.
    - Holidays are never edited in place.  Changing a date is a delete
      followed by a create.

Failure modes:
    - None at the ORM level.  Duplicate holidays on the same date are
      allowed; they simply both match.
"""

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.db.types import date_key_column_type, month_day_column_type
from ledger_kernel.domain.dtos import HolidayInfo


class Holiday(TrackedBase):
    """A one-time or recurring non-business day."""

    __tablename__ = "holidays"

    __table_args__ = (
        Index("idx_holiday_date", "holiday"),
        Index("idx_holiday_recurring", "is_recurring", "month_day"),
    )

    holiday: Mapped[str] = mapped_column(date_key_column_type(), nullable=False)

    month_day: Mapped[str] = mapped_column(month_day_column_type(), nullable=False)

    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)

    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        kind = "recurring" if self.is_recurring else "one-time"
        return f"<Holiday {self.holiday} ({kind})>"

    def to_dto(self) -> HolidayInfo:
        return HolidayInfo(
            id=self.id,
            holiday=self.holiday,
            is_recurring=self.is_recurring,
            reason=self.reason,
        )
