"""
Module: ledger_kernel.selectors.holiday_selector
Responsibility: Read-only holiday listings.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - A recurring holiday appears in every requested year whatever year it
      was stored under.
    - A one-time holiday appears only in the year of its exact date.
"""

from sqlalchemy import or_, select

from ledger_kernel.domain import aggregation
from ledger_kernel.domain.dates import year_bounds
from ledger_kernel.domain.dtos import HolidayInfo, YearlyHolidays
from ledger_kernel.models.holiday import Holiday
from ledger_kernel.selectors.base import BaseSelector


class HolidaySelector(BaseSelector[Holiday]):
    """Holiday read models."""

    def list_holidays(self, year: int | None = None) -> list[HolidayInfo]:
        """
        Holidays in ascending order.

        Without ``year``: every stored holiday ordered by stored date.
        With ``year``: the holidays that apply to that year, recurring and
        one-time together, ordered by month and day.
        """
        if year is None:
            rows = self.session.execute(
                select(Holiday).order_by(Holiday.holiday, Holiday.created_at)
            ).scalars().all()
            return [row.to_dto() for row in rows]

        yearly = self.yearly_holidays(year)
        return sorted(
            (*yearly.recurring, *yearly.one_time),
            key=lambda h: (h.month_day, not h.is_recurring, h.holiday),
        )

    def yearly_holidays(self, year: int) -> YearlyHolidays:
        start, end = year_bounds(year)
        rows = self.session.execute(
            select(Holiday).where(
                or_(
                    Holiday.is_recurring == True,  # noqa: E712
                    (Holiday.holiday >= start) & (Holiday.holiday <= end),
                )
            )
        ).scalars().all()
        return aggregation.yearly_holidays(year, (row.to_dto() for row in rows))
