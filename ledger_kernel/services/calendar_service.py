"""
CalendarService -- holiday maintenance and business-day resolution.

Responsibility:
    Creates and deletes holiday records and builds BusinessCalendar
    instances from the stored holidays, either for the whole table or for
    the handful of rows that can affect a single date.

Architecture position:
    Kernel > Services -- imperative shell.  The pure decision lives in
    ``ledger_kernel.domain.calendar.BusinessCalendar``; this service only
    loads its inputs.  ExpenseService consults it before every write.

Invariants enforced:
    - Holiday dates are canonicalized before storage; month_day is derived
      from the canonical key, never supplied by the caller.
    - Holidays are never updated in place.

Failure modes:
    - InvalidDateError: holiday date cannot be canonicalized.
    - HolidayNotFoundError: delete of an unknown id.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ledger_kernel.domain.calendar import DEFAULT_WEEKEND_DAYS, BusinessCalendar
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dates import DateCanonicalizer
from ledger_kernel.domain.dtos import HolidayInfo
from ledger_kernel.domain.ids import coerce_uuid
from ledger_kernel.exceptions import HolidayNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.holiday import Holiday
from ledger_kernel.services.base import BaseService

logger = get_logger("services.calendar")


class CalendarService(BaseService[Holiday]):
    """
    Holiday writes plus business-day lookups.

    Contract:
        ``is_business_day(value)`` canonicalizes ``value`` and answers from
        the holidays visible in the current session.  Calls never write.
    """

    def __init__(
        self,
        session: Session,
        canonicalizer: DateCanonicalizer,
        clock: Clock | None = None,
        weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
    ):
        super().__init__(session)
        self._canonicalizer = canonicalizer
        self._clock = clock or SystemClock()
        self._weekend_days = frozenset(weekend_days)

    @property
    def weekend_days(self) -> frozenset[int]:
        return self._weekend_days

    # =========================================================================
    # Holiday writes
    # =========================================================================

    def create_holiday(
        self,
        date: object,
        reason: str | None = None,
        is_recurring: bool = False,
    ) -> HolidayInfo:
        """
        Record a holiday.

        Args:
            date: Any input the canonicalizer accepts.  For recurring
                holidays only the month and day are significant.
            reason: Optional free text; blank text is stored as None.
            is_recurring: Whether the holiday repeats every year.

        Returns:
            The stored HolidayInfo.

        Raises:
            InvalidDateError: ``date`` cannot be canonicalized.
        """
        date_key = self._canonicalizer.canonicalize(date)
        reason = reason.strip() if reason else None
        now = self._clock.now()

        holiday = Holiday(
            holiday=date_key,
            month_day=date_key[5:],
            reason=reason or None,
            is_recurring=bool(is_recurring),
            created_at=now,
            updated_at=now,
        )
        self.session.add(holiday)
        self.session.flush()

        logger.info(
            "holiday_created",
            extra={
                "holiday_id": str(holiday.id),
                "holiday": date_key,
                "is_recurring": holiday.is_recurring,
            },
        )
        return holiday.to_dto()

    def delete_holiday(self, holiday_id: UUID | str) -> HolidayInfo:
        """
        Remove a holiday.

        Returns:
            The HolidayInfo as it was before deletion.

        Raises:
            HolidayNotFoundError: No holiday has this id.
        """
        holiday = self.session.get(
            Holiday, coerce_uuid(holiday_id, HolidayNotFoundError)
        )
        if holiday is None:
            raise HolidayNotFoundError(str(holiday_id))

        info = holiday.to_dto()
        self.session.delete(holiday)
        self.session.flush()

        logger.info(
            "holiday_deleted",
            extra={"holiday_id": str(info.id), "holiday": info.holiday},
        )
        return info

    # =========================================================================
    # Business-day resolution
    # =========================================================================

    def load_calendar(self) -> BusinessCalendar:
        """Calendar over every stored holiday."""
        holidays = self.session.execute(select(Holiday)).scalars().all()
        return BusinessCalendar(
            (h.to_dto() for h in holidays), weekend_days=self._weekend_days
        )

    def calendar_for(self, date_key: str) -> BusinessCalendar:
        """Calendar over only the holidays that can match ``date_key``."""
        holidays = self.session.execute(
            select(Holiday).where(
                or_(
                    (Holiday.is_recurring == False) & (Holiday.holiday == date_key),  # noqa: E712
                    (Holiday.is_recurring == True) & (Holiday.month_day == date_key[5:]),  # noqa: E712
                )
            )
        ).scalars().all()
        return BusinessCalendar(
            (h.to_dto() for h in holidays), weekend_days=self._weekend_days
        )

    def is_business_day(self, date: object) -> bool:
        """
        Whether ``date`` accepts financial entries.

        Raises:
            InvalidDateError: ``date`` cannot be canonicalized.
        """
        date_key = self._canonicalizer.canonicalize(date)
        return self.calendar_for(date_key).is_business_day(date_key)

    def next_business_day(self, date: object) -> str:
        """First business day strictly after ``date``."""
        date_key = self._canonicalizer.canonicalize(date)
        return self.load_calendar().next_business_day(date_key)
