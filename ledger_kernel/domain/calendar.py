"""
BusinessCalendar -- which date keys accept financial entries.

Responsibility:
    Decides whether a canonical date key is a business day given a fixed set
    of weekend days and a snapshot of holiday records.

Architecture position:
    Kernel > Domain -- pure functional core.  Built by CalendarService from
    the stored holidays; has no reference to a session.

Invariants enforced:
    - A weekend day is never a business day, whatever the holiday data.
    - A one-time holiday blocks exactly its own date.
    - A recurring holiday blocks its month/day in every year.  A recurring
      29 February only blocks leap years.
    - Deterministic and side-effect free for a given holiday snapshot.
"""

from collections.abc import Iterable

from ledger_kernel.domain.dates import key_to_date, shift_key
from ledger_kernel.domain.dtos import HolidayInfo
from ledger_kernel.exceptions import NoBusinessDayError

# ISO weekday numbers: Monday=1 ... Sunday=7
DEFAULT_WEEKEND_DAYS = frozenset({6, 7})

# A full leap year plus one week
_MAX_SEARCH_DAYS = 366 + 7


class BusinessCalendar:
    """
    Immutable business-day resolver.

    Contract:
        ``is_business_day(key)`` is False when the key's weekday is a weekend
        day or when any holiday matches it.  A weekend that is also a holiday
        is simply not a business day.
    """

    def __init__(
        self,
        holidays: Iterable[HolidayInfo] = (),
        weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
    ):
        self._weekend_days = frozenset(weekend_days)
        self._one_time: dict[str, list[HolidayInfo]] = {}
        self._recurring: dict[str, list[HolidayInfo]] = {}
        for holiday in holidays:
            if holiday.is_recurring:
                self._recurring.setdefault(holiday.month_day, []).append(holiday)
            else:
                self._one_time.setdefault(holiday.holiday, []).append(holiday)

    @property
    def weekend_days(self) -> frozenset[int]:
        return self._weekend_days

    def is_weekend(self, date_key: str) -> bool:
        return key_to_date(date_key).isoweekday() in self._weekend_days

    def holidays_on(self, date_key: str) -> list[HolidayInfo]:
        """Holidays (one-time first, then recurring) that fall on ``date_key``."""
        key_to_date(date_key)
        return [
            *self._one_time.get(date_key, ()),
            *self._recurring.get(date_key[5:], ()),
        ]

    def is_holiday(self, date_key: str) -> bool:
        return bool(self.holidays_on(date_key))

    def is_business_day(self, date_key: str) -> bool:
        return not self.is_weekend(date_key) and not self.is_holiday(date_key)

    def next_business_day(self, date_key: str) -> str:
        """
        First business day strictly after ``date_key``.

        Raises:
            NoBusinessDayError: the weekend days and holidays leave no
                business day in the following year.
        """
        candidate = date_key
        for _ in range(_MAX_SEARCH_DAYS):
            candidate = shift_key(candidate, 1)
            if self.is_business_day(candidate):
                return candidate
        raise NoBusinessDayError(date_key, _MAX_SEARCH_DAYS)

    def business_days_between(self, start_key: str, end_key: str) -> list[str]:
        """Business days in ``[start_key, end_key]`` in ascending order."""
        days: list[str] = []
        candidate = start_key
        while candidate <= end_key:
            if self.is_business_day(candidate):
                days.append(candidate)
            candidate = shift_key(candidate, 1)
        return days
