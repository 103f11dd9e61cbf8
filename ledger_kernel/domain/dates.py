"""
Date Canonicalizer -- one date key format for the whole ledger.

Responsibility:
    Converts timestamps, dates, date-only strings, epoch seconds and "now"
    into the canonical ``YYYY-MM-DD`` key expressed in the organization's
    business timezone.  Every other component stores and compares dates
    only in this form.

Architecture position:
    Kernel > Domain -- pure functional core.  The business timezone is
    injected once here (from configuration); no other module knows about
    timezones.

Invariants enforced:
    - Idempotent: canonicalizing a canonical key returns it unchanged.
    - Total: input that cannot be parsed raises InvalidDateError, never an
      empty or partial key.
    - Fixed width: keys are zero-padded, so string order is calendar order.

Conversion rules:
    - ``date``                -> its own calendar date (no timezone shift).
    - aware ``datetime``      -> converted to the business timezone.
    - naive ``datetime``      -> treated as UTC, then converted.
    - ``"YYYY-MM-DD"``        -> validated and returned unchanged.
    - ISO-8601 timestamp str  -> parsed as a datetime (``Z`` suffix allowed).
    - ``int`` / ``float``     -> POSIX seconds.
    - ``None`` / ``"now"``    -> the injected clock's current time.
"""

import re
from calendar import monthrange
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.exceptions import ConfigurationError, InvalidDateError, ValidationError

DEFAULT_BUSINESS_TIMEZONE = "Africa/Lagos"

_DATE_KEY_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}\Z")
_NOW_TOKENS = frozenset({"now", "today"})


def resolve_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name, raising ConfigurationError if unknown."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError("business_timezone", f"unknown timezone {name!r}") from exc


def is_date_key(value: object) -> bool:
    """True if ``value`` is a well-formed canonical key for a real date."""
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def key_to_date(date_key: str) -> date:
    """Parse a canonical key back into a ``date``."""
    if not is_date_key(date_key):
        raise InvalidDateError(date_key, "expected YYYY-MM-DD")
    return date.fromisoformat(date_key)


def shift_key(date_key: str, days: int) -> str:
    """Key for the calendar date ``days`` after ``date_key``."""
    return (key_to_date(date_key) + timedelta(days=days)).isoformat()


def month_bounds(year: int, month: int) -> tuple[str, str]:
    """First and last date keys of a month (inclusive)."""
    if not 1 <= month <= 12:
        raise ValidationError("month", f"{month} is not between 1 and 12")
    if not 1 <= year <= 9999:
        raise ValidationError("year", f"{year} is out of range")
    last_day = monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()


def year_bounds(year: int) -> tuple[str, str]:
    """First and last date keys of a year (inclusive)."""
    if not 1 <= year <= 9999:
        raise ValidationError("year", f"{year} is out of range")
    return date(year, 1, 1).isoformat(), date(year, 12, 31).isoformat()


class DateCanonicalizer:
    """
    Converts date-like input into canonical keys in the business timezone.

    Contract:
        ``canonicalize(value)`` returns a ``YYYY-MM-DD`` key or raises
        InvalidDateError.  The result does not depend on the host's local
        timezone.

    Guarantees:
        - ``canonicalize(canonicalize(x)) == canonicalize(x)``.
        - For two instants ``a < b``, ``canonicalize(a) <= canonicalize(b)``.
    """

    def __init__(
        self,
        timezone: ZoneInfo | str = DEFAULT_BUSINESS_TIMEZONE,
        clock: Clock | None = None,
    ):
        self._tz = resolve_timezone(timezone) if isinstance(timezone, str) else timezone
        self._clock = clock or SystemClock()

    @property
    def timezone(self) -> ZoneInfo:
        return self._tz

    def canonicalize(self, value: object = None) -> str:
        """Return the canonical date key for ``value``."""
        if value is None:
            return self._from_datetime(self._clock.now())

        # datetime is a subclass of date, so it must be checked first
        if isinstance(value, datetime):
            return self._from_datetime(value)

        if isinstance(value, date):
            return value.isoformat()

        if isinstance(value, bool):
            raise InvalidDateError(value, "booleans are not dates")

        if isinstance(value, (int, float)):
            try:
                return self._from_datetime(datetime.fromtimestamp(value, tz=UTC))
            except (OverflowError, OSError, ValueError) as exc:
                raise InvalidDateError(value, "timestamp out of range") from exc

        if isinstance(value, str):
            return self._from_string(value)

        raise InvalidDateError(value, f"unsupported type {type(value).__name__}")

    def today(self) -> str:
        """Canonical key for the current business day."""
        return self.canonicalize(None)

    def _from_datetime(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        try:
            return value.astimezone(self._tz).date().isoformat()
        except OverflowError as exc:
            raise InvalidDateError(value, "outside the supported date range") from exc

    def _from_string(self, value: str) -> str:
        text = value.strip()
        if not text:
            raise InvalidDateError(value, "empty string")

        if text.lower() in _NOW_TOKENS:
            return self._from_datetime(self._clock.now())

        if _DATE_KEY_RE.match(text):
            try:
                return date.fromisoformat(text).isoformat()
            except ValueError as exc:
                raise InvalidDateError(value, str(exc)) from exc

        # Full timestamps need at least a date, a separator and a time
        if len(text) > 10 and _DATE_KEY_RE.match(text[:10]) and text[10] in "T ":
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError as exc:
                raise InvalidDateError(value, str(exc)) from exc
            return self._from_datetime(parsed)

        raise InvalidDateError(value, "expected YYYY-MM-DD or an ISO-8601 timestamp")
