"""
Module: ledger_kernel.db.types
Responsibility: Column types and width constants shared by every model.
    Centralizes precision and timestamp handling so that each model and
    service uses identical definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats for money.  Amounts are Decimal stored as Numeric(38, 9).
    - Date keys are fixed-width ``YYYY-MM-DD`` strings so that SQL string
      comparison agrees with calendar order.
    - Timestamps round-trip as timezone-aware UTC on every backend (SQLite
      drops tzinfo on DateTime columns; UTCDateTime restores it).
"""

from datetime import UTC
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.types import TypeDecorator

MONEY_DECIMAL_PLACES = 9


def money_column_type() -> "ExactDecimal":
    """Numeric(38, 9): up to 10^29 with 9 decimal places."""
    return ExactDecimal()


def date_key_column_type() -> String:
    """Canonical ``YYYY-MM-DD`` key."""
    return String(10)


def month_day_column_type() -> String:
    """Recurring-holiday ``MM-DD`` key."""
    return String(5)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp normalised to UTC.

    Guarantees:
        - Naive datetimes are rejected on bind (ambiguous wall-clock time).
        - Loaded values are always aware and in UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime not allowed: {value!r}")
        return value.astimezone(UTC)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class ExactDecimal(TypeDecorator):
    """
    Numeric(38, 9) that never passes through float.

    SQLite has no decimal type and SQLAlchemy would bind Decimal values as
    floats there, so on SQLite the value is stored as its canonical string.
    Every other backend uses a native NUMERIC column.
    """

    impl = Numeric(38, MONEY_DECIMAL_PLACES, asdecimal=True)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(48))
        return dialect.type_descriptor(self.impl)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value)
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value) if not isinstance(value, Decimal) else value
