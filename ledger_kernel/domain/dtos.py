"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable records that cross the service/selector boundary: the stored
    entities (cash snapshots, expenses, expense moves, holidays), the
    expense draft accepted by the store, and the aggregated views produced
    by the aggregation engine.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  ORM models convert
    themselves into these via ``to_dto()``; services and selectors never
    return ORM entities.

Invariants enforced:
    - All amounts are Decimal, never float.
    - All dates are canonical ``YYYY-MM-DD`` keys.
    - Aggregate totals default to ``Decimal("0")``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from ledger_kernel.domain.spender import Spender, SuperAdmin

ZERO = Decimal("0")


class ExpenseStatus(str, Enum):
    """Move state of an expense.  LOGGED -> MOVED, and MOVED -> MOVED on repeat moves."""

    LOGGED = "logged"
    MOVED = "moved"


@dataclass(frozen=True)
class CashSnapshotInfo:
    """
    The cash-at-hand balance recorded for one date.

    ``id`` and ``updated_at`` are None for the zero-valued placeholder
    returned when nothing has been recorded for a date.
    """

    date: str
    amount: Decimal
    updated_at: datetime | None = None
    id: UUID | None = None

    @property
    def is_recorded(self) -> bool:
        return self.id is not None

    @classmethod
    def unrecorded(cls, date_key: str) -> CashSnapshotInfo:
        return cls(date=date_key, amount=ZERO)


@dataclass(frozen=True)
class ExpenseDraft:
    """
    Unvalidated input for a new expense.

    ``amount`` and ``date`` are raw caller values; the expense service
    parses and validates them before anything is written.
    """

    amount: Any
    purpose: str
    date: Any
    receipt_img: str
    spender: Spender = field(default_factory=SuperAdmin)


@dataclass(frozen=True)
class ExpenseInfo:
    """A stored expense."""

    id: UUID
    amount: Decimal
    purpose: str
    date: str
    spender: Spender
    receipt_img: str
    submitted_at: datetime
    moved_at: datetime | None = None
    spender_name: str | None = None

    @property
    def status(self) -> ExpenseStatus:
        return ExpenseStatus.MOVED if self.moved_at is not None else ExpenseStatus.LOGGED

    @property
    def spender_type(self) -> str:
        return self.spender.spender_type.value

    @property
    def spender_id(self) -> str | None:
        return self.spender.spender_id


@dataclass(frozen=True)
class ExpenseMoveInfo:
    """One entry of an expense's move history."""

    id: UUID
    expense_id: UUID
    sequence: int
    previous_date: str
    target_date: str
    moved_at: datetime


@dataclass(frozen=True)
class HolidayInfo:
    """
    A stored holiday.

    For recurring holidays only ``month_day`` is significant; the year in
    ``holiday`` is whatever the operator entered.
    """

    id: UUID
    holiday: str
    is_recurring: bool
    reason: str | None = None

    @property
    def month_day(self) -> str:
        return self.holiday[5:]


@dataclass(frozen=True)
class DailyExpenses:
    """All expenses attributed to one date."""

    date: str
    items: tuple[ExpenseInfo, ...] = ()
    total_amount: Decimal = ZERO

    @property
    def count(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class DailyExpenseSummary:
    """Count and total for one date."""

    date: str
    count: int
    total_amount: Decimal


@dataclass(frozen=True)
class ExpenseLedgerSummary:
    """Per-date summaries (newest first) and their grand total."""

    entries: tuple[DailyExpenseSummary, ...] = ()
    total_amount: Decimal = ZERO


@dataclass(frozen=True)
class YearlyHolidays:
    """Holidays that apply to one calendar year."""

    year: int
    recurring: tuple[HolidayInfo, ...] = ()
    one_time: tuple[HolidayInfo, ...] = ()
