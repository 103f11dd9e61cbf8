"""
BackOfficeLedger -- the command/query boundary of the ledger.

Responsibility:
    The one surface callers (CLI, web handlers, tests) use.  Each call is a
    complete unit of work: it opens a session, runs kernel services or
    selectors, commits, and returns a ``CommandResult``.

Architecture position:
    Services layer -- above ``ledger_kernel`` and ``ledger_config``.  This is
    the only place that commits, holds write locks, or converts kernel
    exceptions into results.

Invariants enforced:
    - Every date argument goes through the DateCanonicalizer before any
      lookup or write.
    - Write commands hold the per-key lock (cash date, expense id) around
      the whole transaction, commit included.  On SQLite, where the
      database admits a single writer, write commands also hold one
      database-wide lock, always taken after the per-key lock.
    - A ``LedgerKernelError`` rolls the transaction back and becomes a
      failed ``CommandResult``; the store is unchanged.
    - Any other exception rolls back, is logged with its traceback and
      propagates.

Audit relevance:
    Each call runs inside ``LogContext.bind(command=..., correlation_id=...)``
    so every kernel log line it causes carries the command name.  Rejections
    are logged as ``command_rejected`` at WARNING.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from contextlib import ExitStack
from decimal import Decimal
from typing import Any, TypeVar
from uuid import UUID, uuid4

from sqlalchemy.orm import Session, sessionmaker

from ledger_kernel.db.engine import session_scope
from ledger_kernel.domain.calendar import DEFAULT_WEEKEND_DAYS
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dates import DateCanonicalizer
from ledger_kernel.domain.dtos import (
    CashSnapshotInfo,
    DailyExpenses,
    DailyExpenseSummary,
    ExpenseDraft,
    ExpenseInfo,
    ExpenseLedgerSummary,
    ExpenseMoveInfo,
    HolidayInfo,
    YearlyHolidays,
)
from ledger_kernel.domain.spender import SpenderDirectory, spender_from_parts
from ledger_kernel.exceptions import LedgerKernelError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.selectors import CashSelector, ExpenseSelector, HolidaySelector
from ledger_kernel.services import (
    CalendarService,
    CashService,
    ExpenseService,
    KeyLockRegistry,
)
from ledger_services.directory import OpenSpenderDirectory
from ledger_services.result import CommandResult, error_details, status_for

logger = get_logger("services.backoffice_ledger")

T = TypeVar("T")

_DATABASE_WRITE_KEY = "database:write"


class BackOfficeLedger:
    """
    Commands and queries over cash snapshots, expenses and holidays.

    Contract:
        Every public method returns a ``CommandResult``.  Commands are
        durable when the result is returned.

    Non-goals:
        - No deletion of expenses or cash snapshots.
        - No retries; a CONFLICT result is for the caller to resubmit.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        canonicalizer: DateCanonicalizer | None = None,
        clock: Clock | None = None,
        weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
        directory: SpenderDirectory | None = None,
        locks: KeyLockRegistry | None = None,
        lock_timeout: float | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._canonicalizer = canonicalizer or DateCanonicalizer(clock=self._clock)
        self._weekend_days = frozenset(weekend_days)
        self._directory = directory or OpenSpenderDirectory()
        self._locks = locks or KeyLockRegistry()
        self._lock_timeout = lock_timeout
        bind = session_factory.kw.get("bind")
        self._single_writer = bind is not None and bind.dialect.name == "sqlite"

    @property
    def canonicalizer(self) -> DateCanonicalizer:
        return self._canonicalizer

    # =========================================================================
    # Cash commands and queries
    # =========================================================================

    def set_cash_at_hand(self, date: object, amount: object) -> CommandResult[CashSnapshotInfo]:
        """Upsert the cash balance for ``date`` (any day, weekends included)."""

        def work(session: Session, date_key: str) -> CashSnapshotInfo:
            return CashService(session, self._canonicalizer, self._clock).set_cash_at_hand(
                date_key, amount
            )

        return self._write_on_date("set_cash_at_hand", date, work, KeyLockRegistry.cash_key)

    upsert_cash_snapshot = set_cash_at_hand

    def cash_entries(
        self, date: object = None
    ) -> CommandResult[list[CashSnapshotInfo] | CashSnapshotInfo]:
        """
        Without ``date``: every snapshot, newest first.  With ``date``: the
        snapshot for that date, or a zero balance if none was recorded.
        """
        if date is None:
            return self._query("cash_entries", lambda s: CashSelector(s).cash_entries())
        return self.cash_at_hand(date)

    def cash_at_hand(self, date: object) -> CommandResult[CashSnapshotInfo]:
        return self._query_on_date(
            "cash_at_hand", date, lambda s, key: CashSelector(s).cash_at_hand(key)
        )

    def get_cash_snapshot(self, date: object) -> CommandResult[CashSnapshotInfo]:
        """Like ``cash_at_hand`` but NOT_FOUND when nothing was recorded."""
        return self._query_on_date(
            "get_cash_snapshot", date, lambda s, key: CashSelector(s).get_cash_snapshot(key)
        )

    def cash_history(self, year: int, month: int) -> CommandResult[list[CashSnapshotInfo]]:
        return self._query(
            "cash_history", lambda s: CashSelector(s).cash_history(year, month)
        )

    # =========================================================================
    # Expense commands and queries
    # =========================================================================

    def create_expense(
        self,
        amount: object,
        purpose: str,
        date: object,
        receipt_img: str | None,
        spender_type: str = "super_admin",
        spender_id: str | None = None,
    ) -> CommandResult[ExpenseInfo]:
        """Record an expense; fails VALIDATION_FAILED on any rule violation."""

        def work(session: Session) -> ExpenseInfo:
            draft = ExpenseDraft(
                amount=amount,
                purpose=purpose,
                date=date,
                receipt_img=receipt_img or "",
                spender=spender_from_parts(spender_type, spender_id),
            )
            return self._expense_service(session).create_expense(draft)

        return self._write("create_expense", self._named(work))

    def submit_expense(self, draft: ExpenseDraft) -> CommandResult[ExpenseInfo]:
        """``create_expense`` for a caller that already holds a draft."""
        return self._write(
            "create_expense",
            self._named(lambda s: self._expense_service(s).create_expense(draft)),
        )

    def move_expense(self, expense_id: UUID | str, target_date: object) -> CommandResult[ExpenseInfo]:
        """
        Re-attribute an expense.  INVALID_TARGET_DATE when the target is not a
        business day, NOT_FOUND when the id is unknown.
        """

        def work(session: Session) -> ExpenseInfo:
            return self._expense_service(session).move_expense(expense_id, target_date)

        with LogContext.bind(expense_id=str(expense_id)):
            return self._write(
                "move_expense",
                self._named(work),
                lock_key=lambda: KeyLockRegistry.expense_key(expense_id),
            )

    def get_expense(self, expense_id: UUID | str) -> CommandResult[ExpenseInfo]:
        return self._query(
            "get_expense",
            self._named(lambda s: self._expense_service(s).get_expense(expense_id)),
        )

    def list_expenses(self) -> CommandResult[list[ExpenseInfo]]:
        return self._query("list_expenses", self._named(lambda s: ExpenseSelector(s).list_expenses()))

    def daily_expenses(self, date: object) -> CommandResult[DailyExpenses]:
        return self._query_on_date(
            "daily_expenses",
            date,
            lambda s, key: self._with_names(ExpenseSelector(s).daily_expenses(key)),
        )

    def expense_entries(self) -> CommandResult[ExpenseLedgerSummary]:
        """Every date with expenses, newest first, plus the grand total."""
        return self._query(
            "expense_entries", lambda s: ExpenseSelector(s).expense_ledger_summary()
        )

    def monthly_expense_summary(
        self, year: int, month: int
    ) -> CommandResult[list[DailyExpenseSummary]]:
        return self._query(
            "monthly_expense_summary",
            lambda s: ExpenseSelector(s).monthly_expense_summary(year, month),
        )

    def monthly_expense_total(self, year: int, month: int) -> CommandResult[Decimal]:
        return self._query(
            "monthly_expense_total",
            lambda s: ExpenseSelector(s).monthly_expense_total(year, month),
        )

    def expense_moves(self, expense_id: UUID | str) -> CommandResult[list[ExpenseMoveInfo]]:
        return self._query(
            "expense_moves", lambda s: ExpenseSelector(s).expense_moves(expense_id)
        )

    # =========================================================================
    # Holidays and the calendar
    # =========================================================================

    def create_holiday(
        self, date: object, reason: str | None = None, is_recurring: bool = False
    ) -> CommandResult[HolidayInfo]:
        return self._write(
            "create_holiday",
            lambda s: self._calendar_service(s).create_holiday(date, reason, is_recurring),
        )

    def delete_holiday(self, holiday_id: UUID | str) -> CommandResult[HolidayInfo]:
        """Acknowledges with the deleted holiday, or NOT_FOUND."""
        return self._write(
            "delete_holiday",
            lambda s: self._calendar_service(s).delete_holiday(holiday_id),
        )

    def list_holidays(self, year: int | None = None) -> CommandResult[list[HolidayInfo]]:
        return self._query(
            "list_holidays", lambda s: HolidaySelector(s).list_holidays(year)
        )

    def yearly_holidays(self, year: int) -> CommandResult[YearlyHolidays]:
        return self._query(
            "yearly_holidays", lambda s: HolidaySelector(s).yearly_holidays(year)
        )

    def is_business_day(self, date: object) -> CommandResult[bool]:
        return self._query(
            "is_business_day", lambda s: self._calendar_service(s).is_business_day(date)
        )

    def next_business_day(self, date: object) -> CommandResult[str]:
        return self._query(
            "next_business_day",
            lambda s: self._calendar_service(s).next_business_day(date),
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _calendar_service(self, session: Session) -> CalendarService:
        return CalendarService(
            session, self._canonicalizer, self._clock, weekend_days=self._weekend_days
        )

    def _expense_service(self, session: Session) -> ExpenseService:
        return ExpenseService(
            session,
            self._canonicalizer,
            self._calendar_service(session),
            self._clock,
            directory=self._directory,
        )

    def _named(self, work: Callable[[Session], Any]) -> Callable[[Session], Any]:
        """Attach directory display names to expenses in ``work``'s result."""

        def wrapped(session: Session) -> Any:
            return self._with_names(work(session))

        return wrapped

    def _with_names(self, value: Any) -> Any:
        if isinstance(value, ExpenseInfo):
            return dataclasses.replace(
                value, spender_name=self._directory.display_name(value.spender)
            )
        if isinstance(value, DailyExpenses):
            return dataclasses.replace(
                value, items=tuple(self._with_names(item) for item in value.items)
            )
        if isinstance(value, list):
            return [self._with_names(item) for item in value]
        return value

    def _write_on_date(
        self,
        command: str,
        date: object,
        work: Callable[[Session, str], T],
        lock_key: Callable[[str], str],
    ) -> CommandResult[T]:
        def run() -> CommandResult[T]:
            date_key = self._canonicalizer.canonicalize(date)
            with LogContext.bind(date_key=date_key):
                return self._execute(
                    lambda session: work(session, date_key),
                    lock_keys=self._write_lock_keys(lock_key(date_key)),
                )

        return self._guard(command, run)

    def _write(
        self,
        command: str,
        work: Callable[[Session], T],
        lock_key: Callable[[], str] | None = None,
    ) -> CommandResult[T]:
        def run() -> CommandResult[T]:
            key = lock_key() if lock_key is not None else None
            return self._execute(work, lock_keys=self._write_lock_keys(key))

        return self._guard(command, run)

    def _query(self, command: str, work: Callable[[Session], T]) -> CommandResult[T]:
        return self._guard(command, lambda: self._execute(work, lock_keys=()))

    def _query_on_date(
        self, command: str, date: object, work: Callable[[Session, str], T]
    ) -> CommandResult[T]:
        def run() -> CommandResult[T]:
            date_key = self._canonicalizer.canonicalize(date)
            return self._execute(
                lambda session: work(session, date_key), lock_keys=()
            )

        return self._guard(command, run)

    def _write_lock_keys(self, key: str | None) -> tuple[str, ...]:
        keys = (key,) if key is not None else ()
        if self._single_writer:
            keys += (_DATABASE_WRITE_KEY,)
        return keys

    def _guard(self, command: str, run: Callable[[], CommandResult[T]]) -> CommandResult[T]:
        """Bind log context and convert kernel errors raised by ``run``."""
        correlation_id = LogContext.get_all().get("correlation_id") or str(uuid4())
        with LogContext.bind(command=command, correlation_id=correlation_id):
            try:
                return run()
            except LedgerKernelError as exc:
                logger.warning(
                    "command_rejected",
                    extra={
                        "status": status_for(exc),
                        "error_code": exc.code,
                        "reason": str(exc),
                        "details": error_details(exc),
                    },
                )
                return CommandResult.failure(exc)
            except Exception:
                logger.error("command_failed", exc_info=True)
                raise

    def _execute(
        self,
        work: Callable[[Session], T],
        lock_keys: tuple[str, ...],
    ) -> CommandResult[T]:
        with ExitStack() as stack:
            for key in lock_keys:
                stack.enter_context(self._locks.hold(key, self._lock_timeout))
            with session_scope(self._session_factory) as session:
                value = work(session)
        logger.debug("command_completed")
        return CommandResult.success(value)
