"""
CashService -- the cash-at-hand snapshot writer.

Responsibility:
    Upserts the single cash balance recorded for a date.

Architecture position:
    Kernel > Services -- imperative shell.  The command boundary holds the
    per-date KeyLockRegistry lock around each call; on PostgreSQL the row
    is additionally locked with ``SELECT ... FOR UPDATE``.

Invariants enforced:
    - At most one snapshot per date.  A write for a recorded date replaces
      amount and updated_at in place; it never appends.
    - amount >= 0.  No business-day restriction applies; cash may be
      counted on any day.

Failure modes:
    - ValidationError: negative or malformed amount.
    - InvalidDateError: date cannot be canonicalized.
    - IntegrityError on the insert path is absorbed: a concurrent writer
      created the row first, so the savepoint is rolled back and the
      existing row is updated instead.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dates import DateCanonicalizer
from ledger_kernel.domain.dtos import CashSnapshotInfo
from ledger_kernel.domain.money import parse_amount, require_non_negative
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.cash_snapshot import CashSnapshot
from ledger_kernel.services.base import BaseService

logger = get_logger("services.cash")


class CashService(BaseService[CashSnapshot]):
    """Last-write-wins store of one cash balance per date."""

    def __init__(
        self,
        session: Session,
        canonicalizer: DateCanonicalizer,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._canonicalizer = canonicalizer
        self._clock = clock or SystemClock()

    def set_cash_at_hand(self, date: object, amount: object) -> CashSnapshotInfo:
        """
        Record ``amount`` as the cash balance for ``date``.

        Returns:
            The stored snapshot.

        Raises:
            ValidationError: ``amount`` is negative or not a number.
            InvalidDateError: ``date`` cannot be canonicalized.
        """
        value = require_non_negative(parse_amount(amount))
        date_key = self._canonicalizer.canonicalize(date)
        now = self._clock.now()

        snapshot = self._locked_snapshot(date_key)
        created = False
        if snapshot is None:
            savepoint = self.session.begin_nested()
            try:
                snapshot = CashSnapshot(
                    date_key=date_key,
                    amount=value,
                    created_at=now,
                    updated_at=now,
                )
                self.session.add(snapshot)
                self.session.flush()
                savepoint.commit()
                created = True
            except IntegrityError:
                logger.debug(
                    "cash_snapshot_insert_race_retry",
                    extra={"date_key": date_key},
                )
                savepoint.rollback()
                self.session.expire_all()
                snapshot = self._locked_snapshot(date_key)
                if snapshot is None:
                    raise

        if not created:
            previous = snapshot.amount
            snapshot.amount = value
            snapshot.updated_at = now
            self.session.flush()
        else:
            previous = None

        logger.info(
            "cash_snapshot_upserted",
            extra={
                "date_key": date_key,
                "amount": str(value),
                "previous_amount": None if previous is None else str(previous),
                "inserted": created,
            },
        )
        return snapshot.to_dto()

    def _locked_snapshot(self, date_key: str) -> CashSnapshot | None:
        return self.session.execute(
            select(CashSnapshot)
            .where(CashSnapshot.date_key == date_key)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
