"""
ExpenseService -- expense creation and the move transaction.

Responsibility:
    Validates and records new expenses, and relocates an existing expense
    to another business day while appending an entry to its move history.

Architecture position:
    Kernel > Services -- imperative shell.  Depends on CalendarService for
    business-day checks, on DateCanonicalizer for every date input, and on
    an optional SpenderDirectory for spender existence.

Invariants enforced:
    - An expense is only ever attributed to a business day, both when it is
      created and after every move.
    - All validation runs before the first write.  A rejected create or move
      leaves no row added and no attribute changed.
    - submitted_at is set once.  moved_at and the move history are written
      only by ``move_expense``.

Failure modes:
    - ValidationError (and its NonBusinessDayError / UnknownSpenderError
      subclasses) from ``create_expense``.
    - InvalidDateError: a date input cannot be canonicalized.
    - InvalidTargetDateError: move target is not a business day.
    - ExpenseNotFoundError: move or lookup of an unknown id.

Audit relevance:
    Every accepted create and move is logged (``expense_created``,
    ``expense_moved``) and every move is persisted as an ExpenseMove row
    with the previous and new date.
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dates import DateCanonicalizer
from ledger_kernel.domain.dtos import ExpenseDraft, ExpenseInfo
from ledger_kernel.domain.ids import coerce_uuid
from ledger_kernel.domain.money import parse_amount, require_positive
from ledger_kernel.domain.spender import (
    Admin,
    Cso,
    SpenderDirectory,
    SuperAdmin,
    spender_to_parts,
)
from ledger_kernel.exceptions import (
    ExpenseNotFoundError,
    InvalidTargetDateError,
    NonBusinessDayError,
    UnknownSpenderError,
    ValidationError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.expense import Expense
from ledger_kernel.models.expense_move import ExpenseMove
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.calendar_service import CalendarService

logger = get_logger("services.expense")


def _required_text(value: object, field: str, reason: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(field, f"must be text, got {type(value).__name__}")
    text = (value or "").strip()
    if not text:
        raise ValidationError(field, reason)
    return text


class ExpenseService(BaseService[Expense]):
    """
    Write side of the expense ledger.

    Contract:
        ``create_expense`` and ``move_expense`` either flush a complete,
        valid change or raise before touching the session.

    Non-goals:
        - Does NOT delete or edit expenses other than by moving them.
        - Does NOT store receipt images; ``receipt_img`` is an opaque
          reference produced by the image storage service.
    """

    def __init__(
        self,
        session: Session,
        canonicalizer: DateCanonicalizer,
        calendar: CalendarService,
        clock: Clock | None = None,
        directory: SpenderDirectory | None = None,
    ):
        super().__init__(session)
        self._canonicalizer = canonicalizer
        self._calendar = calendar
        self._clock = clock or SystemClock()
        self._directory = directory

    def create_expense(self, draft: ExpenseDraft) -> ExpenseInfo:
        """
        Validate ``draft`` and record it.

        Checks, in order: amount, purpose, receipt, spender, date, spender
        directory, business day.  The first failing check raises.

        Returns:
            The stored ExpenseInfo.

        Raises:
            ValidationError: non-positive or malformed amount, empty
                purpose, missing receipt, or missing spender.
            InvalidDateError: ``draft.date`` cannot be canonicalized.
            UnknownSpenderError: the directory does not know the spender.
            NonBusinessDayError: ``draft.date`` is a weekend or holiday.
        """
        amount = require_positive(parse_amount(draft.amount))

        purpose = _required_text(draft.purpose, "purpose", "cannot be empty")
        receipt_img = _required_text(
            draft.receipt_img, "receipt_img", "a receipt reference is required"
        )

        spender = draft.spender
        if not isinstance(spender, (SuperAdmin, Admin, Cso)):
            raise ValidationError("spender", "a spender is required")

        date_key = self._canonicalizer.canonicalize(draft.date)

        if (
            not isinstance(spender, SuperAdmin)
            and self._directory is not None
            and not self._directory.exists(spender)
        ):
            raise UnknownSpenderError(spender.spender_type.value, spender.spender_id)

        if not self._calendar.is_business_day(date_key):
            raise NonBusinessDayError(date_key)

        spender_type, spender_id = spender_to_parts(spender)
        now = self._clock.now()
        expense = Expense(
            amount=amount,
            purpose=purpose,
            date_key=date_key,
            spender_type=spender_type,
            spender_id=spender_id,
            receipt_img=receipt_img,
            submitted_at=now,
            moved_at=None,
            created_at=now,
            updated_at=now,
        )
        self.session.add(expense)
        self.session.flush()

        logger.info(
            "expense_created",
            extra={
                "expense_id": str(expense.id),
                "date_key": date_key,
                "amount": str(amount),
                "spender_type": spender_type,
            },
        )
        return expense.to_dto()

    def move_expense(self, expense_id: UUID | str, target_date: object) -> ExpenseInfo:
        """
        Re-attribute an expense to ``target_date``.

        Moving to the expense's current date is permitted; it still stamps
        ``moved_at`` and records a history entry.

        Returns:
            The updated ExpenseInfo.

        Raises:
            InvalidDateError: ``target_date`` cannot be canonicalized.
            InvalidTargetDateError: ``target_date`` is not a business day.
            ExpenseNotFoundError: no expense has this id.
        """
        target_key = self._canonicalizer.canonicalize(target_date)

        if not self._calendar.is_business_day(target_key):
            raise InvalidTargetDateError(str(expense_id), target_key)

        expense = self._get_for_update(expense_id)

        previous_key = expense.date_key
        sequence = self._move_count(expense.id) + 1
        now = self._clock.now()
        expense.date_key = target_key
        expense.moved_at = now
        expense.updated_at = now
        self.session.add(
            ExpenseMove(
                expense_id=expense.id,
                sequence=sequence,
                previous_date=previous_key,
                target_date=target_key,
                moved_at=now,
            )
        )
        self.session.flush()

        logger.info(
            "expense_moved",
            extra={
                "expense_id": str(expense.id),
                "previous_date": previous_key,
                "target_date": target_key,
                "move_sequence": sequence,
            },
        )
        return expense.to_dto()

    def get_expense(self, expense_id: UUID | str) -> ExpenseInfo:
        """
        Raises:
            ExpenseNotFoundError: no expense has this id.
        """
        expense = self.session.get(
            Expense, coerce_uuid(expense_id, ExpenseNotFoundError)
        )
        if expense is None:
            raise ExpenseNotFoundError(str(expense_id))
        return expense.to_dto()

    def _get_for_update(self, expense_id: UUID | str) -> Expense:
        expense = self.session.execute(
            select(Expense)
            .where(Expense.id == coerce_uuid(expense_id, ExpenseNotFoundError))
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if expense is None:
            raise ExpenseNotFoundError(str(expense_id))
        return expense

    def _move_count(self, expense_id: UUID) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(ExpenseMove)
            .where(ExpenseMove.expense_id == expense_id)
        ).scalar_one()
