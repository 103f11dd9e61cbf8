"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the command boundary, the CLI, tests) must react to a failure by
its kind, not by parsing its message. Every exception therefore carries:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA as attributes (not just a message string)

Example - RIGHT way:
    try:
        expense_service.move_expense(expense_id, "2024-03-09")
    except InvalidTargetDateError as e:
        respond(code=e.code, target_date=e.target_date)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- ValidationError
    |   +-- NonBusinessDayError
    |   +-- UnknownSpenderError
    |   +-- NoBusinessDayError
    |
    +-- InvalidDateError
    |
    +-- InvalidTargetDateError
    |
    +-- NotFoundError
    |   +-- ExpenseNotFoundError
    |   +-- HolidayNotFoundError
    |   +-- CashSnapshotNotFoundError
    |
    +-- ConcurrencyError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                  | When Raised
--------------|-----------------------|------------------------------------------
Validation    | VALIDATION_ERROR      | Malformed or rule-violating input
              | NON_BUSINESS_DAY      | Expense dated on a weekend or holiday
              | UNKNOWN_SPENDER       | Directory does not know the spender id
              | NO_BUSINESS_DAY       | Calendar has no business day to offer
--------------|-----------------------|------------------------------------------
Dates         | INVALID_DATE          | Input cannot be parsed into a date key
              | INVALID_TARGET_DATE   | Move target is not a business day
--------------|-----------------------|------------------------------------------
Lookup        | NOT_FOUND             | Generic missing record
              | EXPENSE_NOT_FOUND     | Expense id does not exist
              | HOLIDAY_NOT_FOUND     | Holiday id does not exist
              | CASH_SNAPSHOT_NOT_FOUND | No snapshot recorded for the date
--------------|-----------------------|------------------------------------------
Concurrency   | CONCURRENCY_ERROR     | Per-key write lock not acquired in time
--------------|-----------------------|------------------------------------------
Configuration | CONFIGURATION_ERROR   | Invalid ledger configuration value

===============================================================================
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Validation exceptions


class ValidationError(LedgerKernelError):
    """Input is malformed or violates a ledger rule."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class NonBusinessDayError(ValidationError):
    """An expense was dated on a weekend or a holiday."""

    code: str = "NON_BUSINESS_DAY"

    def __init__(self, date_key: str, field: str = "date"):
        self.date_key = date_key
        super().__init__(field, f"{date_key} is not a business day")


class UnknownSpenderError(ValidationError):
    """The spender directory does not recognise the spender id."""

    code: str = "UNKNOWN_SPENDER"

    def __init__(self, spender_type: str, spender_id: str):
        self.spender_type = spender_type
        self.spender_id = spender_id
        super().__init__(
            "spender_id", f"no {spender_type} with id {spender_id!r}"
        )


class NoBusinessDayError(ValidationError):
    """Every day searched after ``date_key`` is a weekend day or a holiday."""

    code: str = "NO_BUSINESS_DAY"

    def __init__(self, date_key: str, days_searched: int):
        self.date_key = date_key
        self.days_searched = days_searched
        super().__init__(
            "date", f"no business day within {days_searched} days after {date_key}"
        )


# Date exceptions


class InvalidDateError(LedgerKernelError):
    """Date input could not be converted into a canonical date key."""

    code: str = "INVALID_DATE"

    def __init__(self, value: object, reason: str | None = None):
        self.value = repr(value)
        self.reason = reason
        message = f"Cannot derive a date key from {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidTargetDateError(LedgerKernelError):
    """An expense move targeted a date that is not a business day."""

    code: str = "INVALID_TARGET_DATE"

    def __init__(self, expense_id: str, target_date: str):
        self.expense_id = expense_id
        self.target_date = target_date
        super().__init__(
            f"Cannot move expense {expense_id} to {target_date}: "
            "not a business day"
        )


# Lookup exceptions


class NotFoundError(LedgerKernelError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"


class ExpenseNotFoundError(NotFoundError):
    """Expense id does not exist."""

    code: str = "EXPENSE_NOT_FOUND"

    def __init__(self, expense_id: str):
        self.expense_id = expense_id
        super().__init__(f"Expense not found: {expense_id}")


class HolidayNotFoundError(NotFoundError):
    """Holiday id does not exist."""

    code: str = "HOLIDAY_NOT_FOUND"

    def __init__(self, holiday_id: str):
        self.holiday_id = holiday_id
        super().__init__(f"Holiday not found: {holiday_id}")


class CashSnapshotNotFoundError(NotFoundError):
    """No cash snapshot has been recorded for the date."""

    code: str = "CASH_SNAPSHOT_NOT_FOUND"

    def __init__(self, date_key: str):
        self.date_key = date_key
        super().__init__(f"No cash snapshot recorded for {date_key}")


# Concurrency exceptions


class ConcurrencyError(LedgerKernelError):
    """A per-key write lock could not be acquired in time."""

    code: str = "CONCURRENCY_ERROR"

    def __init__(self, lock_key: str, timeout: float):
        self.lock_key = lock_key
        self.timeout = timeout
        super().__init__(
            f"Could not acquire write lock {lock_key!r} within {timeout}s"
        )


# Configuration exceptions


class ConfigurationError(LedgerKernelError):
    """A ledger configuration value is invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid configuration for {setting}: {reason}")
