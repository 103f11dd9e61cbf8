"""
CommandResult -- typed outcome of every BackOfficeLedger call.

Kernel services raise typed exceptions; the command boundary turns each
``LedgerKernelError`` into a ``CommandResult`` so that no validation or
lookup failure crosses the boundary as an uncontrolled exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from ledger_kernel.exceptions import (
    ConcurrencyError,
    InvalidDateError,
    InvalidTargetDateError,
    LedgerKernelError,
    NotFoundError,
    ValidationError,
)

T = TypeVar("T")


class ResultStatus(str, Enum):
    """Outcome of a command or query."""

    OK = "ok"
    VALIDATION_FAILED = "validation_failed"
    INVALID_DATE = "invalid_date"
    INVALID_TARGET_DATE = "invalid_target_date"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    REJECTED = "rejected"


# Most specific first
_STATUS_BY_ERROR: tuple[tuple[type[LedgerKernelError], ResultStatus], ...] = (
    (ValidationError, ResultStatus.VALIDATION_FAILED),
    (InvalidDateError, ResultStatus.INVALID_DATE),
    (InvalidTargetDateError, ResultStatus.INVALID_TARGET_DATE),
    (NotFoundError, ResultStatus.NOT_FOUND),
    (ConcurrencyError, ResultStatus.CONFLICT),
)


def status_for(error: LedgerKernelError) -> ResultStatus:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return ResultStatus.REJECTED


def error_details(error: LedgerKernelError) -> dict[str, Any]:
    """Structured attributes of a kernel exception."""
    return {
        key: value
        for key, value in vars(error).items()
        if not key.startswith("_")
    }


@dataclass(frozen=True)
class CommandResult(Generic[T]):
    """
    Result of a BackOfficeLedger command or query.

    ``value`` is set only on success.  On failure ``error_code`` is the
    exception's machine-readable code and ``details`` its structured
    attributes (e.g. ``field``/``reason`` for validation failures).
    """

    status: ResultStatus
    value: T | None = None
    error_code: str | None = None
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    error: LedgerKernelError | None = field(default=None, repr=False, compare=False)

    @classmethod
    def success(cls, value: T) -> CommandResult[T]:
        return cls(status=ResultStatus.OK, value=value)

    @classmethod
    def failure(cls, error: LedgerKernelError) -> CommandResult[T]:
        return cls(
            status=status_for(error),
            error_code=error.code,
            message=str(error),
            details=error_details(error),
            error=error,
        )

    @property
    def is_success(self) -> bool:
        return self.status is ResultStatus.OK

    def unwrap(self) -> T:
        """The value, or the original kernel exception re-raised."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
