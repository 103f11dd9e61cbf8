"""
Structured JSON logging for the back-office ledger.

Every record under the ``ledger_kernel`` logger is written as one JSON line::

    {"ts": "...", "level": "INFO", "logger": "ledger_kernel.services.expense",
     "message": "expense_moved", "command": "move_expense",
     "correlation_id": "...", "expense_id": "...",
     "previous_date": "2024-03-04", "target_date": "2024-03-05"}

The command boundary binds the ledger fields (``command``,
``correlation_id``, ``expense_id``, ``date_key``) with ``LogContext.bind``;
they appear on every record emitted while that command runs.  Values passed
through ``extra`` go through ``log_value``: money stays an exact decimal
string, dates and ids become strings and DTOs become dicts.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO
from uuid import UUID

from ledger_kernel.exceptions import LedgerKernelError

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "log_value",
    "reset_logging",
]

ROOT_LOGGER = "ledger_kernel"

_context: ContextVar[Mapping[str, str]] = ContextVar("ledger_log_context", default={})


class LogContext:
    """Ledger fields attached to every record of the running command."""

    FIELDS = ("correlation_id", "actor_id", "command", "expense_id", "date_key")

    @classmethod
    def _with(cls, values: Mapping[str, object]) -> dict[str, str]:
        unknown = sorted(set(values) - set(cls.FIELDS))
        if unknown:
            raise TypeError(f"Unknown log context field(s): {', '.join(unknown)}")
        merged = dict(_context.get())
        merged.update({k: str(v) for k, v in values.items() if v is not None})
        return merged

    @classmethod
    def set(cls, **values: object) -> None:
        """Add fields to the current context.  None values are ignored."""
        _context.set(cls._with(values))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set({})

    @classmethod
    @contextmanager
    def bind(cls, **values: object) -> Iterator[None]:
        """Add fields for the duration of the block; the previous context is restored on exit."""
        token = _context.set(cls._with(values))
        try:
            yield
        finally:
            _context.reset(token)


def log_value(value: Any) -> Any:
    """JSON-ready form of a value logged through ``extra``."""
    if isinstance(value, Enum):
        return log_value(value.value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, LedgerKernelError):
        return {"code": value.code, "message": str(value)}
    if hasattr(value, "as_log_fields"):
        return log_value(value.as_log_fields())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: log_value(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if f.repr
        }
    if isinstance(value, Mapping):
        return {str(k): log_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [log_value(item) for item in value]
    return str(value)


# Attributes every LogRecord carries; anything else came from ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, ledger context, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())
        payload.update(
            (key, log_value(val))
            for key, val in vars(record).items()
            if key not in _RECORD_ATTRS
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = self._error(record.exc_info[1])
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload)

    @staticmethod
    def _error(exc: BaseException) -> dict[str, Any]:
        error: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
        if isinstance(exc, LedgerKernelError):
            error["code"] = exc.code
            error.update(
                (k, log_value(v)) for k, v in vars(exc).items() if not k.startswith("_")
            )
        return error


def get_logger(name: str) -> logging.Logger:
    """Logger under ``ledger_kernel``; an already-qualified name is kept as is."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


_installed: logging.Handler | None = None
_install_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """
    Send ``ledger_kernel`` records to ``handler`` (or a stream handler on
    ``stream``, stderr by default) as JSON lines.

    Only the first call takes effect until ``reset_logging``; later calls
    return the configured logger unchanged.
    """
    global _installed
    root = logging.getLogger(ROOT_LOGGER)
    with _install_lock:
        if _installed is not None:
            return root
        _installed = handler or logging.StreamHandler(stream or sys.stderr)
        _installed.setFormatter(StructuredFormatter())
        root.addHandler(_installed)
        root.setLevel(level)
        root.propagate = False
    return root


def reset_logging() -> None:
    """Remove the handler installed by ``configure_logging``.  Used by tests."""
    global _installed
    root = logging.getLogger(ROOT_LOGGER)
    with _install_lock:
        if _installed is not None:
            root.removeHandler(_installed)
            _installed = None
        root.setLevel(logging.WARNING)
        root.propagate = True
