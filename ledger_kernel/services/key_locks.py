"""
KeyLockRegistry -- in-process write locks keyed by ledger key.

Responsibility:
    Serializes concurrent writers that target the same logical record
    (one cash date, one expense) for the lifetime of a unit of work.

Architecture position:
    Kernel > Services -- infrastructure.  Held by the command boundary
    around the whole session scope, so the lock covers the transaction up
    to and including its commit.

Invariants enforced:
    - Two holders of the same key never overlap.
    - Holders of different keys never block each other.
    - An entry exists only while at least one thread holds or waits for
      its key; the registry does not grow with the number of dates seen.

Failure modes:
    - ConcurrencyError when ``timeout`` elapses before the lock is free.

Notes:
    This is the single-process half of the write serialization.  On
    PostgreSQL the services additionally take ``SELECT ... FOR UPDATE`` row
    locks, which serialize writers across processes.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ledger_kernel.exceptions import ConcurrencyError
from ledger_kernel.logging_config import get_logger

logger = get_logger("services.key_locks")


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class KeyLockRegistry:
    """Reference-counted map of ``key -> threading.Lock``."""

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    @staticmethod
    def cash_key(date_key: str) -> str:
        return f"cash:{date_key}"

    @staticmethod
    def expense_key(expense_id: object) -> str:
        return f"expense:{expense_id}"

    @contextmanager
    def hold(self, key: str, timeout: float | None = None) -> Iterator[None]:
        """
        Hold the lock for ``key`` for the duration of the block.

        Args:
            key: Lock key, e.g. ``KeyLockRegistry.cash_key("2024-03-01")``.
            timeout: Seconds to wait, or None to wait indefinitely.

        Raises:
            ConcurrencyError: The lock was not acquired within ``timeout``.
        """
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1

        acquired = entry.lock.acquire(timeout=-1 if timeout is None else timeout)
        try:
            if not acquired:
                logger.warning(
                    "key_lock_timeout",
                    extra={"lock_key": key, "timeout": timeout},
                )
                raise ConcurrencyError(key, timeout)
            yield
        finally:
            if acquired:
                entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]

    def active_keys(self) -> list[str]:
        """Keys currently held or awaited, for diagnostics."""
        with self._guard:
            return sorted(self._entries)
