"""
Spender directories -- the ledger's view of the staff/officer directory.

The directory is owned outside the ledger.  These implementations satisfy
``ledger_kernel.domain.spender.SpenderDirectory`` for deployments without a
directory service (``OpenSpenderDirectory``) and for fixed rosters, tests
and the CLI (``StaticSpenderDirectory``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from ledger_kernel.domain.spender import (
    Admin,
    Cso,
    Spender,
    SpenderType,
    SuperAdmin,
)

SUPER_ADMIN_NAME = "Super Admin"


class OpenSpenderDirectory:
    """Accepts every admin and CSO id; knows no names."""

    def exists(self, spender: Spender) -> bool:
        return True

    def display_name(self, spender: Spender) -> str | None:
        if isinstance(spender, SuperAdmin):
            return SUPER_ADMIN_NAME
        return None


class StaticSpenderDirectory:
    """
    In-memory roster of admins and CSOs.

    Args:
        admins: ``{admin_id: display name}``.
        csos: ``{cso_id: display name}``.
    """

    def __init__(
        self,
        admins: Mapping[str, str] | None = None,
        csos: Mapping[str, str] | None = None,
    ):
        self._names: dict[tuple[SpenderType, str], str] = {}
        for admin_id, name in (admins or {}).items():
            self._names[(SpenderType.ADMIN, admin_id)] = name
        for cso_id, name in (csos or {}).items():
            self._names[(SpenderType.CSO, cso_id)] = name

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, str]]) -> StaticSpenderDirectory:
        """Build from ``{"type": "admin"|"cso", "id": ..., "name": ...}`` records."""
        admins: dict[str, str] = {}
        csos: dict[str, str] = {}
        for record in records:
            kind = SpenderType(record["type"])
            if kind is SpenderType.SUPER_ADMIN:
                continue
            target = admins if kind is SpenderType.ADMIN else csos
            target[str(record["id"])] = record.get("name") or str(record["id"])
        return cls(admins=admins, csos=csos)

    def exists(self, spender: Spender) -> bool:
        if isinstance(spender, SuperAdmin):
            return True
        return (spender.spender_type, spender.spender_id) in self._names

    def display_name(self, spender: Spender) -> str | None:
        if isinstance(spender, SuperAdmin):
            return SUPER_ADMIN_NAME
        if isinstance(spender, (Admin, Cso)):
            return self._names.get((spender.spender_type, spender.spender_id))
        return None
