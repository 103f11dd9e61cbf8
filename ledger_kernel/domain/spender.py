"""
Spender -- who an expense is attributed to.

A closed tagged variant: ``SuperAdmin`` carries no id, ``Admin`` and ``Cso``
always carry one.  An admin or CSO without an id cannot be constructed, so
the "spender required but missing" case only exists at the parsing edge
(``spender_from_parts``), where it becomes a ValidationError.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from ledger_kernel.exceptions import ValidationError


class SpenderType(str, Enum):
    """Wire values for the spender kind."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    CSO = "cso"


@dataclass(frozen=True, slots=True)
class SuperAdmin:
    """The organization's super administrator; no directory id."""

    @property
    def spender_type(self) -> SpenderType:
        return SpenderType.SUPER_ADMIN

    @property
    def spender_id(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class Admin:
    """A branch administrator, identified in the staff directory."""

    spender_id: str

    def __post_init__(self):
        if not self.spender_id or not self.spender_id.strip():
            raise ValidationError("spender_id", "required for admin spenders")

    @property
    def spender_type(self) -> SpenderType:
        return SpenderType.ADMIN


@dataclass(frozen=True, slots=True)
class Cso:
    """A credit sales officer, identified in the officer directory."""

    spender_id: str

    def __post_init__(self):
        if not self.spender_id or not self.spender_id.strip():
            raise ValidationError("spender_id", "required for cso spenders")

    @property
    def spender_type(self) -> SpenderType:
        return SpenderType.CSO


Spender = SuperAdmin | Admin | Cso


def spender_from_parts(spender_type: str | SpenderType, spender_id: str | None = None) -> Spender:
    """
    Build a Spender from its wire form.

    Raises:
        ValidationError: unknown type, or admin/cso without an id.
    """
    try:
        kind = SpenderType(spender_type)
    except ValueError:
        allowed = ", ".join(t.value for t in SpenderType)
        raise ValidationError(
            "spender_type", f"{spender_type!r} is not one of {allowed}"
        ) from None

    if kind is SpenderType.SUPER_ADMIN:
        return SuperAdmin()

    spender_id = (spender_id or "").strip()
    if not spender_id:
        raise ValidationError("spender_id", f"required for {kind.value} spenders")
    if kind is SpenderType.ADMIN:
        return Admin(spender_id)
    return Cso(spender_id)


def spender_to_parts(spender: Spender) -> tuple[str, str | None]:
    """Flatten a Spender into ``(spender_type, spender_id)`` for storage."""
    return spender.spender_type.value, spender.spender_id


class SpenderDirectory(Protocol):
    """
    Staff/officer directory owned outside the ledger.

    Used only to confirm that an admin or CSO id exists and, for display,
    to resolve a name.  ``SuperAdmin`` is always accepted by callers
    without consulting the directory.
    """

    def exists(self, spender: Spender) -> bool: ...

    def display_name(self, spender: Spender) -> str | None: ...
