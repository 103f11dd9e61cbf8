"""Record id parsing shared by services and selectors."""

from collections.abc import Callable
from uuid import UUID

from ledger_kernel.exceptions import NotFoundError


def coerce_uuid(value: UUID | str, not_found: Callable[[str], NotFoundError]) -> UUID:
    """
    Parse a record id supplied by a caller.

    A string that is not a UUID cannot name any stored record, so it is
    reported through ``not_found`` rather than as a validation failure.
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise not_found(str(value)) from None
