"""Amount parsing for ledger entries.  Decimal in, Decimal out; never float arithmetic."""

from decimal import Decimal, InvalidOperation

from ledger_kernel.db.types import MONEY_DECIMAL_PLACES
from ledger_kernel.exceptions import ValidationError


def parse_amount(value: object, field: str = "amount") -> Decimal:
    """
    Convert caller input into a finite Decimal.

    Floats are converted through ``str()`` so that ``0.1`` becomes
    ``Decimal("0.1")`` rather than its binary expansion.

    Raises:
        ValidationError: missing, non-numeric, non-finite, or more precise
            than the storage scale.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(field, "a numeric amount is required")

    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, (int, float)):
            amount = Decimal(str(value))
        elif isinstance(value, str) and value.strip():
            amount = Decimal(value.strip())
        else:
            raise ValidationError(field, "a numeric amount is required")
    except InvalidOperation:
        raise ValidationError(field, f"{value!r} is not a number") from None

    if not amount.is_finite():
        raise ValidationError(field, f"{value!r} is not a finite number")
    if amount.as_tuple().exponent < -MONEY_DECIMAL_PLACES:
        raise ValidationError(
            field, f"more than {MONEY_DECIMAL_PLACES} decimal places"
        )
    return amount


def require_positive(amount: Decimal, field: str = "amount") -> Decimal:
    if amount <= 0:
        raise ValidationError(field, "must be greater than zero")
    return amount


def require_non_negative(amount: Decimal, field: str = "amount") -> Decimal:
    if amount < 0:
        raise ValidationError(field, "cannot be negative")
    return amount
