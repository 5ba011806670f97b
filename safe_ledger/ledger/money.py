from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from safe_ledger.errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round2(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_amount(value: object, field: str = "amount") -> Decimal:
    """Parse a money value without ever passing through a binary float."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} is not a valid amount", field=field) from None
    if not amount.is_finite():
        raise ValidationError(f"{field} is not a valid amount", field=field)
    if amount != amount.quantize(CENT, rounding=ROUND_HALF_UP):
        raise ValidationError(f"{field} has more than two decimal places", field=field)
    return round2(amount)


def positive_amount(value: object, field: str = "amount") -> Decimal:
    amount = to_amount(value, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero", field=field)
    return amount


def non_negative_amount(value: object, field: str = "amount") -> Decimal:
    amount = to_amount(value, field)
    if amount < 0:
        raise ValidationError(f"{field} must not be negative", field=field)
    return amount


def total(amounts: Iterable[Decimal]) -> Decimal:
    return round2(sum((Decimal(a) for a in amounts), ZERO))
