from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

from dual_deposit.domain.exceptions import InvalidInputError


Amount = Decimal | Fraction | int


def to_exact(value: Amount, field_name: str) -> Fraction:
    """Exact rational form of `value`; ratio math stays exact until display."""
    if isinstance(value, Decimal) and not value.is_finite():
        raise InvalidInputError(f"{field_name} must be a finite number.")
    return Fraction(value)


def as_decimal(value: Fraction | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(value.numerator) / Decimal(value.denominator)
