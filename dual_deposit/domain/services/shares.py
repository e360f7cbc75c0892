from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

from dual_deposit.domain.entities.ratio import ExchangeRatio
from dual_deposit.domain.exceptions import InvalidInputError
from dual_deposit.domain.services.exact_amounts import Amount, to_exact
from dual_deposit.domain.services.token_binding import validate_ratio


DEFAULT_REFERENCE_PRICE = Decimal("1.05")


def issued_shares(
    bound_a: Amount,
    bound_b: Amount,
    ratio: ExchangeRatio,
    reference_price: Amount = DEFAULT_REFERENCE_PRICE,
) -> Fraction:
    """Vault shares for a bound deposit, valued in token B at `reference_price`.

    No rounding is applied; display precision belongs to the caller.
    """
    validate_ratio(ratio)
    reference_price = to_exact(reference_price, "reference_price")
    if reference_price <= 0:
        raise InvalidInputError("reference_price must be positive.")
    bound_a = to_exact(bound_a, "bound_a")
    bound_b = to_exact(bound_b, "bound_b")
    if bound_a < 0 or bound_b < 0:
        raise InvalidInputError("Bound amounts must not be negative.")

    value_in_token_b = bound_a * Fraction(ratio.denominator) / Fraction(ratio.numerator) + bound_b
    return value_in_token_b / reference_price
