from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

from dual_deposit.domain.entities.balances import Balances
from dual_deposit.domain.entities.deposit import (
    BindingResult,
    BindingViolation,
    DepositMode,
    TokenSide,
)
from dual_deposit.domain.entities.ratio import ExchangeRatio
from dual_deposit.domain.exceptions import InvalidInputError
from dual_deposit.domain.services.exact_amounts import Amount, as_decimal, to_exact


DEFAULT_MAX_DEVIATION_PCT = Decimal("1")

_ZERO = Fraction(0)
_HUNDRED = Fraction(100)


def validate_ratio(ratio: ExchangeRatio) -> None:
    if not (ratio.numerator.is_finite() and ratio.denominator.is_finite()):
        raise InvalidInputError("Ratio numerator and denominator must be finite.")
    if ratio.numerator <= 0 or ratio.denominator <= 0:
        raise InvalidInputError("Ratio numerator and denominator must be positive.")


def _exact_ratio(ratio: ExchangeRatio) -> Fraction:
    validate_ratio(ratio)
    return Fraction(ratio.numerator) / Fraction(ratio.denominator)


def _non_negative(value: Amount, field_name: str) -> Fraction:
    exact = to_exact(value, field_name)
    if exact < 0:
        raise InvalidInputError(f"{field_name} must not be negative.")
    return exact


def _exact_deviation(bound_a: Fraction, bound_b: Fraction, expected: Fraction) -> Fraction | None:
    # None stands for an unbounded deviation (token A without token B).
    if bound_b == 0:
        return _ZERO if bound_a == 0 else None
    return abs(bound_a / bound_b - expected) / expected * _HUNDRED


def _deviation_pct(bound_a: Amount, bound_b: Amount, expected: Amount) -> Decimal:
    deviation = _exact_deviation(Fraction(bound_a), Fraction(bound_b), Fraction(expected))
    if deviation is None:
        return Decimal("Infinity")
    return as_decimal(deviation)


def bind_tokens(
    requested_a: Amount,
    requested_b: Amount,
    ratio: ExchangeRatio,
    balances: Balances,
    *,
    mode: DepositMode = DepositMode.DUAL,
    max_deviation_pct: Amount = DEFAULT_MAX_DEVIATION_PCT,
) -> BindingResult:
    """Bind the requested amounts to the pool ratio.

    Dual mode clamps each side by what the other side can match at the ratio:
    ``bound_a = min(requested_a, requested_b * r)`` and
    ``bound_b = min(requested_b, requested_a / r)`` with ``r = numerator / denominator``.
    The side above the ratio is always the one reduced, and whatever is not bound
    is reported as excess. Deviation is ``|bound_a / bound_b - r| / r * 100``.

    Amounts are computed as exact fractions, so input already at the ratio
    leaves no excess whatever the ratio's decimal expansion.

    Single mode deploys the one supplied side in full.

    Requesting nothing is not an error: the result is all zeros and invalid.
    """
    requested_a = _non_negative(requested_a, "requested_a")
    requested_b = _non_negative(requested_b, "requested_b")
    balance_a = _non_negative(balances.token_a, "balance_a")
    balance_b = _non_negative(balances.token_b, "balance_b")
    ratio_a_to_b = _exact_ratio(ratio)
    tolerance = to_exact(max_deviation_pct, "max_deviation_pct")
    if tolerance <= 0:
        raise InvalidInputError("max_deviation_pct must be positive.")

    max_a = requested_b * ratio_a_to_b
    max_b = requested_a / ratio_a_to_b

    if requested_a == 0 and requested_b == 0:
        return BindingResult(
            mode=mode,
            max_a=_ZERO,
            max_b=_ZERO,
            bound_a=_ZERO,
            bound_b=_ZERO,
            excess_a=_ZERO,
            excess_b=_ZERO,
            deviation_pct=Decimal("0"),
            violations=(BindingViolation.NOTHING_REQUESTED,),
        )

    if mode == DepositMode.SINGLE:
        return _bind_single(
            requested_a=requested_a,
            requested_b=requested_b,
            max_a=max_a,
            max_b=max_b,
            balance_a=balance_a,
            balance_b=balance_b,
        )

    bound_a = min(requested_a, max_a)
    bound_b = min(requested_b, max_b)

    violations: list[BindingViolation] = []
    if bound_a <= 0 or bound_b <= 0:
        violations.append(BindingViolation.NON_POSITIVE_AMOUNT)
    if bound_a > balance_a:
        violations.append(BindingViolation.INSUFFICIENT_BALANCE_A)
    if bound_b > balance_b:
        violations.append(BindingViolation.INSUFFICIENT_BALANCE_B)

    deviation = _exact_deviation(bound_a, bound_b, ratio_a_to_b)
    if deviation is None or not deviation < tolerance:
        violations.append(BindingViolation.RATIO_DEVIATION)

    return BindingResult(
        mode=mode,
        max_a=max_a,
        max_b=max_b,
        bound_a=bound_a,
        bound_b=bound_b,
        excess_a=requested_a - bound_a,
        excess_b=requested_b - bound_b,
        deviation_pct=_deviation_pct(bound_a, bound_b, ratio_a_to_b),
        violations=tuple(violations),
    )


def _bind_single(
    *,
    requested_a: Fraction,
    requested_b: Fraction,
    max_a: Fraction,
    max_b: Fraction,
    balance_a: Fraction,
    balance_b: Fraction,
) -> BindingResult:
    if requested_a > 0 and requested_b > 0:
        return BindingResult(
            mode=DepositMode.SINGLE,
            max_a=max_a,
            max_b=max_b,
            bound_a=_ZERO,
            bound_b=_ZERO,
            excess_a=requested_a,
            excess_b=requested_b,
            deviation_pct=Decimal("0"),
            violations=(BindingViolation.SINGLE_SIDE_REQUIRED,),
        )

    violations: list[BindingViolation] = []
    if requested_a > balance_a:
        violations.append(BindingViolation.INSUFFICIENT_BALANCE_A)
    if requested_b > balance_b:
        violations.append(BindingViolation.INSUFFICIENT_BALANCE_B)

    return BindingResult(
        mode=DepositMode.SINGLE,
        max_a=max_a,
        max_b=max_b,
        bound_a=requested_a,
        bound_b=requested_b,
        excess_a=_ZERO,
        excess_b=_ZERO,
        deviation_pct=Decimal("0"),
        violations=tuple(violations),
    )


def correct_to_ratio(
    amount: Amount,
    side: TokenSide,
    ratio: ExchangeRatio,
) -> tuple[Fraction, Fraction]:
    """Pair `amount` on `side` with the other side's amount at the exact ratio."""
    amount = to_exact(amount, "amount")
    ratio_a_to_b = _exact_ratio(ratio)
    if side == TokenSide.A:
        return amount, amount / ratio_a_to_b
    return amount * ratio_a_to_b, amount
