from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from enum import Enum

from dual_deposit.domain.entities.balances import Balances
from dual_deposit.domain.entities.ratio import ExchangeRatio


class DepositMode(str, Enum):
    DUAL = "dual"
    SINGLE = "single"


class TokenSide(str, Enum):
    A = "a"
    B = "b"


class BindingViolation(str, Enum):
    NOTHING_REQUESTED = "nothing_requested"
    NON_POSITIVE_AMOUNT = "non_positive_amount"
    INSUFFICIENT_BALANCE_A = "insufficient_balance_a"
    INSUFFICIENT_BALANCE_B = "insufficient_balance_b"
    RATIO_DEVIATION = "ratio_deviation"
    SINGLE_SIDE_REQUIRED = "single_side_required"


@dataclass(frozen=True)
class BindingResult:
    mode: DepositMode
    max_a: Fraction
    max_b: Fraction
    bound_a: Fraction
    bound_b: Fraction
    excess_a: Fraction
    excess_b: Fraction
    deviation_pct: Decimal
    violations: tuple[BindingViolation, ...]

    @property
    def is_valid(self) -> bool:
        return not self.violations


@dataclass(frozen=True)
class DepositQuote:
    binding: BindingResult
    ratio: ExchangeRatio
    balances: Balances
    shares: Fraction


@dataclass(frozen=True)
class DepositResult:
    bound_a: Decimal
    bound_b: Decimal
    excess_a: Decimal
    excess_b: Decimal
    shares: Decimal
    settlement_reference: str
