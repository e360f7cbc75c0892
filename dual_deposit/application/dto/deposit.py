from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction

from dual_deposit.domain.entities.deposit import DepositMode, TokenSide


@dataclass(frozen=True)
class DepositRequest:
    requester: str
    amount_a: Decimal
    amount_b: Decimal
    mode: DepositMode = DepositMode.DUAL


@dataclass(frozen=True)
class CorrectToRatioInput:
    amount: Decimal
    side: TokenSide


@dataclass(frozen=True)
class CorrectToRatioOutput:
    pair: str
    amount_a: Fraction
    amount_b: Fraction
