from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Balances:
    token_a: Decimal
    token_b: Decimal
