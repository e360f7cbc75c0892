from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class ExchangeRatio:
    """`numerator` units of token A per `denominator` units of token B."""

    numerator: Decimal
    denominator: Decimal
    updated_at: datetime
