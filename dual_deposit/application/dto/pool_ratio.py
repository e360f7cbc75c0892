from __future__ import annotations

from dataclasses import dataclass

from dual_deposit.domain.entities.ratio import ExchangeRatio


@dataclass(frozen=True)
class PoolRatioOutput:
    pair: str
    ratio: ExchangeRatio
