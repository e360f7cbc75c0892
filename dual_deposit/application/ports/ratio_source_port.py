from __future__ import annotations

from typing import Protocol

from dual_deposit.domain.entities.ratio import ExchangeRatio


class RatioSourcePort(Protocol):
    async def fetch_ratio(self, *, pair: str) -> ExchangeRatio:
        ...
