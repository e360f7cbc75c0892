from __future__ import annotations

from dual_deposit.application.dto.pool_ratio import PoolRatioOutput
from dual_deposit.application.ports.ratio_source_port import RatioSourcePort


class GetPoolRatioUseCase:
    def __init__(self, *, ratio_port: RatioSourcePort, default_pair: str):
        self._ratio_port = ratio_port
        self._default_pair = default_pair

    async def execute(self, *, pair: str | None = None) -> PoolRatioOutput:
        resolved = (pair or self._default_pair).strip().upper()
        ratio = await self._ratio_port.fetch_ratio(pair=resolved)
        return PoolRatioOutput(pair=resolved, ratio=ratio)
