from __future__ import annotations

from decimal import Decimal
from typing import Protocol


class SettlementPort(Protocol):
    async def submit_settlement(
        self,
        *,
        bound_a: Decimal,
        bound_b: Decimal,
        shares: Decimal,
    ) -> str:
        ...
