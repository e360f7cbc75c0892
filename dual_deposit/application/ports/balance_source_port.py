from __future__ import annotations

from typing import Protocol

from dual_deposit.domain.entities.balances import Balances


class BalanceSourcePort(Protocol):
    async def fetch_balances(self, *, address: str) -> Balances:
        ...
