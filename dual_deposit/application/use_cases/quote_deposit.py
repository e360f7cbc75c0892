from __future__ import annotations

import asyncio
from decimal import Decimal
from fractions import Fraction

from dual_deposit.application.dto.deposit import DepositRequest
from dual_deposit.application.ports.balance_source_port import BalanceSourcePort
from dual_deposit.application.ports.ratio_source_port import RatioSourcePort
from dual_deposit.domain.entities.balances import Balances
from dual_deposit.domain.entities.deposit import DepositQuote
from dual_deposit.domain.entities.ratio import ExchangeRatio
from dual_deposit.domain.services.shares import DEFAULT_REFERENCE_PRICE, issued_shares
from dual_deposit.domain.services.token_binding import DEFAULT_MAX_DEVIATION_PCT, bind_tokens


class QuoteDepositUseCase:
    """Binds a request against one ratio/balances snapshot and prices the shares.

    An invalid binding is returned, not raised, with zero estimated shares.
    """

    def __init__(
        self,
        *,
        ratio_port: RatioSourcePort,
        balance_port: BalanceSourcePort,
        pair: str,
        reference_price: Decimal = DEFAULT_REFERENCE_PRICE,
        max_deviation_pct: Decimal = DEFAULT_MAX_DEVIATION_PCT,
    ):
        self._ratio_port = ratio_port
        self._balance_port = balance_port
        self._pair = pair
        self._reference_price = reference_price
        self._max_deviation_pct = max_deviation_pct

    @property
    def pair(self) -> str:
        return self._pair

    async def execute(self, command: DepositRequest) -> DepositQuote:
        ratio, balances = await self._fetch_snapshot(command.requester)

        binding = bind_tokens(
            command.amount_a,
            command.amount_b,
            ratio,
            balances,
            mode=command.mode,
            max_deviation_pct=self._max_deviation_pct,
        )
        shares = Fraction(0)
        if binding.is_valid:
            shares = issued_shares(
                binding.bound_a,
                binding.bound_b,
                ratio,
                self._reference_price,
            )
        return DepositQuote(binding=binding, ratio=ratio, balances=balances, shares=shares)

    async def _fetch_snapshot(self, requester: str) -> tuple[ExchangeRatio, Balances]:
        ratio_task = asyncio.ensure_future(self._ratio_port.fetch_ratio(pair=self._pair))
        balance_task = asyncio.ensure_future(self._balance_port.fetch_balances(address=requester))
        try:
            ratio, balances = await asyncio.gather(ratio_task, balance_task)
        except Exception:
            # Uma falha encerra a outra consulta antes de propagar.
            for task in (ratio_task, balance_task):
                task.cancel()
            await asyncio.gather(ratio_task, balance_task, return_exceptions=True)
            raise
        return ratio, balances
