from __future__ import annotations

from dual_deposit.application.dto.wallet import WalletBalanceOutput
from dual_deposit.application.ports.balance_source_port import BalanceSourcePort
from dual_deposit.domain.exceptions import InvalidInputError
from dual_deposit.domain.services.deposit_mode import select_default_mode


class GetWalletBalanceUseCase:
    def __init__(self, *, balance_port: BalanceSourcePort):
        self._balance_port = balance_port

    async def execute(self, *, address: str) -> WalletBalanceOutput:
        address = address.strip()
        if not address:
            raise InvalidInputError("address is required.")
        balances = await self._balance_port.fetch_balances(address=address)
        return WalletBalanceOutput(
            address=address,
            balances=balances,
            default_mode=select_default_mode(balances),
        )
