from __future__ import annotations

from dataclasses import dataclass

from dual_deposit.domain.entities.balances import Balances
from dual_deposit.domain.entities.deposit import DepositMode


@dataclass(frozen=True)
class WalletBalanceOutput:
    address: str
    balances: Balances
    default_mode: DepositMode
