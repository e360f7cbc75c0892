from __future__ import annotations

from dual_deposit.domain.entities.balances import Balances
from dual_deposit.domain.entities.deposit import DepositMode


def select_default_mode(balances: Balances) -> DepositMode:
    if balances.token_a > 0 and balances.token_b > 0:
        return DepositMode.DUAL
    return DepositMode.SINGLE
