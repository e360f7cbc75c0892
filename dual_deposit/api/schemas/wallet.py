from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from dual_deposit.domain.entities.deposit import DepositMode


class WalletBalanceResponse(BaseModel):
    address: str
    token_a: Decimal
    token_b: Decimal
    default_mode: DepositMode
