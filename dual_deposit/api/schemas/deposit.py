from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from dual_deposit.domain.entities.deposit import DepositMode, TokenSide


class DepositRequestBody(BaseModel):
    requester: str = Field(..., min_length=1, description="Wallet address of the depositor.")
    amount_a: Decimal = Field(Decimal("0"), description="Requested amount of token A.")
    amount_b: Decimal = Field(Decimal("0"), description="Requested amount of token B.")
    mode: DepositMode = Field(DepositMode.DUAL, description="dual binds both tokens, single deploys one side.")


class BindingResponse(BaseModel):
    mode: DepositMode
    is_valid: bool
    violations: list[str]
    max_a: Decimal
    max_b: Decimal
    bound_a: Decimal
    bound_b: Decimal
    excess_a: Decimal
    excess_b: Decimal
    deviation_pct: Decimal


class DepositQuoteResponse(BaseModel):
    pair: str
    ratio_numerator: Decimal
    ratio_denominator: Decimal
    balance_a: Decimal
    balance_b: Decimal
    binding: BindingResponse
    estimated_shares: Decimal


class DepositResponse(BaseModel):
    bound_a: Decimal
    bound_b: Decimal
    excess_a: Decimal
    excess_b: Decimal
    shares: Decimal
    settlement_reference: str


class CorrectToRatioRequest(BaseModel):
    amount: Decimal = Field(..., description="Amount typed on `side`.")
    side: TokenSide = Field(..., description="Which token the amount refers to.")


class CorrectToRatioResponse(BaseModel):
    pair: str
    amount_a: Decimal
    amount_b: Decimal
