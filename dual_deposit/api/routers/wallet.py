from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from dual_deposit.api.deps import get_wallet_balance_use_case
from dual_deposit.api.schemas.wallet import WalletBalanceResponse
from dual_deposit.application.use_cases.get_wallet_balance import GetWalletBalanceUseCase
from dual_deposit.domain.exceptions import BalanceLookupError, InvalidInputError

router = APIRouter()


@router.get("/v1/wallet/balance", response_model=WalletBalanceResponse)
async def get_wallet_balance(
    address: str,
    use_case: GetWalletBalanceUseCase = Depends(get_wallet_balance_use_case),
):
    try:
        result = await use_case.execute(address=address)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BalanceLookupError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return WalletBalanceResponse(
        address=result.address,
        token_a=result.balances.token_a,
        token_b=result.balances.token_b,
        default_mode=result.default_mode,
    )
