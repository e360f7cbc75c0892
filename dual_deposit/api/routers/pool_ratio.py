from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from dual_deposit.api.deps import get_pool_ratio_use_case
from dual_deposit.api.schemas.pool_ratio import PoolRatioResponse
from dual_deposit.application.use_cases.get_pool_ratio import GetPoolRatioUseCase
from dual_deposit.domain.exceptions import RatioUnavailableError

router = APIRouter()


@router.get("/v1/pool/ratio", response_model=PoolRatioResponse)
async def get_pool_ratio(
    pair: str | None = None,
    use_case: GetPoolRatioUseCase = Depends(get_pool_ratio_use_case),
):
    try:
        result = await use_case.execute(pair=pair)
    except RatioUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return PoolRatioResponse(
        pair=result.pair,
        numerator=result.ratio.numerator,
        denominator=result.ratio.denominator,
        updated_at=result.ratio.updated_at,
    )
