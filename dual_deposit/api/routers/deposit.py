from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from dual_deposit.api.deps import (
    get_correct_to_ratio_use_case,
    get_process_deposit_use_case,
    get_quote_deposit_use_case,
)
from dual_deposit.api.schemas.deposit import (
    BindingResponse,
    CorrectToRatioRequest,
    CorrectToRatioResponse,
    DepositQuoteResponse,
    DepositRequestBody,
    DepositResponse,
)
from dual_deposit.application.dto.deposit import CorrectToRatioInput, DepositRequest
from dual_deposit.application.use_cases.correct_to_ratio import CorrectToRatioUseCase
from dual_deposit.application.use_cases.process_deposit import ProcessDepositUseCase
from dual_deposit.application.use_cases.quote_deposit import QuoteDepositUseCase
from dual_deposit.domain.entities.deposit import BindingResult
from dual_deposit.domain.exceptions import (
    BalanceLookupError,
    InvalidInputError,
    RatioUnavailableError,
    SettlementUnavailableError,
    ValidationFailedError,
)
from dual_deposit.domain.services.exact_amounts import as_decimal

router = APIRouter()


def _binding_response(binding: BindingResult) -> BindingResponse:
    return BindingResponse(
        mode=binding.mode,
        is_valid=binding.is_valid,
        violations=[violation.value for violation in binding.violations],
        max_a=as_decimal(binding.max_a),
        max_b=as_decimal(binding.max_b),
        bound_a=as_decimal(binding.bound_a),
        bound_b=as_decimal(binding.bound_b),
        excess_a=as_decimal(binding.excess_a),
        excess_b=as_decimal(binding.excess_b),
        deviation_pct=binding.deviation_pct,
    )


def _to_request(req: DepositRequestBody) -> DepositRequest:
    return DepositRequest(
        requester=req.requester,
        amount_a=req.amount_a,
        amount_b=req.amount_b,
        mode=req.mode,
    )


@router.post("/v1/deposit/quote", response_model=DepositQuoteResponse)
async def quote_deposit(
    req: DepositRequestBody,
    use_case: QuoteDepositUseCase = Depends(get_quote_deposit_use_case),
):
    try:
        quote = await use_case.execute(_to_request(req))
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BalanceLookupError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except RatioUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return DepositQuoteResponse(
        pair=use_case.pair,
        ratio_numerator=quote.ratio.numerator,
        ratio_denominator=quote.ratio.denominator,
        balance_a=quote.balances.token_a,
        balance_b=quote.balances.token_b,
        binding=_binding_response(quote.binding),
        estimated_shares=as_decimal(quote.shares),
    )


@router.post("/v1/deposit/correct", response_model=CorrectToRatioResponse)
async def correct_deposit_to_ratio(
    req: CorrectToRatioRequest,
    use_case: CorrectToRatioUseCase = Depends(get_correct_to_ratio_use_case),
):
    try:
        result = await use_case.execute(CorrectToRatioInput(amount=req.amount, side=req.side))
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RatioUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return CorrectToRatioResponse(
        pair=result.pair,
        amount_a=as_decimal(result.amount_a),
        amount_b=as_decimal(result.amount_b),
    )


@router.post("/v1/deposit", response_model=DepositResponse)
async def process_deposit(
    req: DepositRequestBody,
    use_case: ProcessDepositUseCase = Depends(get_process_deposit_use_case),
):
    try:
        result = await use_case.execute(_to_request(req))
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ValidationFailedError as exc:
        raise HTTPException(
            status_code=422,
            detail={
                "message": str(exc),
                "binding": _binding_response(exc.binding).model_dump(mode="json"),
            },
        ) from exc
    except BalanceLookupError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except (RatioUnavailableError, SettlementUnavailableError) as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return DepositResponse(
        bound_a=result.bound_a,
        bound_b=result.bound_b,
        excess_a=result.excess_a,
        excess_b=result.excess_b,
        shares=result.shares,
        settlement_reference=result.settlement_reference,
    )
