from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, Request

from dual_deposit.application.ports.balance_source_port import BalanceSourcePort
from dual_deposit.application.ports.ratio_source_port import RatioSourcePort
from dual_deposit.application.ports.settlement_port import SettlementPort
from dual_deposit.application.use_cases.correct_to_ratio import CorrectToRatioUseCase
from dual_deposit.application.use_cases.get_pool_ratio import GetPoolRatioUseCase
from dual_deposit.application.use_cases.get_wallet_balance import GetWalletBalanceUseCase
from dual_deposit.application.use_cases.process_deposit import ProcessDepositUseCase
from dual_deposit.application.use_cases.quote_deposit import QuoteDepositUseCase
from dual_deposit.infrastructure.cache.ratio_cache import RatioCache
from dual_deposit.infrastructure.clients.balance_client import HttpBalanceClient, StaticBalanceSource
from dual_deposit.infrastructure.clients.ratio_client import HttpRatioClient, StaticRatioSource
from dual_deposit.infrastructure.clients.settlement_client import (
    HttpSettlementClient,
    SimulatedSettlementGateway,
)
from dual_deposit.shared.config import Settings, get_settings


def build_ratio_source(settings: Settings) -> RatioSourcePort:
    if settings.ratio_api_base:
        return HttpRatioClient(
            api_base=settings.ratio_api_base,
            timeout_seconds=settings.ratio_timeout_seconds,
        )
    return StaticRatioSource(settings.pool_ratios)


def tracked_pairs(settings: Settings) -> list[str]:
    pairs = [settings.deposit_pair]
    if not settings.ratio_api_base:
        pairs.extend(settings.pool_ratios.keys())
    return pairs


def build_ratio_cache(settings: Settings) -> RatioCache:
    return RatioCache(
        build_ratio_source(settings),
        pairs=tracked_pairs(settings),
        refresh_interval_ms=settings.ratio_refresh_interval_ms,
        stale_tolerance_ms=settings.ratio_stale_tolerance_ms,
    )


@lru_cache(maxsize=1)
def _get_balance_source() -> BalanceSourcePort:
    settings = get_settings()
    if settings.balance_api_base:
        return HttpBalanceClient(
            api_base=settings.balance_api_base,
            timeout_seconds=settings.balance_timeout_seconds,
        )
    return StaticBalanceSource(settings.wallet_balances)


@lru_cache(maxsize=1)
def _get_settlement_port() -> SettlementPort:
    settings = get_settings()
    if settings.settlement_api_base:
        return HttpSettlementClient(
            api_base=settings.settlement_api_base,
            timeout_seconds=settings.settlement_timeout_seconds,
        )
    return SimulatedSettlementGateway()


def get_ratio_cache(request: Request) -> RatioCache:
    cache = getattr(request.app.state, "ratio_cache", None)
    if cache is None:
        raise HTTPException(status_code=500, detail="Ratio cache is not running.")
    return cache


def get_pool_ratio_use_case(ratio_cache: RatioCache = Depends(get_ratio_cache)) -> GetPoolRatioUseCase:
    return GetPoolRatioUseCase(ratio_port=ratio_cache, default_pair=get_settings().deposit_pair)


def get_wallet_balance_use_case() -> GetWalletBalanceUseCase:
    return GetWalletBalanceUseCase(balance_port=_get_balance_source())


def get_correct_to_ratio_use_case(
    ratio_cache: RatioCache = Depends(get_ratio_cache),
) -> CorrectToRatioUseCase:
    return CorrectToRatioUseCase(ratio_port=ratio_cache, pair=get_settings().deposit_pair)


def get_quote_deposit_use_case(
    ratio_cache: RatioCache = Depends(get_ratio_cache),
) -> QuoteDepositUseCase:
    settings = get_settings()
    return QuoteDepositUseCase(
        ratio_port=ratio_cache,
        balance_port=_get_balance_source(),
        pair=settings.deposit_pair,
        reference_price=settings.share_reference_price,
        max_deviation_pct=settings.max_ratio_deviation_pct,
    )


def get_process_deposit_use_case(
    quote_use_case: QuoteDepositUseCase = Depends(get_quote_deposit_use_case),
) -> ProcessDepositUseCase:
    settings = get_settings()
    return ProcessDepositUseCase(
        quote_use_case=quote_use_case,
        settlement_port=_get_settlement_port(),
        settlement_max_retries=settings.settlement_max_retries,
        settlement_retry_delay_ms=settings.settlement_retry_delay_ms,
    )
