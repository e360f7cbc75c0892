from __future__ import annotations

import json
import os
from dataclasses import dataclass
from decimal import Decimal

from dotenv import load_dotenv


load_dotenv()


DEFAULT_POOL_RATIOS = {
    "SUI-USDC": {"numerator": "2", "denominator": "1"},
    "USDC-SUI": {"numerator": "1", "denominator": "2"},
}

DEFAULT_WALLET_BALANCES = {
    "default": {"token_a": "240.0", "token_b": "129.84"},
}


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _json(name: str, default: dict | None = None) -> dict:
    value = _env(name)
    if not value:
        return dict(default or {})
    return json.loads(value)


def _csv(name: str, default: str) -> list[str]:
    return [item.strip() for item in (_env(name, default) or "").split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    deposit_pair: str
    pool_ratios: dict
    ratio_api_base: str
    ratio_timeout_seconds: float
    ratio_refresh_interval_ms: int
    ratio_stale_tolerance_ms: int
    wallet_balances: dict
    balance_api_base: str
    balance_timeout_seconds: float
    settlement_api_base: str
    settlement_timeout_seconds: float
    settlement_max_retries: int
    settlement_retry_delay_ms: int
    share_reference_price: Decimal
    max_ratio_deviation_pct: Decimal
    cors_origins: list[str]
    log_level: str


def get_settings() -> Settings:
    return Settings(
        deposit_pair=(_env("DEPOSIT_PAIR", "SUI-USDC") or "SUI-USDC").strip().upper(),
        pool_ratios=_json("POOL_RATIOS", DEFAULT_POOL_RATIOS),
        ratio_api_base=_env("RATIO_API_BASE", ""),
        ratio_timeout_seconds=float(_env("RATIO_TIMEOUT_SECONDS", "10")),
        ratio_refresh_interval_ms=int(_env("RATIO_REFRESH_INTERVAL_MS", "30000")),
        ratio_stale_tolerance_ms=int(_env("RATIO_STALE_TOLERANCE_MS", "90000")),
        wallet_balances=_json("WALLET_BALANCES", DEFAULT_WALLET_BALANCES),
        balance_api_base=_env("BALANCE_API_BASE", ""),
        balance_timeout_seconds=float(_env("BALANCE_TIMEOUT_SECONDS", "10")),
        settlement_api_base=_env("SETTLEMENT_API_BASE", ""),
        settlement_timeout_seconds=float(_env("SETTLEMENT_TIMEOUT_SECONDS", "10")),
        settlement_max_retries=int(_env("SETTLEMENT_MAX_RETRIES", "3")),
        settlement_retry_delay_ms=int(_env("SETTLEMENT_RETRY_DELAY_MS", "200")),
        share_reference_price=Decimal(_env("SHARE_REFERENCE_PRICE", "1.05")),
        max_ratio_deviation_pct=Decimal(_env("MAX_RATIO_DEVIATION_PCT", "1")),
        cors_origins=_csv("CORS_ORIGINS", "*"),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
