from __future__ import annotations

from datetime import datetime, timezone

import httpx

from dual_deposit.domain.entities.ratio import ExchangeRatio
from dual_deposit.domain.exceptions import RatioUnavailableError
from dual_deposit.infrastructure.clients.api_envelope import EnvelopeError, to_decimal, unwrap_envelope


def _normalize_pair(value: str) -> str:
    return value.strip().upper()


class StaticRatioSource:
    """Ratios from configuration, e.g. `{"SUI-USDC": {"numerator": "2", "denominator": "1"}}`."""

    def __init__(self, ratios: dict):
        self._ratios = {_normalize_pair(pair): value for pair, value in ratios.items()}

    async def fetch_ratio(self, *, pair: str) -> ExchangeRatio:
        entry = self._ratios.get(_normalize_pair(pair))
        if not isinstance(entry, dict):
            raise RatioUnavailableError(f"No configured ratio for {pair}.")
        try:
            numerator = to_decimal(entry.get("numerator"), field_name="numerator")
            denominator = to_decimal(entry.get("denominator"), field_name="denominator")
        except EnvelopeError as exc:
            raise RatioUnavailableError(f"Invalid configured ratio for {pair}: {exc}") from exc
        return ExchangeRatio(
            numerator=numerator,
            denominator=denominator,
            updated_at=datetime.now(timezone.utc),
        )


class HttpRatioClient:
    """Reads `GET {api_base}/pool/ratio?pair=...` from the pool data feed."""

    def __init__(
        self,
        api_base: str,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout_seconds
        self._transport = transport

    async def fetch_ratio(self, *, pair: str) -> ExchangeRatio:
        url = f"{self.api_base}/pool/ratio"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params={"pair": _normalize_pair(pair)})
                response.raise_for_status()
                payload = response.json()
            data = unwrap_envelope(payload)
            numerator = to_decimal(data.get("tokenA"), field_name="tokenA")
            denominator = to_decimal(data.get("tokenB"), field_name="tokenB")
        except (httpx.HTTPError, ValueError) as exc:
            raise RatioUnavailableError(f"Ratio lookup failed for {pair}: {exc}") from exc

        last_updated = data.get("lastUpdated")
        if isinstance(last_updated, (int, float)) and not isinstance(last_updated, bool):
            updated_at = datetime.fromtimestamp(last_updated / 1000, tz=timezone.utc)
        else:
            updated_at = datetime.now(timezone.utc)
        return ExchangeRatio(numerator=numerator, denominator=denominator, updated_at=updated_at)
