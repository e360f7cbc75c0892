from __future__ import annotations

from decimal import Decimal
import logging
import secrets

import httpx

from dual_deposit.domain.exceptions import SettlementUnavailableError
from dual_deposit.infrastructure.clients.api_envelope import unwrap_envelope


logger = logging.getLogger(__name__)


class SimulatedSettlementGateway:
    """Stand-in for the settlement service: returns a random `0x` transaction reference."""

    async def submit_settlement(
        self,
        *,
        bound_a: Decimal,
        bound_b: Decimal,
        shares: Decimal,
    ) -> str:
        reference = "0x" + secrets.token_hex(32)
        logger.info(
            "simulated_settlement: accepted bound_a=%s bound_b=%s shares=%s reference=%s",
            bound_a,
            bound_b,
            shares,
            reference,
        )
        return reference


class HttpSettlementClient:
    """Posts bound amounts to `POST {api_base}/deposits/submit` and returns its `txHash`."""

    def __init__(
        self,
        api_base: str,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout_seconds
        self._transport = transport

    async def submit_settlement(
        self,
        *,
        bound_a: Decimal,
        bound_b: Decimal,
        shares: Decimal,
    ) -> str:
        url = f"{self.api_base}/deposits/submit"
        body = {
            "tokenA": str(bound_a),
            "tokenB": str(bound_b),
            "shares": str(shares),
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=body)
                response.raise_for_status()
                payload = response.json()
            data = unwrap_envelope(payload)
        except (httpx.HTTPError, ValueError) as exc:
            raise SettlementUnavailableError(f"Settlement request failed: {exc}") from exc

        reference = data.get("txHash")
        if not isinstance(reference, str) or not reference:
            raise SettlementUnavailableError("Settlement response has no txHash.")
        return reference
