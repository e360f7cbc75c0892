from __future__ import annotations

import httpx

from dual_deposit.domain.entities.balances import Balances
from dual_deposit.domain.exceptions import BalanceLookupError
from dual_deposit.infrastructure.clients.api_envelope import EnvelopeError, to_decimal, unwrap_envelope


def _normalize_address(value: str) -> str:
    return value.strip().lower()


class StaticBalanceSource:
    """Wallet balances from configuration, keyed by address with a `default` bucket."""

    def __init__(self, wallets: dict):
        self._wallets = {_normalize_address(key): value for key, value in wallets.items()}

    async def fetch_balances(self, *, address: str) -> Balances:
        for key in (_normalize_address(address), "default"):
            bucket = self._wallets.get(key)
            if not isinstance(bucket, dict):
                continue
            try:
                return Balances(
                    token_a=to_decimal(bucket.get("token_a"), field_name="token_a"),
                    token_b=to_decimal(bucket.get("token_b"), field_name="token_b"),
                )
            except EnvelopeError as exc:
                raise BalanceLookupError(f"Invalid configured balances for {address}: {exc}") from exc
        raise BalanceLookupError(f"No balances configured for {address}.")


class HttpBalanceClient:
    """Reads `GET {api_base}/wallet/balance?address=...` from the wallet service."""

    def __init__(
        self,
        api_base: str,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout_seconds
        self._transport = transport

    async def fetch_balances(self, *, address: str) -> Balances:
        url = f"{self.api_base}/wallet/balance"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params={"address": address})
                response.raise_for_status()
                payload = response.json()
            data = unwrap_envelope(payload)
            balances = Balances(
                token_a=to_decimal(data.get("tokenA"), field_name="tokenA"),
                token_b=to_decimal(data.get("tokenB"), field_name="tokenB"),
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise BalanceLookupError(f"Balance lookup failed for {address}: {exc}") from exc
        if balances.token_a < 0 or balances.token_b < 0:
            raise BalanceLookupError(f"Balance source returned negative amounts for {address}.")
        return balances
