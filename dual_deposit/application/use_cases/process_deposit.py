from __future__ import annotations

import asyncio
import logging

from dual_deposit.application.dto.deposit import DepositRequest
from dual_deposit.application.ports.settlement_port import SettlementPort
from dual_deposit.application.use_cases.quote_deposit import QuoteDepositUseCase
from dual_deposit.domain.entities.deposit import DepositQuote, DepositResult
from dual_deposit.domain.exceptions import SettlementUnavailableError, ValidationFailedError
from dual_deposit.domain.services.exact_amounts import as_decimal


logger = logging.getLogger(__name__)


class ProcessDepositUseCase:
    def __init__(
        self,
        *,
        quote_use_case: QuoteDepositUseCase,
        settlement_port: SettlementPort,
        settlement_max_retries: int = 3,
        settlement_retry_delay_ms: int = 200,
    ):
        self._quote_use_case = quote_use_case
        self._settlement_port = settlement_port
        self._settlement_max_retries = settlement_max_retries
        self._settlement_retry_delay_ms = settlement_retry_delay_ms

    async def execute(self, command: DepositRequest) -> DepositResult:
        quote = await self._quote_use_case.execute(command)
        if not quote.binding.is_valid:
            logger.info(
                "process_deposit: rejected requester=%s mode=%s violations=%s",
                command.requester,
                quote.binding.mode.value,
                ",".join(violation.value for violation in quote.binding.violations),
            )
            raise ValidationFailedError(quote.binding)
        return await self.settle(quote)

    async def settle(self, quote: DepositQuote) -> DepositResult:
        """Request a settlement reference for an already validated quote.

        The first submission is followed by up to `settlement_max_retries` retries.
        Safe to call again after `SettlementUnavailableError` without re-binding.
        """
        if not quote.binding.is_valid:
            raise ValidationFailedError(quote.binding)

        binding = quote.binding
        bound_a = as_decimal(binding.bound_a)
        bound_b = as_decimal(binding.bound_b)
        shares = as_decimal(quote.shares)
        attempts = max(0, self._settlement_max_retries) + 1
        delay = self._settlement_retry_delay_ms / 1000
        last_exc: SettlementUnavailableError | None = None
        for attempt in range(1, attempts + 1):
            try:
                # Uma vez emitido, o settlement nao e cancelado se o chamador desistir.
                reference = await asyncio.shield(
                    self._settlement_port.submit_settlement(
                        bound_a=bound_a,
                        bound_b=bound_b,
                        shares=shares,
                    )
                )
            except SettlementUnavailableError as exc:
                last_exc = exc
                if attempt == attempts:
                    break
                logger.warning(
                    "process_deposit: settlement_retry attempt=%s/%s error=%s",
                    attempt,
                    attempts,
                    exc,
                )
                await asyncio.sleep(delay)
                delay *= 2
                continue

            logger.info(
                "process_deposit: settled reference=%s bound_a=%s bound_b=%s shares=%s",
                reference,
                bound_a,
                bound_b,
                shares,
            )
            return DepositResult(
                bound_a=bound_a,
                bound_b=bound_b,
                excess_a=as_decimal(binding.excess_a),
                excess_b=as_decimal(binding.excess_b),
                shares=shares,
                settlement_reference=reference,
            )

        raise SettlementUnavailableError(
            f"Settlement unavailable after {attempts} attempts: {last_exc}",
            quote=quote,
        ) from last_exc
