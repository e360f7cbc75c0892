from __future__ import annotations

from dual_deposit.application.dto.deposit import CorrectToRatioInput, CorrectToRatioOutput
from dual_deposit.application.ports.ratio_source_port import RatioSourcePort
from dual_deposit.domain.exceptions import InvalidInputError
from dual_deposit.domain.services.exact_amounts import to_exact
from dual_deposit.domain.services.token_binding import correct_to_ratio


class CorrectToRatioUseCase:
    def __init__(self, *, ratio_port: RatioSourcePort, pair: str):
        self._ratio_port = ratio_port
        self._pair = pair

    async def execute(self, command: CorrectToRatioInput) -> CorrectToRatioOutput:
        if to_exact(command.amount, "amount") < 0:
            raise InvalidInputError("amount must not be negative.")
        ratio = await self._ratio_port.fetch_ratio(pair=self._pair)
        amount_a, amount_b = correct_to_ratio(command.amount, command.side, ratio)
        return CorrectToRatioOutput(pair=self._pair, amount_a=amount_a, amount_b=amount_b)
