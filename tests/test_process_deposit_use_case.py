from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from dual_deposit.application.dto.deposit import CorrectToRatioInput, DepositRequest
from dual_deposit.application.use_cases.correct_to_ratio import CorrectToRatioUseCase
from dual_deposit.application.use_cases.get_pool_ratio import GetPoolRatioUseCase
from dual_deposit.application.use_cases.get_wallet_balance import GetWalletBalanceUseCase
from dual_deposit.application.use_cases.process_deposit import ProcessDepositUseCase
from dual_deposit.application.use_cases.quote_deposit import QuoteDepositUseCase
from dual_deposit.domain.entities.balances import Balances
from dual_deposit.domain.entities.deposit import BindingViolation, DepositMode, TokenSide
from dual_deposit.domain.entities.ratio import ExchangeRatio
from dual_deposit.domain.exceptions import (
    InvalidInputError,
    RatioUnavailableError,
    SettlementUnavailableError,
    ValidationFailedError,
)
from dual_deposit.domain.services.exact_amounts import as_decimal


class FakeRatioPort:
    def __init__(self, ratio: ExchangeRatio):
        self._ratio = ratio
        self.calls: list[str] = []

    async def fetch_ratio(self, *, pair: str) -> ExchangeRatio:
        self.calls.append(pair)
        return self._ratio


class FakeBalancePort:
    def __init__(self, balances: Balances):
        self._balances = balances
        self.calls: list[str] = []

    async def fetch_balances(self, *, address: str) -> Balances:
        self.calls.append(address)
        return self._balances


class FakeSettlementPort:
    def __init__(self, *, failures: int = 0, reference: str = "0xabc"):
        self.failures = failures
        self.reference = reference
        self.calls: list[tuple[Decimal, Decimal, Decimal]] = []

    async def submit_settlement(self, *, bound_a: Decimal, bound_b: Decimal, shares: Decimal) -> str:
        self.calls.append((bound_a, bound_b, shares))
        if self.failures > 0:
            self.failures -= 1
            raise SettlementUnavailableError("settlement timed out")
        return self.reference


RATIO_2_1 = ExchangeRatio(
    numerator=Decimal("2"),
    denominator=Decimal("1"),
    updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
)
WALLET = Balances(token_a=Decimal("240.0"), token_b=Decimal("129.84"))


def _quote_use_case(
    ratio_port: FakeRatioPort | None = None,
    balance_port: FakeBalancePort | None = None,
) -> QuoteDepositUseCase:
    return QuoteDepositUseCase(
        ratio_port=ratio_port or FakeRatioPort(RATIO_2_1),
        balance_port=balance_port or FakeBalancePort(WALLET),
        pair="SUI-USDC",
        reference_price=Decimal("1.05"),
    )


def _process_use_case(
    settlement_port: FakeSettlementPort,
    *,
    ratio_port: FakeRatioPort | None = None,
    balance_port: FakeBalancePort | None = None,
    max_retries: int = 3,
) -> ProcessDepositUseCase:
    return ProcessDepositUseCase(
        quote_use_case=_quote_use_case(ratio_port, balance_port),
        settlement_port=settlement_port,
        settlement_max_retries=max_retries,
        settlement_retry_delay_ms=0,
    )


def _request(amount_a: str, amount_b: str, mode: DepositMode = DepositMode.DUAL) -> DepositRequest:
    return DepositRequest(
        requester="0x1234567890123456789012345678901234567890",
        amount_a=Decimal(amount_a),
        amount_b=Decimal(amount_b),
        mode=mode,
    )


def test_process_settles_bound_amounts_and_issues_shares():
    settlement = FakeSettlementPort(reference="0xfeed")
    ratio_port = FakeRatioPort(RATIO_2_1)
    balance_port = FakeBalancePort(WALLET)
    use_case = _process_use_case(settlement, ratio_port=ratio_port, balance_port=balance_port)

    result = asyncio.run(use_case.execute(_request("100", "50")))

    assert result.bound_a == Decimal("100")
    assert result.bound_b == Decimal("50")
    assert result.excess_a == Decimal("0")
    assert result.excess_b == Decimal("0")
    assert result.shares == Decimal("100") / Decimal("1.05")
    assert result.settlement_reference == "0xfeed"
    assert settlement.calls == [(Decimal("100"), Decimal("50"), result.shares)]
    assert ratio_port.calls == ["SUI-USDC"]
    assert balance_port.calls == ["0x1234567890123456789012345678901234567890"]


def test_process_reports_excess_of_imbalanced_request():
    settlement = FakeSettlementPort()
    use_case = _process_use_case(settlement)

    result = asyncio.run(use_case.execute(_request("80", "60")))

    assert result.bound_a == Decimal("80")
    assert result.bound_b == Decimal("40")
    assert result.excess_b == Decimal("20")
    assert result.shares == Decimal("80") / Decimal("1.05")


def test_process_rejects_invalid_binding_with_binding_context():
    settlement = FakeSettlementPort()
    use_case = _process_use_case(settlement)

    with pytest.raises(ValidationFailedError) as exc_info:
        asyncio.run(use_case.execute(_request("300", "200")))

    binding = exc_info.value.binding
    assert binding.bound_a == Decimal("300")
    assert binding.bound_b == Decimal("150")
    assert BindingViolation.INSUFFICIENT_BALANCE_A in binding.violations
    assert BindingViolation.INSUFFICIENT_BALANCE_B in binding.violations
    assert settlement.calls == []


def test_process_rejects_empty_request_without_settlement():
    settlement = FakeSettlementPort()
    use_case = _process_use_case(settlement)

    with pytest.raises(ValidationFailedError) as exc_info:
        asyncio.run(use_case.execute(_request("0", "0")))

    assert exc_info.value.binding.violations == (BindingViolation.NOTHING_REQUESTED,)
    assert settlement.calls == []


def test_process_propagates_invalid_input():
    use_case = _process_use_case(FakeSettlementPort())

    with pytest.raises(InvalidInputError):
        asyncio.run(use_case.execute(_request("-1", "5")))


def test_process_retries_settlement_until_it_succeeds():
    settlement = FakeSettlementPort(failures=2)
    use_case = _process_use_case(settlement, max_retries=3)

    result = asyncio.run(use_case.execute(_request("100", "50")))

    assert result.settlement_reference == "0xabc"
    assert len(settlement.calls) == 3


def test_retry_setting_counts_retries_after_first_submission():
    settlement = FakeSettlementPort(failures=2)
    use_case = _process_use_case(settlement, max_retries=2)

    result = asyncio.run(use_case.execute(_request("100", "50")))

    assert result.settlement_reference == "0xabc"
    assert len(settlement.calls) == 3


def test_zero_retries_submits_once():
    settlement = FakeSettlementPort(failures=1)
    use_case = _process_use_case(settlement, max_retries=0)

    with pytest.raises(SettlementUnavailableError):
        asyncio.run(use_case.execute(_request("100", "50")))

    assert len(settlement.calls) == 1


def test_settlement_failure_carries_quote_for_retry_without_revalidation():
    settlement = FakeSettlementPort(failures=5)
    ratio_port = FakeRatioPort(RATIO_2_1)
    balance_port = FakeBalancePort(WALLET)
    use_case = _process_use_case(
        settlement,
        ratio_port=ratio_port,
        balance_port=balance_port,
        max_retries=2,
    )

    with pytest.raises(SettlementUnavailableError) as exc_info:
        asyncio.run(use_case.execute(_request("100", "50")))

    quote = exc_info.value.quote
    assert quote is not None
    assert quote.binding.bound_a == Decimal("100")
    assert len(settlement.calls) == 3

    settlement.failures = 0
    result = asyncio.run(use_case.settle(quote))

    assert result.settlement_reference == "0xabc"
    assert result.shares == as_decimal(quote.shares)
    assert len(ratio_port.calls) == 1
    assert len(balance_port.calls) == 1


def test_settle_refuses_invalid_quote():
    use_case = _process_use_case(FakeSettlementPort())
    quote = asyncio.run(_quote_use_case().execute(_request("300", "200")))

    with pytest.raises(ValidationFailedError):
        asyncio.run(use_case.settle(quote))


def test_single_mode_deposit_deploys_one_side():
    settlement = FakeSettlementPort()
    use_case = _process_use_case(settlement)

    result = asyncio.run(use_case.execute(_request("0", "100", mode=DepositMode.SINGLE)))

    assert result.bound_a == Decimal("0")
    assert result.bound_b == Decimal("100")
    assert result.shares == Decimal("100") / Decimal("1.05")


def test_quote_returns_invalid_binding_with_zero_shares():
    quote = asyncio.run(_quote_use_case().execute(_request("300", "200")))

    assert quote.binding.is_valid is False
    assert quote.shares == Decimal("0")
    assert quote.ratio == RATIO_2_1
    assert quote.balances == WALLET


def test_quote_uses_configured_tolerance():
    use_case = QuoteDepositUseCase(
        ratio_port=FakeRatioPort(RATIO_2_1),
        balance_port=FakeBalancePort(WALLET),
        pair="SUI-USDC",
        max_deviation_pct=Decimal("-1"),
    )

    with pytest.raises(InvalidInputError):
        asyncio.run(use_case.execute(_request("100", "50")))


def test_correct_to_ratio_use_case_pairs_amount_at_current_ratio():
    use_case = CorrectToRatioUseCase(ratio_port=FakeRatioPort(RATIO_2_1), pair="SUI-USDC")

    result = asyncio.run(use_case.execute(CorrectToRatioInput(amount=Decimal("30"), side=TokenSide.B)))

    assert result.pair == "SUI-USDC"
    assert result.amount_a == Decimal("60")
    assert result.amount_b == Decimal("30")


def test_correct_to_ratio_use_case_rejects_negative_amount():
    use_case = CorrectToRatioUseCase(ratio_port=FakeRatioPort(RATIO_2_1), pair="SUI-USDC")

    with pytest.raises(InvalidInputError):
        asyncio.run(use_case.execute(CorrectToRatioInput(amount=Decimal("-3"), side=TokenSide.A)))


def test_wallet_balance_use_case_selects_default_mode():
    use_case = GetWalletBalanceUseCase(
        balance_port=FakeBalancePort(Balances(token_a=Decimal("240.0"), token_b=Decimal("0"))),
    )

    result = asyncio.run(use_case.execute(address=" 0xabc "))

    assert result.address == "0xabc"
    assert result.default_mode == DepositMode.SINGLE


def test_wallet_balance_use_case_requires_address():
    use_case = GetWalletBalanceUseCase(balance_port=FakeBalancePort(WALLET))

    with pytest.raises(InvalidInputError):
        asyncio.run(use_case.execute(address="  "))


def test_pool_ratio_use_case_normalizes_pair():
    ratio_port = FakeRatioPort(RATIO_2_1)
    use_case = GetPoolRatioUseCase(ratio_port=ratio_port, default_pair="SUI-USDC")

    default = asyncio.run(use_case.execute())
    explicit = asyncio.run(use_case.execute(pair=" usdc-sui "))

    assert default.pair == "SUI-USDC"
    assert explicit.pair == "USDC-SUI"
    assert ratio_port.calls == ["SUI-USDC", "USDC-SUI"]


def test_deposit_at_non_terminating_ratio_settles_without_excess():
    ratio = ExchangeRatio(
        numerator=Decimal("1"),
        denominator=Decimal("3"),
        updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    settlement = FakeSettlementPort()
    use_case = _process_use_case(settlement, ratio_port=FakeRatioPort(ratio))

    result = asyncio.run(use_case.execute(_request("10", "30")))

    assert result.bound_a == Decimal("10")
    assert result.bound_b == Decimal("30")
    assert result.excess_a == Decimal("0")
    assert result.excess_b == Decimal("0")
    assert isinstance(settlement.calls[0][2], Decimal)


class FailingRatioPort:
    async def fetch_ratio(self, *, pair: str) -> ExchangeRatio:
        raise RatioUnavailableError(f"No ratio available for {pair}.")


class SlowBalancePort:
    def __init__(self):
        self.cancelled = False

    async def fetch_balances(self, *, address: str) -> Balances:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return WALLET


def test_quote_cancels_balance_lookup_when_ratio_fails():
    balance_port = SlowBalancePort()
    use_case = QuoteDepositUseCase(
        ratio_port=FailingRatioPort(),
        balance_port=balance_port,
        pair="SUI-USDC",
    )

    async def scenario() -> None:
        with pytest.raises(RatioUnavailableError):
            await use_case.execute(_request("100", "50"))
        assert balance_port.cancelled is True

    asyncio.run(scenario())
