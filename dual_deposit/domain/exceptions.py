from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dual_deposit.domain.entities.deposit import BindingResult, DepositQuote


class DomainError(Exception):
    """Base para erros de dominio."""


class InvalidInputError(DomainError):
    """Parametros invalidos (quantidades negativas, ratio ou preco nao positivos)."""


class ValidationFailedError(DomainError):
    """O binding calculado nao e valido para deposito."""

    def __init__(self, binding: BindingResult, message: str | None = None):
        self.binding = binding
        reasons = ", ".join(violation.value for violation in binding.violations)
        super().__init__(message or f"Deposit rejected: {reasons or 'invalid binding'}.")


class SettlementUnavailableError(DomainError):
    """Settlement externo falhou ou expirou depois do binding aprovado."""

    def __init__(self, message: str, quote: DepositQuote | None = None):
        self.quote = quote
        super().__init__(message)


class RatioUnavailableError(DomainError):
    """Nao existe ratio recente o suficiente para o par."""


class BalanceLookupError(DomainError):
    """Nao foi possivel obter os saldos da carteira."""
