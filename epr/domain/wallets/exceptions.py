"""Wallet domain specific exceptions."""

from __future__ import annotations

from decimal import Decimal

from epr.domain.common.exceptions import EPRError


class WalletError(EPRError):
    """Base class for wallet domain errors."""


class WalletNotFoundError(WalletError):
    """Raised when no active user owns the requested wallet."""


class InvalidAmountError(WalletError):
    """Raised for negative debits or non-positive top-ups."""


class InsufficientBalanceError(WalletError):
    """Raised when a debit would take the balance below zero."""

    def __init__(self, required: Decimal, available: Decimal) -> None:
        self.required = required
        self.available = available
        super().__init__(
            f"insufficient wallet balance. Required: {required:.2f}, Available: {available:.2f}"
        )
