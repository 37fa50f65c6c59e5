"""Verification domain specific exceptions."""

from epr.domain.common.exceptions import EPRError


class VerificationError(EPRError):
    """Base class for verification domain errors."""


class SettlementTimeoutError(VerificationError):
    """Raised when a settlement exceeds its deadline; the transaction has been rolled back."""
