"""Verification domain exports"""

from .exceptions import SettlementTimeoutError, VerificationError
from .models import (
    BillVerificationLog,
    VerificationDraft,
    VerificationHistoryItem,
    VerificationResult,
    VerificationStats,
    VerificationStatus,
)
from .recorder import VerificationRecorder
from .service import VerificationService

__all__ = [
    "BillVerificationLog",
    "SettlementTimeoutError",
    "VerificationDraft",
    "VerificationError",
    "VerificationHistoryItem",
    "VerificationRecorder",
    "VerificationResult",
    "VerificationService",
    "VerificationStats",
    "VerificationStatus",
]
