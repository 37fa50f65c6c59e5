"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .services import get_bill_service, get_verification_service, get_wallet_ledger

__all__ = [
    "get_bill_service",
    "get_db_session",
    "get_verification_service",
    "get_wallet_ledger",
]
