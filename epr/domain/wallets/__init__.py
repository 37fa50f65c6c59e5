"""Wallet domain exports"""

from .exceptions import InsufficientBalanceError, InvalidAmountError, WalletError, WalletNotFoundError
from .models import Settlement, TransactionType, WalletSnapshot, WalletTransactionRecord
from .service import WalletLedger

__all__ = [
    "InsufficientBalanceError",
    "InvalidAmountError",
    "Settlement",
    "TransactionType",
    "WalletError",
    "WalletLedger",
    "WalletNotFoundError",
    "WalletSnapshot",
    "WalletTransactionRecord",
]
