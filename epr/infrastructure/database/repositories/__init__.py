"""SQLAlchemy-backed repository implementations."""

from .bill_repository import SqlBillRepository
from .user_repository import SqlUserRepository
from .verification_repository import SqlVerificationRepository
from .wallet_repository import SqlWalletRepository

__all__ = [
    "SqlBillRepository",
    "SqlUserRepository",
    "SqlVerificationRepository",
    "SqlWalletRepository",
]
