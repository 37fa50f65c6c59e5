"""Service dependency providers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from epr.core.container import get_container
from epr.domain.bills import BillService
from epr.domain.verifications import VerificationService
from epr.domain.wallets import WalletLedger

from .database import get_db_session


def get_verification_service() -> VerificationService:
    return get_container().verification_service


def get_wallet_ledger(db: AsyncSession = Depends(get_db_session)) -> WalletLedger:
    return WalletLedger.with_session(db, get_container().settings.pricing)


def get_bill_service(db: AsyncSession = Depends(get_db_session)) -> BillService:
    return BillService.with_session(db, get_container().settings.pricing)


__all__ = [
    "get_bill_service",
    "get_verification_service",
    "get_wallet_ledger",
]
