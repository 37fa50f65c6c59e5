"""Wallet ledger: the only code path allowed to move money or loyalty counters.

Every public method expects to run inside the caller's transaction. Balance
reads take a row lock (``SELECT ... FOR UPDATE``) and every write is a guarded
``UPDATE ... WHERE wallet_balance_cents >= :amount``, so two settlements for
the same user are linearised and neither can observe a pre-debit snapshot.
Raising out of any method leaves the caller to roll the transaction back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from epr.core.config import PricingSettings, get_settings
from epr.db.models import User as UserModel, WalletTransaction as WalletTransactionModel
from epr.domain.common.money import from_cents, to_cents
from epr.infrastructure.database.repositories.wallet_repository import SqlWalletRepository

from .exceptions import InsufficientBalanceError, InvalidAmountError, WalletNotFoundError
from .models import BalanceRow, Settlement, TransactionType, WalletSnapshot, WalletTransactionRecord
from .repository import WalletRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalletLedger:
    repository: WalletRepository
    loyalty_interval: int = 10
    currency: str = "INR"

    @classmethod
    def with_session(cls, session: AsyncSession, settings: PricingSettings | None = None) -> "WalletLedger":
        pricing = settings or get_settings().pricing
        return cls(SqlWalletRepository(session), pricing.loyalty_interval, pricing.currency)

    async def settle(
        self,
        user_id: str,
        fee: Decimal,
        *,
        bill_id: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> Settlement:
        """Charge a verification fee and advance the loyalty counters."""
        amount_cents = to_cents(fee)
        if amount_cents < 0:
            raise InvalidAmountError(f"fee must not be negative: {fee}")

        row = await self._debit(user_id, amount_cents, count_verification=True)
        row, earned = await self._award_loyalty_if_due(user_id, row)
        await self.repository.add_transaction(
            user_id=user_id,
            type=TransactionType.VERIFICATION.value,
            amount_cents=-amount_cents,
            balance_before_cents=row.balance_cents + amount_cents,
            balance_after_cents=row.balance_cents,
            bill_id=bill_id,
            reference=reference,
            description="Bill verification fee",
        )
        logger.info(
            "Settled verification for user %s: fee=%s balance=%s count=%s",
            user_id,
            from_cents(amount_cents),
            from_cents(row.balance_cents),
            row.verification_count,
        )
        return self._to_settlement(row, earned)

    async def redeem_loyalty_credit(
        self,
        user_id: str,
        *,
        bill_id: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> Settlement | None:
        """Consume one banked free verification, or return ``None`` if none is left."""
        row = await self.repository.consume_loyalty_credit(user_id)
        if row is None:
            return None
        row = BalanceRow.from_row(row)
        row, earned = await self._award_loyalty_if_due(user_id, row)
        await self.repository.add_transaction(
            user_id=user_id,
            type=TransactionType.LOYALTY_BONUS.value,
            amount_cents=0,
            balance_before_cents=row.balance_cents,
            balance_after_cents=row.balance_cents,
            bill_id=bill_id,
            reference=reference,
            description="Loyalty credit redeemed",
        )
        logger.info("User %s redeemed a loyalty credit (%s left)", user_id, row.free_verifications_earned)
        return self._to_settlement(row, earned)

    async def deduct(
        self,
        user_id: str,
        amount: Decimal,
        *,
        type: TransactionType = TransactionType.BILL_GENERATION,
        bill_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> WalletSnapshot:
        """Debit a non-verification fee under the same locking rules as :meth:`settle`."""
        amount_cents = to_cents(amount)
        if amount_cents < 0:
            raise InvalidAmountError(f"amount must not be negative: {amount}")

        row = await self._debit(user_id, amount_cents, count_verification=False)
        await self.repository.add_transaction(
            user_id=user_id,
            type=type.value,
            amount_cents=-amount_cents,
            balance_before_cents=row.balance_cents + amount_cents,
            balance_after_cents=row.balance_cents,
            bill_id=bill_id,
            reference=None,
            description=description,
        )
        return await self.get_snapshot(user_id)

    async def top_up(self, user_id: str, amount: Decimal, *, reference: Optional[str] = None) -> WalletSnapshot:
        # Payment gateway integration is not wired; the credit is applied immediately.
        amount_cents = to_cents(amount)
        if amount_cents <= 0:
            raise InvalidAmountError(f"top-up amount must be positive: {amount}")

        row = await self.repository.credit(user_id, amount_cents)
        if row is None:
            raise WalletNotFoundError(user_id)
        row = BalanceRow.from_row(row)
        await self.repository.add_transaction(
            user_id=user_id,
            type=TransactionType.WALLET_TOPUP.value,
            amount_cents=amount_cents,
            balance_before_cents=row.balance_cents - amount_cents,
            balance_after_cents=row.balance_cents,
            bill_id=None,
            reference=reference,
            description="Wallet top-up",
        )
        return await self.get_snapshot(user_id)

    async def get_snapshot(self, user_id: str) -> WalletSnapshot:
        user = await self.repository.get_user(user_id)
        if user is None:
            raise WalletNotFoundError(user_id)
        return self._to_snapshot(user, self.currency)

    async def list_transactions(self, user_id: str, limit: int = 20, offset: int = 0) -> list[WalletTransactionRecord]:
        rows = await self.repository.list_transactions(user_id, limit, offset)
        return [self._to_transaction(row) for row in rows]

    async def _debit(self, user_id: str, amount_cents: int, *, count_verification: bool) -> BalanceRow:
        available = await self.repository.lock_balance(user_id)
        if available is None:
            raise WalletNotFoundError(user_id)
        if available - amount_cents < 0:
            logger.info(
                "Rejected debit for user %s: required=%s available=%s",
                user_id,
                from_cents(amount_cents),
                from_cents(available),
            )
            raise InsufficientBalanceError(required=from_cents(amount_cents), available=from_cents(available))

        row = await self.repository.debit(user_id, amount_cents, count_verification=count_verification)
        if row is None:
            # guard tripped: the balance moved between the locked read and the write
            current = await self.repository.lock_balance(user_id)
            raise InsufficientBalanceError(
                required=from_cents(amount_cents),
                available=from_cents(current or 0),
            )
        return BalanceRow.from_row(row)

    async def _award_loyalty_if_due(self, user_id: str, row: BalanceRow) -> tuple[BalanceRow, bool]:
        if row.verification_count <= 0 or row.verification_count % self.loyalty_interval != 0:
            return row, False
        row = BalanceRow.from_row(await self.repository.grant_loyalty_credit(user_id))
        logger.info("User %s earned a free verification at count %s", user_id, row.verification_count)
        return row, True

    @staticmethod
    def _to_settlement(row: BalanceRow, earned: bool) -> Settlement:
        return Settlement(
            new_balance=from_cents(row.balance_cents),
            earned_loyalty_credit=earned,
            verification_count=row.verification_count,
            free_verifications_earned=row.free_verifications_earned,
        )

    @staticmethod
    def _to_snapshot(model: UserModel, currency: str) -> WalletSnapshot:
        return WalletSnapshot(
            user_id=model.id,
            balance=from_cents(model.wallet_balance_cents),
            currency=currency,
            verification_count=model.verification_count,
            free_verifications_earned=model.free_verifications_earned,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _to_transaction(model: WalletTransactionModel) -> WalletTransactionRecord:
        return WalletTransactionRecord(
            id=model.id,
            user_id=model.user_id,
            type=TransactionType(model.type),
            amount=from_cents(model.amount_cents),
            balance_before=from_cents(model.balance_before_cents),
            balance_after=from_cents(model.balance_after_cents),
            bill_id=model.bill_id,
            reference=model.reference,
            description=model.description,
            created_at=model.created_at,
        )
