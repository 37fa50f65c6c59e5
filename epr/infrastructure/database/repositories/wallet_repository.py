"""SQLAlchemy implementation for the wallet ledger"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import desc, select, update
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from epr.db.models import User, WalletTransaction

_COUNTERS = (
    User.wallet_balance_cents,
    User.verification_count,
    User.free_verifications_earned,
)


class SqlWalletRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user(self, user_id: str) -> User | None:
        stmt = (
            select(User)
            .where(User.id == user_id, User.is_active.is_(True))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def lock_balance(self, user_id: str) -> int | None:
        stmt = (
            select(User.wallet_balance_cents)
            .where(User.id == user_id, User.is_active.is_(True))
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def debit(self, user_id: str, amount_cents: int, *, count_verification: bool) -> Row | None:
        values = {"wallet_balance_cents": User.wallet_balance_cents - amount_cents}
        if count_verification:
            values["verification_count"] = User.verification_count + 1
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.is_active.is_(True),
                User.wallet_balance_cents >= amount_cents,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
            .returning(*_COUNTERS)
        )
        result = await self.session.execute(stmt)
        return result.first()

    async def credit(self, user_id: str, amount_cents: int) -> Row | None:
        stmt = (
            update(User)
            .where(User.id == user_id, User.is_active.is_(True))
            .values(wallet_balance_cents=User.wallet_balance_cents + amount_cents)
            .execution_options(synchronize_session=False)
            .returning(*_COUNTERS)
        )
        result = await self.session.execute(stmt)
        return result.first()

    async def consume_loyalty_credit(self, user_id: str) -> Row | None:
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.is_active.is_(True),
                User.free_verifications_earned > 0,
            )
            .values(
                free_verifications_earned=User.free_verifications_earned - 1,
                verification_count=User.verification_count + 1,
            )
            .execution_options(synchronize_session=False)
            .returning(*_COUNTERS)
        )
        result = await self.session.execute(stmt)
        return result.first()

    async def grant_loyalty_credit(self, user_id: str) -> Row:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(free_verifications_earned=User.free_verifications_earned + 1)
            .execution_options(synchronize_session=False)
            .returning(*_COUNTERS)
        )
        result = await self.session.execute(stmt)
        return result.one()

    async def add_transaction(
        self,
        *,
        user_id: str,
        type: str,
        amount_cents: int,
        balance_before_cents: int,
        balance_after_cents: int,
        bill_id: str | None,
        reference: str | None,
        description: str | None,
    ) -> WalletTransaction:
        tx = WalletTransaction(
            user_id=user_id,
            type=type,
            amount_cents=amount_cents,
            balance_before_cents=balance_before_cents,
            balance_after_cents=balance_after_cents,
            bill_id=bill_id,
            reference=reference,
            description=description,
        )
        self.session.add(tx)
        await self.session.flush()
        return tx

    async def list_transactions(self, user_id: str, limit: int, offset: int) -> Sequence[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.user_id == user_id)
            .order_by(desc(WalletTransaction.created_at), desc(WalletTransaction.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
