"""SQLAlchemy implementation for user lookups.

Wallet balance and loyalty counters are not written here; they are
written only by :class:`~epr.infrastructure.database.repositories.wallet_repository.SqlWalletRepository`.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from epr.db.models import User


class SqlUserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: str) -> User | None:
        stmt = select(User).where(User.id == user_id, User.is_active.is_(True))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create(self, *, email: str, organization_name: str, role: str) -> User:
        user = User(
            email=email,
            organization_name=organization_name,
            role=role,
            wallet_balance_cents=0,
            verification_count=0,
            free_verifications_earned=0,
        )
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def deactivate(self, user_id: str) -> None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
