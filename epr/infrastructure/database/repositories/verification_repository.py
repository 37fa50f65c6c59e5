"""SQLAlchemy implementation for the append-only verification audit trail"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import Row, case, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from epr.db.models import User, Verification


class SqlVerificationRepository:
    """Insert and read only; audit rows are never updated or deleted."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        *,
        bill_id: str | None,
        bill_number: str,
        requester_id: str | None,
        requester_ip: str | None,
        requester_user_agent: str | None,
        disclosure: str,
        data_revealed: str | None,
        amount_charged_cents: int,
        was_free: bool,
        pricing_rule_applied: str | None,
        verification_status: str,
        response_time_ms: int,
    ) -> Verification:
        record = Verification(
            bill_id=bill_id,
            bill_number=bill_number,
            requester_id=requester_id,
            requester_ip=requester_ip,
            requester_user_agent=requester_user_agent,
            disclosure=disclosure,
            data_revealed=data_revealed,
            amount_charged_cents=amount_charged_cents,
            was_free=was_free,
            pricing_rule_applied=pricing_rule_applied,
            verification_status=verification_status,
            response_time_ms=response_time_ms,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def get_by_id(self, record_id: str) -> Verification | None:
        stmt = select(Verification).where(Verification.id == record_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_by_requester(self, requester_id: str, limit: int, offset: int) -> Sequence[Verification]:
        stmt = (
            select(Verification)
            .where(Verification.requester_id == requester_id)
            .order_by(desc(Verification.verified_at), desc(Verification.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_by_bill(self, bill_id: str, limit: int = 50) -> Sequence[Row]:
        """Newest first, each row carrying the requester's organization and role when known."""
        stmt = (
            select(Verification, User.organization_name, User.role)
            .outerjoin(User, User.id == Verification.requester_id)
            .where(Verification.bill_id == bill_id)
            .order_by(desc(Verification.verified_at), desc(Verification.id))
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.all()

    async def count_by_requester(self, requester_id: str) -> int:
        stmt = select(func.count(Verification.id)).where(Verification.requester_id == requester_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def stats_by_requester(self, requester_id: str) -> dict[str, Any]:
        def _count(status: str):
            return func.coalesce(func.sum(case((Verification.verification_status == status, 1), else_=0)), 0)

        stmt = select(
            func.count(Verification.id).label("total"),
            func.coalesce(func.sum(Verification.amount_charged_cents), 0).label("spent_cents"),
            _count("valid").label("valid"),
            _count("invalid").label("invalid"),
            _count("restricted").label("restricted"),
            _count("not_found").label("not_found"),
        ).where(Verification.requester_id == requester_id)
        result = await self.session.execute(stmt)
        row = result.one()
        return {
            "total": int(row.total),
            "spent_cents": int(row.spent_cents),
            "valid": int(row.valid),
            "invalid": int(row.invalid),
            "restricted": int(row.restricted),
            "not_found": int(row.not_found),
        }
