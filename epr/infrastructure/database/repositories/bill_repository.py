"""SQLAlchemy implementation for bill storage"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from epr.db.models import Bill


class SqlBillRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, bill_id: str) -> Bill | None:
        stmt = select(Bill).where(Bill.id == bill_id, Bill.is_deleted.is_(False))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_number(self, bill_number: str) -> Bill | None:
        stmt = select(Bill).where(Bill.bill_number == bill_number, Bill.is_deleted.is_(False))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_hash(self, data_hash: str) -> Bill | None:
        stmt = select(Bill).where(Bill.data_hash == data_hash)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_many(self, bill_ids: list[str]) -> dict[str, Bill]:
        if not bill_ids:
            return {}
        stmt = select(Bill).where(Bill.id.in_(bill_ids))
        result = await self.session.execute(stmt)
        return {bill.id: bill for bill in result.scalars().all()}

    async def list_numbers_with_prefix(self, prefix: str) -> list[str]:
        stmt = select(Bill.bill_number).where(Bill.bill_number.like(f"{prefix}%"))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self,
        *,
        bill_number: str,
        bill_type: str,
        access_level: str,
        issuer_id: str,
        issuer_name: str,
        bill_data: str,
        amount_cents: int,
        currency: str,
        issue_date: date,
        data_hash: str,
    ) -> Bill:
        bill = Bill(
            bill_number=bill_number,
            bill_type=bill_type,
            access_level=access_level,
            issuer_id=issuer_id,
            issuer_name=issuer_name,
            bill_data=bill_data,
            amount_cents=amount_cents,
            currency=currency,
            issue_date=issue_date,
            data_hash=data_hash,
            blockchain_status="pending",
            is_deleted=False,
        )
        self.session.add(bill)
        await self.session.flush()
        await self.session.refresh(bill)
        return bill

    async def soft_delete(self, bill_id: str, reason: str) -> Bill | None:
        stmt = (
            update(Bill)
            .where(Bill.id == bill_id, Bill.is_deleted.is_(False))
            .values(is_deleted=True, deletion_reason=reason, deleted_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session="fetch")
            .returning(Bill)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
