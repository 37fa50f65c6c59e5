"""Repository protocol for bill storage."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from epr.db.models import Bill as BillModel


class BillRepository(Protocol):
    async def get_by_id(self, bill_id: str) -> BillModel | None:
        ...

    async def get_by_number(self, bill_number: str) -> BillModel | None:
        ...

    async def get_by_hash(self, data_hash: str) -> BillModel | None:
        ...

    async def list_numbers_with_prefix(self, prefix: str) -> list[str]:
        ...

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
    ) -> BillModel:
        ...

    async def soft_delete(self, bill_id: str, reason: str) -> BillModel | None:
        ...
