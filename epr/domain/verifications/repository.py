"""Repository protocol for the verification audit trail."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from sqlalchemy import Row

from epr.db.models import Verification as VerificationModel


class VerificationAuditRepository(Protocol):
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
    ) -> VerificationModel:
        ...

    async def list_by_requester(self, requester_id: str, limit: int, offset: int) -> Sequence[VerificationModel]:
        ...

    async def list_by_bill(self, bill_id: str, limit: int = 50) -> Sequence[Row]:
        ...

    async def count_by_requester(self, requester_id: str) -> int:
        ...

    async def stats_by_requester(self, requester_id: str) -> dict[str, Any]:
        ...
