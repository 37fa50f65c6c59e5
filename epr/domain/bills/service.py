"""Bill issuance, retrieval and integrity checks"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from epr.core.config import PricingSettings, get_settings
from epr.db.models import Bill as BillModel
from epr.domain.access import AccessLevel, Disclosure, Role, disclosed_details, resolve_access
from epr.domain.access.resolver import is_institution
from epr.domain.common.money import from_cents, to_cents
from epr.domain.wallets import TransactionType, WalletLedger
from epr.infrastructure.database.repositories.bill_repository import SqlBillRepository
from epr.infrastructure.database.repositories.user_repository import SqlUserRepository

from .exceptions import AccessDeniedError, BillNotFoundError, DuplicateBillError
from .hashing import generate_bill_hash, verify_bill_hash
from .models import Bill, BillCreateInput, BillType, BlockchainStatus
from .numbering import format_bill_number, parse_sequence, period_prefix
from .repository import BillRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BillService:
    repository: BillRepository
    users: SqlUserRepository
    ledger: WalletLedger
    pricing: PricingSettings

    @classmethod
    def with_session(cls, session: AsyncSession, settings: PricingSettings | None = None) -> "BillService":
        pricing = settings or get_settings().pricing
        return cls(
            repository=SqlBillRepository(session),
            users=SqlUserRepository(session),
            ledger=WalletLedger.with_session(session, pricing),
            pricing=pricing,
        )

    async def create_bill(self, issuer_id: str, payload: BillCreateInput) -> Bill:
        """Issue a bill and charge the issuer the generation fee.

        Runs in the caller's transaction: a failed deduction leaves no bill behind.
        """
        issuer = await self.users.get_by_id(issuer_id)
        if issuer is None:
            raise AccessDeniedError("issuer account not found")
        role = Role.parse(issuer.role)
        if not (is_institution(role) or role is Role.MASTER_ADMIN):
            raise AccessDeniedError("only institutions can issue bills")

        now = datetime.now(timezone.utc)
        document = self._with_metadata(payload, issuer_name=issuer.organization_name, issued_at=now)
        data_hash = generate_bill_hash(document)
        if await self.repository.get_by_hash(data_hash) is not None:
            raise DuplicateBillError("a bill with identical content already exists")

        bill_number = await self._next_bill_number(payload.bill_type, now)
        try:
            model = await self.repository.create(
                bill_number=bill_number,
                bill_type=BillType(payload.bill_type).value,
                access_level=AccessLevel(payload.access_level).value,
                issuer_id=issuer.id,
                issuer_name=issuer.organization_name,
                bill_data=json.dumps(document, sort_keys=True, ensure_ascii=False),
                amount_cents=to_cents(payload.amount),
                currency=self.pricing.currency,
                issue_date=payload.issue_date,
                data_hash=data_hash,
            )
        except IntegrityError as exc:
            # Another request took this number or content between the checks and the insert.
            logger.warning("Bill insert for issuer %s conflicted on %s", issuer.id, bill_number)
            raise DuplicateBillError(
                f"bill {bill_number} conflicts with a concurrently issued bill, retry the request"
            ) from exc
        await self.ledger.deduct(
            issuer.id,
            self.pricing.bill_generation_fee,
            type=TransactionType.BILL_GENERATION,
            bill_id=model.id,
            description=f"Bill generation fee for {bill_number}",
        )
        logger.info("Issued bill %s for issuer %s", bill_number, issuer.id)
        return self._to_domain(model)

    async def get_bill(self, requester_id: Optional[str], role: Role | str | None, bill_id: str) -> Bill:
        model = await self.repository.get_by_id(bill_id)
        if model is None:
            raise BillNotFoundError(bill_id)
        disclosure = resolve_access(
            model.access_level,
            role,
            requester_id=requester_id,
            issuer_id=model.issuer_id,
        )
        if disclosure is Disclosure.NONE:
            raise AccessDeniedError("insufficient access to view this bill")
        bill = self._to_domain(model)
        if disclosure is Disclosure.FULL:
            return bill
        limited = disclosed_details(
            disclosure,
            bill_data=bill.bill_data,
            amount=str(bill.amount),
            currency=bill.currency,
        )
        return replace(bill, bill_data=limited or {})

    async def verify_integrity(self, bill_number: str, document: dict[str, Any]) -> bool:
        model = await self.repository.get_by_number(bill_number)
        if model is None:
            raise BillNotFoundError(bill_number)
        return verify_bill_hash(document, model.data_hash)

    async def soft_delete(self, issuer_id: str, bill_id: str, reason: str) -> Bill:
        model = await self.repository.get_by_id(bill_id)
        if model is None:
            raise BillNotFoundError(bill_id)
        if model.issuer_id != issuer_id:
            raise AccessDeniedError("only the issuer can delete a bill")
        deleted = await self.repository.soft_delete(bill_id, reason)
        if deleted is None:
            raise BillNotFoundError(bill_id)
        logger.info("Bill %s soft-deleted by %s: %s", deleted.bill_number, issuer_id, reason)
        return self._to_domain(deleted)

    async def _next_bill_number(self, bill_type: BillType, when: datetime) -> str:
        prefix = period_prefix(bill_type, when)
        numbers = await self.repository.list_numbers_with_prefix(prefix)
        sequences = [seq for seq in (parse_sequence(number, prefix) for number in numbers) if seq is not None]
        return format_bill_number(prefix, max(sequences, default=0) + 1)

    @staticmethod
    def _with_metadata(payload: BillCreateInput, *, issuer_name: str, issued_at: datetime) -> dict[str, Any]:
        document = dict(payload.bill_data)
        metadata = {
            "bill_type": BillType(payload.bill_type).value,
            "access_level": AccessLevel(payload.access_level).value,
            "issuer_name": issuer_name,
            "issue_date": payload.issue_date.isoformat(),
            "amount": str(payload.amount),
            "generated_at": issued_at.isoformat(),
        }
        if payload.issuer_gstin:
            metadata["issuer_gstin"] = payload.issuer_gstin
        document["_metadata"] = metadata
        return document

    @staticmethod
    def _to_domain(model: BillModel) -> Bill:
        return Bill(
            id=model.id,
            bill_number=model.bill_number,
            bill_type=BillType(model.bill_type),
            access_level=AccessLevel(model.access_level),
            issuer_id=model.issuer_id,
            issuer_name=model.issuer_name,
            bill_data=json.loads(model.bill_data) if model.bill_data else {},
            amount=from_cents(model.amount_cents),
            currency=model.currency,
            issue_date=model.issue_date,
            data_hash=model.data_hash,
            blockchain_status=BlockchainStatus(model.blockchain_status),
            is_deleted=model.is_deleted,
            created_at=model.created_at,
        )
