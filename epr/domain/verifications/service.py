"""Settlement orchestration for a single bill verification.

``verify_bill`` walks Lookup -> AccessResolved -> Priced -> Settled ->
Recorded -> Responded. Lookup and settlement share one transaction bounded by
a deadline; the audit record is written afterwards by the recorder in its own
transaction.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from epr.core.config import PricingSettings, Settings, VerificationSettings, get_settings
from epr.db.models import Bill as BillModel
from epr.domain.access import Disclosure, Role, disclosed_details, resolve_access, revealed_fields
from epr.domain.bills.exceptions import AccessDeniedError, BillNotFoundError
from epr.domain.common.exceptions import PersistenceError
from epr.domain.common.money import from_cents, quantize
from epr.domain.pricing import FeeQuote, PricingEngine
from epr.domain.wallets import InsufficientBalanceError, Settlement, WalletLedger
from epr.infrastructure.database.repositories.bill_repository import SqlBillRepository
from epr.infrastructure.database.repositories.verification_repository import SqlVerificationRepository

from .exceptions import SettlementTimeoutError
from .models import (
    BillVerificationLog,
    VerificationDraft,
    VerificationHistoryItem,
    VerificationResult,
    VerificationStats,
    VerificationStatus,
)
from .recorder import VerificationRecorder

logger = logging.getLogger(__name__)

MSG_VALID = "This bill is registered and verified in the EPR system."
MSG_NOT_FOUND = "This bill is not registered in the EPR system. It may be fake."
MSG_RESTRICTED = "This bill requires institutional verifier access to view full details."

REJECTED_RULE = "insufficient_balance"
PUBLIC_VERIFIER = "Public User"
BILL_LOG_LIMIT = 50


@dataclass(slots=True)
class _Outcome:
    result: VerificationResult
    draft: VerificationDraft


@dataclass(slots=True)
class VerificationService:
    session_factory: async_sessionmaker[AsyncSession]
    pricing: PricingEngine
    recorder: VerificationRecorder
    settings: VerificationSettings
    pricing_settings: PricingSettings

    @classmethod
    def from_factory(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
        recorder: VerificationRecorder | None = None,
    ) -> "VerificationService":
        settings = settings or get_settings()
        return cls(
            session_factory=session_factory,
            pricing=PricingEngine(settings.pricing),
            recorder=recorder or VerificationRecorder(session_factory),
            settings=settings.verification,
            pricing_settings=settings.pricing,
        )

    async def verify_bill(
        self,
        requester_id: Optional[str],
        bill_number: str,
        role: Role | str | None = Role.PUBLIC,
        *,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> VerificationResult:
        started = time.perf_counter()
        role = Role.parse(role)
        bill_number = bill_number.strip()

        try:
            outcome = await asyncio.wait_for(
                self._settle(requester_id, bill_number, role, started),
                timeout=self.settings.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "Verification of %s for requester %s exceeded %ss and was rolled back",
                bill_number,
                requester_id,
                self.settings.timeout_seconds,
            )
            raise SettlementTimeoutError(f"verification of {bill_number} timed out") from exc
        except InsufficientBalanceError:
            if requester_id is not None and self.settings.audit_rejected_attempts:
                await self.recorder.record(
                    self._rejected_draft(requester_id, bill_number, ip, user_agent, started)
                )
            raise
        except SQLAlchemyError as exc:
            logger.exception("Verification of %s failed at the storage layer", bill_number)
            raise PersistenceError(f"verification of {bill_number} failed") from exc

        draft = outcome.draft
        draft.requester_ip = ip
        draft.requester_user_agent = user_agent
        if draft.requester_id is not None or draft.bill_id is not None:
            await self.recorder.record(draft)
        return outcome.result

    async def _settle(
        self,
        requester_id: Optional[str],
        bill_number: str,
        role: Role,
        started: float,
    ) -> _Outcome:
        async with self.session_factory() as session:
            async with session.begin():
                bill = await SqlBillRepository(session).get_by_number(bill_number)
                ledger = WalletLedger.with_session(session, self.pricing_settings)
                if bill is None:
                    return await self._settle_not_found(ledger, requester_id, bill_number, started)
                return await self._settle_found(ledger, bill, requester_id, role, started)

    async def _settle_not_found(
        self,
        ledger: WalletLedger,
        requester_id: Optional[str],
        bill_number: str,
        started: float,
    ) -> _Outcome:
        fee = self.pricing.not_found_fee()
        settlement: Settlement | None = None
        if requester_id is not None:
            settlement = await ledger.settle(requester_id, fee, reference=bill_number)

        result = VerificationResult(
            success=True,
            bill_number=bill_number,
            status=VerificationStatus.NOT_FOUND,
            message=MSG_NOT_FOUND,
            fee=fee,
            charged=settlement is not None,
            pricing_rule="minimum_fee",
            wallet_balance=settlement.new_balance if settlement else None,
            loyalty_credit_earned=settlement.earned_loyalty_credit if settlement else False,
        )
        draft = VerificationDraft(
            bill_number=bill_number,
            status=VerificationStatus.NOT_FOUND,
            disclosure=Disclosure.NONE,
            amount_charged=fee if settlement else quantize(0),
            was_free=False,
            pricing_rule="minimum_fee",
            response_time_ms=_elapsed_ms(started),
            requester_id=requester_id,
        )
        return _Outcome(result=result, draft=draft)

    async def _settle_found(
        self,
        ledger: WalletLedger,
        bill: BillModel,
        requester_id: Optional[str],
        role: Role,
        started: float,
    ) -> _Outcome:
        disclosure = resolve_access(
            bill.access_level,
            role,
            requester_id=requester_id,
            issuer_id=bill.issuer_id,
        )

        settlement: Settlement | None = None
        if requester_id is not None:
            settlement = await ledger.redeem_loyalty_credit(
                requester_id, bill_id=bill.id, reference=bill.bill_number
            )
        amount = from_cents(bill.amount_cents)
        quote = self.pricing.compute_fee(amount, bill.access_level, settlement is not None)

        if requester_id is not None and not quote.was_free:
            settlement = await ledger.settle(
                requester_id, quote.fee, bill_id=bill.id, reference=bill.bill_number
            )

        result = self._build_result(bill, disclosure, quote, settlement)
        draft = VerificationDraft(
            bill_number=bill.bill_number,
            status=result.status,
            disclosure=disclosure,
            amount_charged=quote.fee if settlement is not None else quantize(0),
            was_free=quote.was_free,
            pricing_rule=quote.rule.value,
            response_time_ms=_elapsed_ms(started),
            bill_id=bill.id,
            requester_id=requester_id,
            data_revealed=revealed_fields(disclosure),
        )
        return _Outcome(result=result, draft=draft)

    def _build_result(
        self,
        bill: BillModel,
        disclosure: Disclosure,
        quote: FeeQuote,
        settlement: Settlement | None,
    ) -> VerificationResult:
        # Only whitelisted projections of the bill leave this method.
        details = disclosed_details(
            disclosure,
            bill_data=_load_payload(bill),
            amount=str(from_cents(bill.amount_cents)),
            currency=bill.currency,
        )
        restricted = disclosure is Disclosure.NONE
        return VerificationResult(
            success=True,
            bill_number=bill.bill_number,
            status=VerificationStatus.RESTRICTED if restricted else VerificationStatus.VALID,
            message=MSG_RESTRICTED if restricted else MSG_VALID,
            fee=quote.fee,
            charged=settlement is not None and not quote.was_free,
            was_free=quote.was_free,
            pricing_rule=quote.rule.value,
            issuer_name=bill.issuer_name,
            issue_date=None if restricted else bill.issue_date.isoformat(),
            bill_type=bill.bill_type,
            details=details,
            wallet_balance=settlement.new_balance if settlement else None,
            loyalty_credit_earned=settlement.earned_loyalty_credit if settlement else False,
        )

    def _rejected_draft(
        self,
        requester_id: str,
        bill_number: str,
        ip: Optional[str],
        user_agent: Optional[str],
        started: float,
    ) -> VerificationDraft:
        return VerificationDraft(
            bill_number=bill_number,
            status=VerificationStatus.INVALID,
            disclosure=Disclosure.NONE,
            amount_charged=quantize(0),
            was_free=False,
            pricing_rule=REJECTED_RULE,
            response_time_ms=_elapsed_ms(started),
            requester_id=requester_id,
            requester_ip=ip,
            requester_user_agent=user_agent,
            data_revealed={"fields_shown": [], "fields_hidden": ["all_details"], "rejected": REJECTED_RULE},
        )

    async def get_history(
        self,
        requester_id: str,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[VerificationHistoryItem], int]:
        page = max(page, 1)
        offset = (page - 1) * page_size
        try:
            async with self.session_factory() as session:
                audit = SqlVerificationRepository(session)
                rows = await audit.list_by_requester(requester_id, page_size, offset)
                total = await audit.count_by_requester(requester_id)
                bills = await SqlBillRepository(session).get_many(
                    [row.bill_id for row in rows if row.bill_id is not None]
                )
        except SQLAlchemyError as exc:
            logger.exception("Failed to load verification history for %s", requester_id)
            raise PersistenceError("failed to list verifications") from exc

        items = []
        for row in rows:
            bill = bills.get(row.bill_id) if row.bill_id else None
            items.append(
                VerificationHistoryItem(
                    id=row.id,
                    bill_number=row.bill_number,
                    issuer_name=bill.issuer_name if bill else "Unknown",
                    bill_type=bill.bill_type if bill else "Unknown",
                    verified_at=row.verified_at,
                    result=VerificationStatus(row.verification_status),
                    fee=from_cents(row.amount_charged_cents),
                    was_free=row.was_free,
                )
            )
        return items, total

    async def get_bill_verifications(self, requester_id: str, bill_id: str) -> list[BillVerificationLog]:
        """Latest verifications of a bill; only its issuer may read them."""
        try:
            async with self.session_factory() as session:
                bill = await SqlBillRepository(session).get_by_id(bill_id)
                if bill is None:
                    raise BillNotFoundError(bill_id)
                if bill.issuer_id != requester_id:
                    raise AccessDeniedError("only the issuer can view verification logs")
                rows = await SqlVerificationRepository(session).list_by_bill(bill_id, BILL_LOG_LIMIT)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load verification logs for bill %s", bill_id)
            raise PersistenceError("failed to list bill verifications") from exc

        logs = []
        for record, organization_name, role in rows:
            logs.append(
                BillVerificationLog(
                    id=record.id,
                    verified_by=organization_name or PUBLIC_VERIFIER,
                    verified_at=record.verified_at,
                    result=VerificationStatus(record.verification_status),
                    verifier_type=_verifier_type(record.requester_id, role),
                )
            )
        return logs

    async def get_stats(self, requester_id: str) -> VerificationStats:
        try:
            async with self.session_factory() as session:
                raw = await SqlVerificationRepository(session).stats_by_requester(requester_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load verification stats for %s", requester_id)
            raise PersistenceError("failed to compute verification stats") from exc

        total = raw["total"]
        return VerificationStats(
            total_verifications=total,
            total_spent=from_cents(raw["spent_cents"]),
            valid_count=raw["valid"],
            invalid_count=raw["invalid"],
            restricted_count=raw["restricted"],
            not_found_count=raw["not_found"],
            success_rate=(raw["valid"] / total * 100) if total else 0.0,
        )


def _load_payload(bill: BillModel) -> dict[str, Any]:
    try:
        payload = json.loads(bill.bill_data) if bill.bill_data else {}
    except json.JSONDecodeError:
        logger.warning("Bill %s has an unreadable payload", bill.bill_number)
        payload = {}
    return payload if isinstance(payload, dict) else {}


def _verifier_type(requester_id: Optional[str], role: Optional[str]) -> str:
    if requester_id is None:
        return "public"
    role = Role.parse(role)
    if role is Role.VERIFIER:
        return "government"
    if role is Role.PUBLIC:
        return "public"
    return "institutional"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
