"""Bill issuance and issuer-side audit endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from epr.core.security import get_current_requester
from epr.domain.access import Requester
from epr.domain.bills import BillCreateInput, BillService
from epr.domain.common import EPRError
from epr.domain.verifications import VerificationService
from epr.interfaces.http.deps import get_bill_service, get_db_session, get_verification_service
from epr.interfaces.http.errors import to_http_exception
from epr.interfaces.http.schemas import (
    BillCreateRequest,
    BillResponse,
    BillVerificationLogEntry,
    BillVerificationLogResponse,
    IntegrityCheckRequest,
    IntegrityCheckResponse,
)

router = APIRouter()


@router.post("", response_model=BillResponse, status_code=status.HTTP_201_CREATED, summary="Issue a bill")
async def create_bill(
    payload: BillCreateRequest,
    requester: Requester = Depends(get_current_requester),
    service: BillService = Depends(get_bill_service),
    db: AsyncSession = Depends(get_db_session),
) -> BillResponse:
    try:
        bill = await service.create_bill(
            requester.id,
            BillCreateInput(
                bill_type=payload.bill_type,
                access_level=payload.access_level,
                amount=payload.amount,
                issue_date=payload.issue_date,
                bill_data=payload.bill_data,
                issuer_gstin=payload.issuer_gstin,
            ),
        )
    except EPRError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return BillResponse.model_validate(bill)


@router.post(
    "/{bill_number}/integrity",
    response_model=IntegrityCheckResponse,
    summary="Check a document against the stored bill hash",
)
async def check_integrity(
    bill_number: str,
    payload: IntegrityCheckRequest,
    _: Requester = Depends(get_current_requester),
    service: BillService = Depends(get_bill_service),
) -> IntegrityCheckResponse:
    try:
        intact = await service.verify_integrity(bill_number, payload.document)
    except EPRError as exc:
        raise to_http_exception(exc) from exc
    return IntegrityCheckResponse(bill_number=bill_number, intact=intact)


@router.get(
    "/{bill_id}/verifications",
    response_model=BillVerificationLogResponse,
    summary="List recent verifications of one of the requester's bills",
)
async def list_bill_verifications(
    bill_id: str,
    requester: Requester = Depends(get_current_requester),
    service: VerificationService = Depends(get_verification_service),
) -> BillVerificationLogResponse:
    try:
        logs = await service.get_bill_verifications(requester.id, bill_id)
    except EPRError as exc:
        raise to_http_exception(exc) from exc
    return BillVerificationLogResponse(
        verification_logs=[BillVerificationLogEntry.model_validate(log) for log in logs],
        total=len(logs),
    )
