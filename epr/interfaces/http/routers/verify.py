"""Bill verification endpoints."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from epr.core.security import get_current_requester, get_optional_requester
from epr.domain.access import Requester, Role
from epr.domain.common import EPRError
from epr.domain.verifications import VerificationService
from epr.interfaces.http.deps import get_verification_service
from epr.interfaces.http.errors import to_http_exception
from epr.interfaces.http.schemas import (
    VerificationHistoryEntry,
    VerificationHistoryResponse,
    VerificationResponse,
    VerificationStatsResponse,
    VerifyRequest,
)

router = APIRouter()


@router.post("", response_model=VerificationResponse, summary="Verify a bill by its number")
async def verify_bill(
    payload: VerifyRequest,
    request: Request,
    requester: Optional[Requester] = Depends(get_optional_requester),
    service: VerificationService = Depends(get_verification_service),
) -> VerificationResponse:
    try:
        result = await service.verify_bill(
            requester.id if requester else None,
            payload.bill_number,
            requester.role if requester else Role.PUBLIC,
            ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except EPRError as exc:
        raise to_http_exception(exc) from exc
    return VerificationResponse.model_validate(result)


@router.get("/history", response_model=VerificationHistoryResponse, summary="List own verifications")
async def verification_history(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    requester: Requester = Depends(get_current_requester),
    service: VerificationService = Depends(get_verification_service),
) -> VerificationHistoryResponse:
    try:
        items, total = await service.get_history(requester.id, page, page_size)
    except EPRError as exc:
        raise to_http_exception(exc) from exc
    return VerificationHistoryResponse(
        items=[VerificationHistoryEntry.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/stats", response_model=VerificationStatsResponse, summary="Own verification statistics")
async def verification_stats(
    requester: Requester = Depends(get_current_requester),
    service: VerificationService = Depends(get_verification_service),
) -> VerificationStatsResponse:
    try:
        stats = await service.get_stats(requester.id)
    except EPRError as exc:
        raise to_http_exception(exc) from exc
    return VerificationStatsResponse.model_validate(stats)
