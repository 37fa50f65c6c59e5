"""Wallet endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from epr.core.security import get_current_requester
from epr.domain.access import Requester
from epr.domain.common import EPRError
from epr.domain.wallets import WalletLedger
from epr.interfaces.http.deps import get_db_session, get_wallet_ledger
from epr.interfaces.http.errors import to_http_exception
from epr.interfaces.http.schemas import (
    WalletSnapshotResponse,
    WalletTopupRequest,
    WalletTransactionListResponse,
    WalletTransactionResponse,
)

router = APIRouter()


@router.get("", response_model=WalletSnapshotResponse, summary="Current wallet balance")
async def get_wallet(
    requester: Requester = Depends(get_current_requester),
    ledger: WalletLedger = Depends(get_wallet_ledger),
) -> WalletSnapshotResponse:
    try:
        snapshot = await ledger.get_snapshot(requester.id)
    except EPRError as exc:
        raise to_http_exception(exc) from exc
    return WalletSnapshotResponse.model_validate(snapshot)


@router.get("/transactions", response_model=WalletTransactionListResponse, summary="Wallet ledger entries")
async def list_wallet_transactions(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    requester: Requester = Depends(get_current_requester),
    ledger: WalletLedger = Depends(get_wallet_ledger),
) -> WalletTransactionListResponse:
    records = await ledger.list_transactions(requester.id, limit, offset)
    return WalletTransactionListResponse(
        transactions=[WalletTransactionResponse.model_validate(record) for record in records]
    )


@router.post(
    "/topups",
    response_model=WalletSnapshotResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Top up the wallet",
)
async def create_wallet_topup(
    payload: WalletTopupRequest,
    requester: Requester = Depends(get_current_requester),
    ledger: WalletLedger = Depends(get_wallet_ledger),
    db: AsyncSession = Depends(get_db_session),
) -> WalletSnapshotResponse:
    try:
        snapshot = await ledger.top_up(requester.id, payload.amount, reference=payload.reference_no)
    except EPRError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return WalletSnapshotResponse.model_validate(snapshot)
