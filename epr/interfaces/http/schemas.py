"""Pydantic schemas for the HTTP surface."""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from epr.domain.access import AccessLevel
from epr.domain.bills import BillType, BlockchainStatus
from epr.domain.verifications import VerificationStatus
from epr.domain.wallets import TransactionType


class VerifyRequest(BaseModel):
    bill_number: str = Field(..., min_length=1, max_length=50)


class VerificationResponse(BaseModel):
    success: bool
    bill_number: str
    status: VerificationStatus
    message: str
    fee: Decimal
    charged: bool = False
    was_free: bool = False
    pricing_rule: Optional[str] = None
    issuer_name: Optional[str] = None
    issue_date: Optional[str] = None
    bill_type: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    wallet_balance: Optional[Decimal] = None
    loyalty_credit_earned: bool = False

    model_config = ConfigDict(from_attributes=True)


class VerificationHistoryEntry(BaseModel):
    id: str
    bill_number: str
    issuer_name: str
    bill_type: str
    verified_at: Optional[datetime] = None
    result: VerificationStatus
    fee: Decimal
    was_free: bool

    model_config = ConfigDict(from_attributes=True)


class VerificationHistoryResponse(BaseModel):
    items: list[VerificationHistoryEntry] = Field(default_factory=list)
    total: int
    page: int
    page_size: int


class BillVerificationLogEntry(BaseModel):
    id: str
    verified_by: str
    verified_at: Optional[datetime] = None
    result: VerificationStatus
    verifier_type: str

    model_config = ConfigDict(from_attributes=True)


class BillVerificationLogResponse(BaseModel):
    verification_logs: list[BillVerificationLogEntry] = Field(default_factory=list)
    total: int


class VerificationStatsResponse(BaseModel):
    total_verifications: int
    total_spent: Decimal
    valid_count: int
    invalid_count: int
    restricted_count: int
    not_found_count: int
    success_rate: float

    model_config = ConfigDict(from_attributes=True)


class WalletSnapshotResponse(BaseModel):
    balance: Decimal
    currency: str
    verification_count: int
    free_verifications_earned: int

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionResponse(BaseModel):
    id: str
    type: TransactionType
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    bill_id: Optional[str] = None
    reference: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionListResponse(BaseModel):
    transactions: list[WalletTransactionResponse] = Field(default_factory=list)


class WalletTopupRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    reference_no: Optional[str] = None


class BillCreateRequest(BaseModel):
    bill_type: BillType
    access_level: AccessLevel = AccessLevel.PUBLIC
    amount: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    issue_date: date
    bill_data: dict[str, Any] = Field(default_factory=dict)
    issuer_gstin: Optional[str] = Field(default=None, max_length=15)


class BillResponse(BaseModel):
    id: str
    bill_number: str
    bill_type: BillType
    access_level: AccessLevel
    issuer_name: str
    amount: Decimal
    currency: str
    issue_date: date
    data_hash: str
    blockchain_status: BlockchainStatus
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class IntegrityCheckRequest(BaseModel):
    document: dict[str, Any]


class IntegrityCheckResponse(BaseModel):
    bill_number: str
    intact: bool
