"""Domain models for bill verification and its audit trail."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from epr.domain.access.models import Disclosure


class VerificationStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    RESTRICTED = "restricted"
    SUSPICIOUS = "suspicious"
    NOT_FOUND = "not_found"


@dataclass(slots=True)
class VerificationResult:
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


@dataclass(slots=True)
class VerificationDraft:
    """Everything the recorder needs to append one audit row."""

    bill_number: str
    status: VerificationStatus
    disclosure: Disclosure
    amount_charged: Decimal
    was_free: bool
    pricing_rule: Optional[str]
    response_time_ms: int
    bill_id: Optional[str] = None
    requester_id: Optional[str] = None
    requester_ip: Optional[str] = None
    requester_user_agent: Optional[str] = None
    data_revealed: Optional[dict[str, Any]] = None
    attempts: int = field(default=0, compare=False)


@dataclass(slots=True)
class VerificationHistoryItem:
    id: str
    bill_number: str
    issuer_name: str
    bill_type: str
    verified_at: Optional[datetime]
    result: VerificationStatus
    fee: Decimal
    was_free: bool


@dataclass(slots=True)
class BillVerificationLog:
    """One verification of an issued bill, as shown to its issuer."""

    id: str
    verified_by: str
    verified_at: Optional[datetime]
    result: VerificationStatus
    verifier_type: str


@dataclass(slots=True)
class VerificationStats:
    total_verifications: int
    total_spent: Decimal
    valid_count: int
    invalid_count: int
    restricted_count: int
    not_found_count: int
    success_rate: float
