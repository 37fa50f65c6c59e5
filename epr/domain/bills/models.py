"""Domain models for issued bills."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from epr.domain.access.models import AccessLevel


class BillType(str, Enum):
    SALARY_SLIP = "salary_slip"
    SALES_INVOICE = "sales_invoice"
    MEDICAL_BILL = "medical_bill"
    PURCHASE_INVOICE = "purchase_invoice"
    RENTAL_AGREEMENT = "rental_agreement"
    EDUCATION_FEE = "education_fee"
    RENT_RECEIPT = "rent_receipt"
    REIMBURSEMENT = "reimbursement"
    LOAN_STATEMENT = "loan_statement"
    TAX_RECEIPT = "tax_receipt"
    INSURANCE_POLICY = "insurance_policy"
    OTHER = "other"


class BlockchainStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(slots=True)
class Bill:
    id: str
    bill_number: str
    bill_type: BillType
    access_level: AccessLevel
    issuer_id: str
    issuer_name: str
    bill_data: dict[str, Any]
    amount: Decimal
    currency: str
    issue_date: date
    data_hash: str
    blockchain_status: BlockchainStatus
    is_deleted: bool
    created_at: Optional[datetime]


@dataclass(slots=True)
class BillCreateInput:
    bill_type: BillType
    access_level: AccessLevel
    amount: Decimal
    issue_date: date
    bill_data: dict[str, Any] = field(default_factory=dict)
    issuer_gstin: Optional[str] = None
