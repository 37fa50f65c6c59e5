"""Human readable bill numbers: ``PREFIX`` + ``YYYY`` + ``MM`` + 6-digit sequence."""

from __future__ import annotations

from datetime import datetime

from .models import BillType

SEQUENCE_WIDTH = 6

_PREFIXES: dict[BillType, str] = {
    BillType.SALARY_SLIP: "SAL",
    BillType.SALES_INVOICE: "INV",
    BillType.MEDICAL_BILL: "MED",
    BillType.PURCHASE_INVOICE: "PUR",
    BillType.RENTAL_AGREEMENT: "RNT",
    BillType.EDUCATION_FEE: "EDU",
    BillType.RENT_RECEIPT: "RCT",
    BillType.REIMBURSEMENT: "REI",
    BillType.LOAN_STATEMENT: "LON",
    BillType.TAX_RECEIPT: "TAX",
    BillType.INSURANCE_POLICY: "INS",
    BillType.OTHER: "OTH",
}


def bill_prefix(bill_type: BillType | str) -> str:
    try:
        return _PREFIXES[BillType(bill_type)]
    except ValueError:
        return _PREFIXES[BillType.OTHER]


def period_prefix(bill_type: BillType | str, when: datetime) -> str:
    return f"{bill_prefix(bill_type)}{when:%Y%m}"


def format_bill_number(prefix: str, sequence: int) -> str:
    return f"{prefix}{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(bill_number: str, prefix: str) -> int | None:
    if not bill_number.startswith(prefix):
        return None
    tail = bill_number[len(prefix):]
    return int(tail) if tail.isdigit() else None


__all__ = ["bill_prefix", "format_bill_number", "parse_sequence", "period_prefix"]
