"""Domain models for wallet operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class TransactionType(str, Enum):
    BILL_GENERATION = "bill_generation"
    VERIFICATION = "verification"
    WALLET_TOPUP = "wallet_topup"
    REFUND = "refund"
    LOYALTY_BONUS = "loyalty_bonus"
    ADMIN_ADJUSTMENT = "admin_adjustment"


@dataclass(slots=True, frozen=True)
class BalanceRow:
    """Counters as returned by a guarded UPDATE ... RETURNING."""

    balance_cents: int
    verification_count: int
    free_verifications_earned: int

    @classmethod
    def from_row(cls, row: Any) -> "BalanceRow":
        return cls(
            balance_cents=row.wallet_balance_cents,
            verification_count=row.verification_count,
            free_verifications_earned=row.free_verifications_earned,
        )


@dataclass(slots=True)
class WalletSnapshot:
    user_id: str
    balance: Decimal
    currency: str
    verification_count: int
    free_verifications_earned: int
    updated_at: Optional[datetime]


@dataclass(slots=True, frozen=True)
class Settlement:
    new_balance: Decimal
    earned_loyalty_credit: bool
    verification_count: int
    free_verifications_earned: int


@dataclass(slots=True)
class WalletTransactionRecord:
    id: str
    user_id: str
    type: TransactionType
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    bill_id: Optional[str]
    reference: Optional[str]
    description: Optional[str]
    created_at: Optional[datetime]
