"""Repository protocol for wallet operations."""

from __future__ import annotations

from typing import Protocol, Sequence

from sqlalchemy.engine import Row

from epr.db.models import User as UserModel, WalletTransaction as WalletTransactionModel


class WalletRepository(Protocol):
    async def get_user(self, user_id: str) -> UserModel | None:
        ...

    async def lock_balance(self, user_id: str) -> int | None:
        ...

    async def debit(self, user_id: str, amount_cents: int, *, count_verification: bool) -> Row | None:
        ...

    async def credit(self, user_id: str, amount_cents: int) -> Row | None:
        ...

    async def consume_loyalty_credit(self, user_id: str) -> Row | None:
        ...

    async def grant_loyalty_credit(self, user_id: str) -> Row:
        ...

    async def add_transaction(
        self,
        *,
        user_id: str,
        type: str,
        amount_cents: int,
        balance_before_cents: int,
        balance_after_cents: int,
        bill_id: str | None,
        reference: str | None,
        description: str | None,
    ) -> WalletTransactionModel:
        ...

    async def list_transactions(self, user_id: str, limit: int, offset: int) -> Sequence[WalletTransactionModel]:
        ...
