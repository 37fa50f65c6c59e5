"""Shared fixtures: an on-disk SQLite database per test and small factories."""

from __future__ import annotations

import json
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from epr.core.config import PricingSettings, Settings, VerificationSettings
from epr.db.models import Bill, User
from epr.domain.bills.hashing import generate_bill_hash
from epr.domain.common.money import to_cents
from epr.infrastructure.database.session import build_session_factory, init_db


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        pricing=PricingSettings(),
        verification=VerificationSettings(timeout_seconds=5.0),
    )


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'epr-test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def make_user(session_factory):
    async def _make_user(
        role: str = "public",
        balance: Decimal | str = "0",
        *,
        email: Optional[str] = None,
        organization_name: str = "Acme Verifiers",
        verification_count: int = 0,
        free_verifications_earned: int = 0,
    ) -> str:
        async with session_factory() as session:
            async with session.begin():
                user = User(
                    email=email or f"{role}-{uuid.uuid4().hex[:12]}@example.test",
                    organization_name=organization_name,
                    role=role,
                    wallet_balance_cents=to_cents(Decimal(balance)),
                    verification_count=verification_count,
                    free_verifications_earned=free_verifications_earned,
                )
                session.add(user)
                await session.flush()
                return user.id

    return _make_user


@pytest.fixture
def make_bill(session_factory):
    counter = {"seq": 0}

    async def _make_bill(
        issuer_id: str,
        *,
        access_level: str = "public",
        amount: Decimal | str = "1000.00",
        bill_type: str = "sales_invoice",
        bill_data: Optional[dict[str, Any]] = None,
        bill_number: Optional[str] = None,
        issuer_name: str = "Acme Traders",
    ) -> str:
        counter["seq"] += 1
        document = bill_data if bill_data is not None else {
            "customer": {"name": "R. Sharma", "gstin": "27ABCDE1234F1Z5"},
            "line_items": [{"sku": "A-1", "qty": 2}],
            "seq": counter["seq"],
        }
        number = bill_number or f"INV202610{counter['seq']:06d}"
        async with session_factory() as session:
            async with session.begin():
                bill = Bill(
                    bill_number=number,
                    bill_type=bill_type,
                    access_level=access_level,
                    issuer_id=issuer_id,
                    issuer_name=issuer_name,
                    bill_data=json.dumps(document, sort_keys=True),
                    amount_cents=to_cents(Decimal(amount)),
                    currency="INR",
                    issue_date=date(2026, 10, 1),
                    data_hash=generate_bill_hash(document),
                )
                session.add(bill)
        return number

    return _make_bill
