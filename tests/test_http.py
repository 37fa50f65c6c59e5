from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from fastapi import Depends

from epr.core.security import create_access_token
from epr.domain.bills import BillService
from epr.domain.verifications import VerificationService
from epr.domain.wallets import WalletLedger
from epr.interfaces.http.deps import (
    get_bill_service,
    get_db_session,
    get_verification_service,
    get_wallet_ledger,
)
from epr.main import create_app

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def client(session_factory, settings):
    app = create_app()
    service = VerificationService.from_factory(session_factory, settings)

    async def _db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _db_session
    app.dependency_overrides[get_verification_service] = lambda: service

    async def _ledger(db=Depends(get_db_session)):
        return WalletLedger.with_session(db, settings.pricing)

    async def _bills(db=Depends(get_db_session)):
        return BillService.with_session(db, settings.pricing)

    app.dependency_overrides[get_wallet_ledger] = _ledger
    app.dependency_overrides[get_bill_service] = _bills

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def _auth(user_id: str, role: str = "public") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


async def test_anonymous_verify_of_unknown_bill(client):
    response = await client.post("/api/verify", json={"bill_number": "INV202610123456"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "not_found"
    assert body["charged"] is False
    assert Decimal(body["fee"]) == Decimal("1.00")


async def test_authenticated_verify_charges_wallet(client, make_user, make_bill):
    issuer_id = await make_user(role="institution_admin")
    number = await make_bill(issuer_id, amount="1000.00")
    user_id = await make_user(balance="20.00")

    response = await client.post("/api/verify", json={"bill_number": number}, headers=_auth(user_id))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "valid"
    assert Decimal(body["wallet_balance"]) == Decimal("15.00")

    wallet = await client.get("/api/wallet", headers=_auth(user_id))
    assert Decimal(wallet.json()["balance"]) == Decimal("15.00")
    assert wallet.json()["verification_count"] == 1


async def test_insufficient_balance_maps_to_402(client, make_user, make_bill):
    issuer_id = await make_user(role="institution_admin")
    number = await make_bill(issuer_id, access_level="government")
    user_id = await make_user(balance="1.00")

    response = await client.post("/api/verify", json={"bill_number": number}, headers=_auth(user_id))

    assert response.status_code == 402
    assert "insufficient wallet balance" in response.json()["detail"]


async def test_invalid_token_is_rejected(client):
    response = await client.get("/api/wallet", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


async def test_history_requires_authentication(client):
    response = await client.get("/api/verify/history")
    assert response.status_code in (401, 403)


async def test_topup_then_history_and_stats(client, make_user):
    user_id = await make_user(balance="0")

    topup = await client.post("/api/wallet/topups", json={"amount": "25.00"}, headers=_auth(user_id))
    assert topup.status_code == 201
    assert Decimal(topup.json()["balance"]) == Decimal("25.00")

    await client.post("/api/verify", json={"bill_number": "MISSING"}, headers=_auth(user_id))

    history = await client.get("/api/verify/history", headers=_auth(user_id))
    assert history.status_code == 200
    assert history.json()["total"] == 1
    assert history.json()["items"][0]["result"] == "not_found"

    stats = await client.get("/api/verify/stats", headers=_auth(user_id))
    assert stats.json()["not_found_count"] == 1

    transactions = await client.get("/api/wallet/transactions", headers=_auth(user_id))
    types = {entry["type"] for entry in transactions.json()["transactions"]}
    assert types == {"wallet_topup", "verification"}


async def test_issue_bill_and_check_integrity(client, make_user):
    issuer_id = await make_user(role="institution_admin", balance="5.00")
    payload = {
        "bill_type": "medical_bill",
        "access_level": "restricted",
        "amount": "2500.00",
        "issue_date": "2026-10-10",
        "bill_data": {"patient": "A. Rao", "procedures": ["x-ray"]},
    }

    created = await client.post("/api/bills", json=payload, headers=_auth(issuer_id, "institution_admin"))
    assert created.status_code == 201
    bill_number = created.json()["bill_number"]
    assert bill_number.startswith("MED")

    check = await client.post(
        f"/api/bills/{bill_number}/integrity",
        json={"document": {"patient": "A. Rao", "procedures": ["x-ray"]}},
        headers=_auth(issuer_id),
    )
    assert check.status_code == 200
    assert check.json()["intact"] is False


async def test_public_user_cannot_issue_bills(client, make_user):
    user_id = await make_user(role="public", balance="5.00")
    payload = {"bill_type": "other", "amount": "10.00", "issue_date": "2026-10-10"}

    response = await client.post("/api/bills", json=payload, headers=_auth(user_id))

    assert response.status_code == 403


async def test_bill_verification_logs_are_issuer_only(client, make_user):
    issuer_id = await make_user(role="institution_admin", balance="5.00")
    auditor_id = await make_user(role="verifier", balance="50.00", organization_name="Revenue Dept")
    payload = {"bill_type": "rent_receipt", "amount": "300.00", "issue_date": "2026-10-11", "bill_data": {"flat": "4B"}}

    created = await client.post("/api/bills", json=payload, headers=_auth(issuer_id, "institution_admin"))
    bill = created.json()
    verified = await client.post(
        "/api/verify", json={"bill_number": bill["bill_number"]}, headers=_auth(auditor_id, "verifier")
    )
    assert verified.status_code == 200

    logs = await client.get(f"/api/bills/{bill['id']}/verifications", headers=_auth(issuer_id, "institution_admin"))
    assert logs.status_code == 200
    body = logs.json()
    assert body["total"] == 1
    assert body["verification_logs"][0]["verified_by"] == "Revenue Dept"
    assert body["verification_logs"][0]["verifier_type"] == "government"
    assert body["verification_logs"][0]["result"] == "valid"

    denied = await client.get(f"/api/bills/{bill['id']}/verifications", headers=_auth(auditor_id, "verifier"))
    assert denied.status_code == 403

    missing = await client.get("/api/bills/unknown-bill/verifications", headers=_auth(issuer_id))
    assert missing.status_code == 404
