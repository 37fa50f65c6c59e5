from datetime import date, datetime
from decimal import Decimal

import pytest

from epr.core.config import PricingSettings
from epr.domain.access import AccessLevel, Role
from epr.domain.bills import (
    AccessDeniedError,
    BillCreateInput,
    BillNotFoundError,
    BillService,
    BillType,
    DuplicateBillError,
)
from epr.domain.bills.numbering import parse_sequence
from epr.domain.wallets import InsufficientBalanceError, WalletLedger

pytestmark = pytest.mark.asyncio


def _payload(**overrides) -> BillCreateInput:
    values = dict(
        bill_type=BillType.SALES_INVOICE,
        access_level=AccessLevel.PUBLIC,
        amount=Decimal("1180.00"),
        issue_date=date(2026, 10, 2),
        bill_data={"customer": {"name": "K. Iyer"}, "line_items": [{"sku": "X", "qty": 1}]},
    )
    values.update(overrides)
    return BillCreateInput(**values)


async def _create(session_factory, issuer_id, payload):
    async with session_factory() as session:
        async with session.begin():
            return await BillService.with_session(session, PricingSettings()).create_bill(issuer_id, payload)


async def test_create_bill_charges_generation_fee(session_factory, make_user):
    issuer_id = await make_user(role="institution_admin", balance="2.00", organization_name="Iyer & Co")

    first = await _create(session_factory, issuer_id, _payload())
    second = await _create(session_factory, issuer_id, _payload(amount=Decimal("99.00")))

    assert first.bill_number.startswith("INV")
    assert len(first.bill_number) == len("INV") + 6 + 6
    assert parse_sequence(second.bill_number, first.bill_number[:9]) == parse_sequence(first.bill_number, first.bill_number[:9]) + 1
    assert first.issuer_name == "Iyer & Co"
    assert first.bill_data["_metadata"]["issuer_name"] == "Iyer & Co"
    assert len(first.data_hash) == 64

    async with session_factory() as session:
        snapshot = await WalletLedger.with_session(session, PricingSettings()).get_snapshot(issuer_id)
    assert snapshot.balance == Decimal("1.00")


async def test_public_user_cannot_issue(session_factory, make_user):
    user_id = await make_user(role="public", balance="10.00")
    with pytest.raises(AccessDeniedError):
        await _create(session_factory, user_id, _payload())


async def test_insufficient_balance_leaves_no_bill(session_factory, make_user):
    issuer_id = await make_user(role="institution_user", balance="0.10")

    with pytest.raises(InsufficientBalanceError):
        await _create(session_factory, issuer_id, _payload())

    async with session_factory() as session:
        numbers = await BillService.with_session(session, PricingSettings()).repository.list_numbers_with_prefix("INV")
    assert numbers == []


async def test_duplicate_content_is_rejected(session_factory, make_user, monkeypatch):
    issuer_id = await make_user(role="institution_admin", balance="5.00")
    frozen = datetime(2026, 10, 19, 9, 0, 0)

    class FrozenDatetime(datetime):
        @classmethod
        def now(cls, tz=None):
            return frozen.replace(tzinfo=tz)

    monkeypatch.setattr("epr.domain.bills.service.datetime", FrozenDatetime)

    await _create(session_factory, issuer_id, _payload())
    with pytest.raises(DuplicateBillError):
        await _create(session_factory, issuer_id, _payload())


async def test_integrity_check(session_factory, make_user):
    issuer_id = await make_user(role="institution_admin", balance="5.00")
    bill = await _create(session_factory, issuer_id, _payload())

    async with session_factory() as session:
        service = BillService.with_session(session, PricingSettings())
        assert await service.verify_integrity(bill.bill_number, bill.bill_data)
        tampered = dict(bill.bill_data, line_items=[{"sku": "X", "qty": 2}])
        assert not await service.verify_integrity(bill.bill_number, tampered)
        with pytest.raises(BillNotFoundError):
            await service.verify_integrity("INV000000000000", bill.bill_data)


async def test_get_bill_respects_disclosure(session_factory, make_user, make_bill):
    issuer_id = await make_user(role="institution_admin")
    number = await make_bill(issuer_id, access_level="government")
    outsider = await make_user(role="public")

    async with session_factory() as session:
        service = BillService.with_session(session, PricingSettings())
        model = await service.repository.get_by_number(number)
        own = await service.get_bill(issuer_id, Role.INSTITUTION_ADMIN, model.id)
        verified = await service.get_bill(None, Role.VERIFIER, model.id)
        assert own.bill_number == number
        assert own.bill_data["customer"]["name"] == "R. Sharma"
        assert verified.bill_data == own.bill_data
        with pytest.raises(AccessDeniedError):
            await service.get_bill(outsider, Role.PUBLIC, model.id)



async def test_limited_disclosure_hides_bill_payload(session_factory, make_user, make_bill):
    issuer_id = await make_user(role="institution_admin")
    number = await make_bill(issuer_id, access_level="restricted", amount="1000.00")
    outsider = await make_user(role="public")

    async with session_factory() as session:
        service = BillService.with_session(session, PricingSettings())
        model = await service.repository.get_by_number(number)
        limited = await service.get_bill(outsider, Role.PUBLIC, model.id)
        full = await service.get_bill(None, Role.INSTITUTION_USER, model.id)

    assert limited.bill_data == {"amount": "1000.00", "currency": "INR"}
    assert "customer" not in limited.bill_data
    assert "line_items" not in limited.bill_data
    assert limited.issuer_name == "Acme Traders"
    assert full.bill_data["line_items"] == [{"sku": "A-1", "qty": 2}]


async def test_bill_number_taken_during_insert_maps_to_duplicate(session_factory, make_user, monkeypatch):
    issuer_id = await make_user(role="institution_admin", balance="5.00")
    first = await _create(session_factory, issuer_id, _payload())

    async def _stale_number(self, bill_type, when):
        return first.bill_number

    monkeypatch.setattr(BillService, "_next_bill_number", _stale_number)

    with pytest.raises(DuplicateBillError):
        await _create(session_factory, issuer_id, _payload(amount=Decimal("42.00")))

    async with session_factory() as session:
        service = BillService.with_session(session, PricingSettings())
        numbers = await service.repository.list_numbers_with_prefix("INV")
        snapshot = await service.ledger.get_snapshot(issuer_id)
    assert numbers == [first.bill_number]
    assert snapshot.balance == Decimal("4.50")

async def test_only_issuer_can_soft_delete(session_factory, make_user, make_bill):
    issuer_id = await make_user(role="institution_admin")
    other = await make_user(role="institution_admin")
    number = await make_bill(issuer_id)

    async with session_factory() as session:
        async with session.begin():
            service = BillService.with_session(session, PricingSettings())
            model = await service.repository.get_by_number(number)
            with pytest.raises(AccessDeniedError):
                await service.soft_delete(other, model.id, "not mine")
            deleted = await service.soft_delete(issuer_id, model.id, "duplicate entry")

    assert deleted.is_deleted
