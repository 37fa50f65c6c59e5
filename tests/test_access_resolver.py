import itertools

import pytest

from epr.domain.access import AccessLevel, Disclosure, Role, disclosed_details, resolve_access, revealed_fields

EXPECTED = {
    AccessLevel.PUBLIC: {
        Role.PUBLIC: Disclosure.FULL,
        Role.INSTITUTION_USER: Disclosure.FULL,
        Role.INSTITUTION_ADMIN: Disclosure.FULL,
        Role.VERIFIER: Disclosure.FULL,
    },
    AccessLevel.RESTRICTED: {
        Role.PUBLIC: Disclosure.LIMITED,
        Role.INSTITUTION_USER: Disclosure.FULL,
        Role.INSTITUTION_ADMIN: Disclosure.FULL,
        Role.VERIFIER: Disclosure.FULL,
    },
    AccessLevel.GOVERNMENT: {
        Role.PUBLIC: Disclosure.NONE,
        Role.INSTITUTION_USER: Disclosure.NONE,
        Role.INSTITUTION_ADMIN: Disclosure.NONE,
        Role.VERIFIER: Disclosure.FULL,
    },
    AccessLevel.FINANCIAL: {
        Role.PUBLIC: Disclosure.NONE,
        Role.INSTITUTION_USER: Disclosure.NONE,
        Role.INSTITUTION_ADMIN: Disclosure.NONE,
        Role.VERIFIER: Disclosure.FULL,
    },
}


@pytest.mark.parametrize("tier,role", list(itertools.product(AccessLevel, Role)))
def test_every_pair_resolves_deterministically(tier, role):
    first = resolve_access(tier, role)
    assert first in Disclosure
    assert all(resolve_access(tier, role) is first for _ in range(5))
    if role is Role.MASTER_ADMIN:
        assert first is Disclosure.FULL
    else:
        assert first is EXPECTED[tier][role]


@pytest.mark.parametrize("tier", list(AccessLevel))
def test_issuer_always_gets_full(tier):
    assert resolve_access(tier, Role.PUBLIC, requester_id="u-1", issuer_id="u-1") is Disclosure.FULL


def test_government_issuer_with_institution_role_gets_full():
    assert resolve_access("government", "institution_admin", requester_id="inst", issuer_id="inst") is Disclosure.FULL
    assert resolve_access("government", "institution_admin", requester_id="other", issuer_id="inst") is Disclosure.NONE


def test_unknown_role_is_treated_as_public():
    assert resolve_access("restricted", "superuser") is Disclosure.LIMITED
    assert resolve_access("restricted", None) is Disclosure.LIMITED


def test_unknown_tier_falls_back_to_limited():
    assert resolve_access("top_secret", Role.VERIFIER) is Disclosure.LIMITED


def test_anonymous_requester_never_matches_issuer():
    assert resolve_access("government", Role.PUBLIC, requester_id=None, issuer_id=None) is Disclosure.NONE


def test_disclosed_details_whitelists_fields():
    bill_data = {"customer": {"name": "R"}, "line_items": [1], "amount": "10"}
    assert disclosed_details(Disclosure.FULL, bill_data=bill_data, amount="10.00", currency="INR") == bill_data
    assert disclosed_details(Disclosure.LIMITED, bill_data=bill_data, amount="10.00", currency="INR") == {
        "amount": "10.00",
        "currency": "INR",
    }
    assert disclosed_details(Disclosure.NONE, bill_data=bill_data, amount="10.00", currency="INR") is None


def test_revealed_fields_returns_fresh_copies():
    summary = revealed_fields(Disclosure.LIMITED)
    summary["fields_shown"].append("line_items")
    assert "line_items" not in revealed_fields(Disclosure.LIMITED)["fields_shown"]
    assert revealed_fields(Disclosure.NONE)["fields_hidden"] == ["all_details"]
