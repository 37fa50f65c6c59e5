"""Disclosure rules for bill verification.

The table in ``_TIER_TABLE`` is the single place that decides how much of a
bill a requester may see. Response building and audit summaries only go
through :func:`disclosed_details` and :func:`revealed_fields`, which whitelist
fields per disclosure level.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .models import AccessLevel, Disclosure, Role

_INSTITUTION_ROLES = frozenset({Role.INSTITUTION_USER, Role.INSTITUTION_ADMIN})

_TIER_TABLE: dict[AccessLevel, dict[Role, Disclosure]] = {
    AccessLevel.PUBLIC: {
        Role.PUBLIC: Disclosure.FULL,
        Role.INSTITUTION_USER: Disclosure.FULL,
        Role.INSTITUTION_ADMIN: Disclosure.FULL,
        Role.VERIFIER: Disclosure.FULL,
        Role.MASTER_ADMIN: Disclosure.FULL,
    },
    AccessLevel.RESTRICTED: {
        Role.PUBLIC: Disclosure.LIMITED,
        Role.INSTITUTION_USER: Disclosure.FULL,
        Role.INSTITUTION_ADMIN: Disclosure.FULL,
        Role.VERIFIER: Disclosure.FULL,
        Role.MASTER_ADMIN: Disclosure.FULL,
    },
    AccessLevel.GOVERNMENT: {
        Role.PUBLIC: Disclosure.NONE,
        Role.INSTITUTION_USER: Disclosure.NONE,
        Role.INSTITUTION_ADMIN: Disclosure.NONE,
        Role.VERIFIER: Disclosure.FULL,
        Role.MASTER_ADMIN: Disclosure.FULL,
    },
    AccessLevel.FINANCIAL: {
        Role.PUBLIC: Disclosure.NONE,
        Role.INSTITUTION_USER: Disclosure.NONE,
        Role.INSTITUTION_ADMIN: Disclosure.NONE,
        Role.VERIFIER: Disclosure.FULL,
        Role.MASTER_ADMIN: Disclosure.FULL,
    },
}

_REVEALED_FIELDS: dict[Disclosure, dict[str, list[str]]] = {
    Disclosure.FULL: {
        "fields_shown": ["all"],
        "fields_hidden": [],
    },
    Disclosure.LIMITED: {
        "fields_shown": ["bill_number", "issuer_name", "issue_date", "bill_type", "amount", "currency"],
        "fields_hidden": ["recipient_details", "line_items", "sensitive_data"],
    },
    Disclosure.NONE: {
        "fields_shown": ["bill_number", "issuer_name", "bill_type"],
        "fields_hidden": ["all_details"],
    },
}


def resolve_access(
    access_level: AccessLevel | str,
    role: Role | str | None,
    *,
    requester_id: Optional[str] = None,
    issuer_id: Optional[str] = None,
) -> Disclosure:
    """Return the disclosure level a requester gets for a bill.

    The bill's issuer and ``master_admin`` always get ``full``. Unknown tiers
    fall back to ``limited``.
    """
    role = Role.parse(role)
    if requester_id is not None and issuer_id is not None and requester_id == issuer_id:
        return Disclosure.FULL
    if role is Role.MASTER_ADMIN:
        return Disclosure.FULL
    try:
        tier = AccessLevel(access_level)
    except ValueError:
        return Disclosure.LIMITED
    return _TIER_TABLE[tier][role]


def disclosed_details(
    disclosure: Disclosure,
    *,
    bill_data: Mapping[str, Any],
    amount: Any,
    currency: str,
) -> Optional[dict[str, Any]]:
    """Project a bill payload down to what ``disclosure`` permits."""
    if disclosure is Disclosure.FULL:
        return dict(bill_data)
    if disclosure is Disclosure.LIMITED:
        return {"amount": amount, "currency": currency}
    return None


def revealed_fields(disclosure: Disclosure) -> dict[str, list[str]]:
    summary = _REVEALED_FIELDS[disclosure]
    return {key: list(value) for key, value in summary.items()}


def is_institution(role: Role | str | None) -> bool:
    return Role.parse(role) in _INSTITUTION_ROLES


__all__ = [
    "disclosed_details",
    "is_institution",
    "resolve_access",
    "revealed_fields",
]
