"""Fixed-point currency helpers.

Balances and fees are persisted as integer minor units (cents/paise) and
handled as two-place ``Decimal`` values everywhere else.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def quantize(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Decimal | int | str) -> int:
    return int(quantize(value) * 100)


def from_cents(cents: int) -> Decimal:
    return quantize(Decimal(cents) / 100)
