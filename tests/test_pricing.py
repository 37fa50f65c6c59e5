from decimal import Decimal

import pytest

from epr.core.config import PricingSettings
from epr.domain.pricing import PricingEngine, PricingRule


@pytest.fixture
def engine() -> PricingEngine:
    return PricingEngine(PricingSettings())


def test_public_bill_uses_damped_percentage(engine):
    quote = engine.compute_fee(Decimal("1000"), "public")
    assert quote.fee == Decimal("5.00")
    assert quote.rule is PricingRule.PERCENTAGE
    assert not quote.was_free


def test_small_bill_is_raised_to_minimum(engine):
    quote = engine.compute_fee(Decimal("50"), "public")
    assert quote.fee == Decimal("1.00")
    assert quote.rule is PricingRule.MINIMUM_FEE


def test_large_bill_is_capped(engine):
    quote = engine.compute_fee(Decimal("1000000"), "public")
    assert quote.fee == Decimal("10.00")
    assert quote.rule is PricingRule.MAXIMUM_FEE_CAPPED


def test_restricted_premium_is_capped_at_max(engine):
    quote = engine.compute_fee(Decimal("10000"), "restricted")
    assert quote.fee == Decimal("10.00")
    assert quote.rule is PricingRule.RESTRICTED_PREMIUM


def test_restricted_premium_below_cap(engine):
    quote = engine.compute_fee(Decimal("1000"), "restricted")
    assert quote.fee == Decimal("7.50")
    assert quote.rule is PricingRule.RESTRICTED_PREMIUM


def test_restricted_minimum_is_multiplied(engine):
    assert engine.compute_fee(Decimal("10"), "restricted").fee == Decimal("1.50")


@pytest.mark.parametrize("tier", ["government", "financial"])
@pytest.mark.parametrize("amount", ["0", "1", "1000", "99999999"])
def test_government_and_financial_always_pay_max(engine, tier, amount):
    quote = engine.compute_fee(Decimal(amount), tier)
    assert quote.fee == Decimal("10.00")
    assert quote.rule is PricingRule.GOVERNMENT_FINANCIAL_PREMIUM


@pytest.mark.parametrize("tier", ["public", "restricted", "government", "financial"])
def test_loyalty_credit_makes_it_free(engine, tier):
    quote = engine.compute_fee(Decimal("5000"), tier, loyalty_credit_available=True)
    assert quote.fee == Decimal("0.00")
    assert quote.was_free
    assert quote.rule is PricingRule.LOYALTY_FREE


@pytest.mark.parametrize(
    "amount,expected,rule",
    [
        ("200", "1.00", PricingRule.PERCENTAGE),
        ("199.99", "1.00", PricingRule.MINIMUM_FEE),
        ("2000", "10.00", PricingRule.PERCENTAGE),
        ("2000.02", "10.00", PricingRule.MAXIMUM_FEE_CAPPED),
        ("333.33", "1.67", PricingRule.PERCENTAGE),
    ],
)
def test_band_boundaries(engine, amount, expected, rule):
    quote = engine.compute_fee(Decimal(amount), "public")
    assert quote.fee == Decimal(expected)
    assert quote.rule is rule


@pytest.mark.parametrize("amount", ["0", "0.01", "12.34", "5000", "123456.78"])
@pytest.mark.parametrize("tier", ["public", "restricted", "government", "financial", "mystery"])
def test_fee_stays_in_band_and_has_two_places(engine, amount, tier):
    fee = engine.compute_fee(Decimal(amount), tier).fee
    assert Decimal("1.00") <= fee <= Decimal("10.00")
    assert fee == fee.quantize(Decimal("0.01"))


def test_not_found_fee_is_minimum(engine):
    assert engine.not_found_fee() == Decimal("1.00")
