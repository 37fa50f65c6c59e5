"""Verification fee calculation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from epr.core.config import PricingSettings
from epr.domain.access.models import AccessLevel
from epr.domain.common.money import quantize


class PricingRule(str, Enum):
    LOYALTY_FREE = "loyalty_free"
    PERCENTAGE = "percentage_1_percent"
    MINIMUM_FEE = "minimum_fee"
    MAXIMUM_FEE_CAPPED = "maximum_fee_capped"
    RESTRICTED_PREMIUM = "restricted_access_premium"
    GOVERNMENT_FINANCIAL_PREMIUM = "government_financial_premium"


@dataclass(slots=True, frozen=True)
class FeeQuote:
    fee: Decimal
    was_free: bool
    rule: PricingRule


@dataclass(slots=True)
class PricingEngine:
    settings: PricingSettings

    @property
    def min_fee(self) -> Decimal:
        return quantize(self.settings.verification_min_fee)

    @property
    def max_fee(self) -> Decimal:
        return quantize(self.settings.verification_max_fee)

    def compute_fee(
        self,
        bill_amount: Decimal,
        access_level: AccessLevel | str,
        loyalty_credit_available: bool = False,
    ) -> FeeQuote:
        if loyalty_credit_available:
            return FeeQuote(fee=quantize(0), was_free=True, rule=PricingRule.LOYALTY_FREE)

        base = (
            Decimal(bill_amount)
            * self.settings.verification_percentage
            * self.settings.percentage_damping
        )

        fee = base
        rule = PricingRule.PERCENTAGE
        if base < self.min_fee:
            fee = self.min_fee
            rule = PricingRule.MINIMUM_FEE
        elif base > self.max_fee:
            fee = self.max_fee
            rule = PricingRule.MAXIMUM_FEE_CAPPED

        tier = _coerce_tier(access_level)
        if tier is AccessLevel.RESTRICTED:
            fee = fee * self.settings.restricted_multiplier
            rule = PricingRule.RESTRICTED_PREMIUM
        elif tier in (AccessLevel.GOVERNMENT, AccessLevel.FINANCIAL):
            fee = self.max_fee
            rule = PricingRule.GOVERNMENT_FINANCIAL_PREMIUM

        # the tier step must not leave the configured band
        fee = min(max(fee, self.min_fee), self.max_fee)
        return FeeQuote(fee=quantize(fee), was_free=False, rule=rule)

    def not_found_fee(self) -> Decimal:
        return self.min_fee


def _coerce_tier(access_level: AccessLevel | str) -> AccessLevel | None:
    try:
        return AccessLevel(access_level)
    except ValueError:
        return None


__all__ = ["FeeQuote", "PricingEngine", "PricingRule"]
