"""Verification pricing exports"""

from .engine import FeeQuote, PricingEngine, PricingRule

__all__ = ["FeeQuote", "PricingEngine", "PricingRule"]
