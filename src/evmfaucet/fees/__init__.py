"""
Fee pricing: fee-market oracle and replacement-safe fee strategy.
"""

from evmfaucet.fees.oracle import FeeSuggestion, cheapest, suggest_fees
from evmfaucet.fees.strategy import (
    Fee,
    FeeStrategy,
    LegacyFee,
    MarketFee,
    bump,
    needs_refresh,
    next_legacy_fee,
    next_market_fee,
)

__all__ = [
    "FeeSuggestion",
    "suggest_fees",
    "cheapest",
    "Fee",
    "FeeStrategy",
    "LegacyFee",
    "MarketFee",
    "bump",
    "needs_refresh",
    "next_legacy_fee",
    "next_market_fee",
]
