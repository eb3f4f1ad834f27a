"""
Read-only status view of the faucet.

Snapshots are built from ChainRuntimeState accessors and never mutate
engine state. Rendering (HTML, JSON endpoints) is left to the caller.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

__all__ = ["ChainStatus", "FaucetStatus", "format_relative_time"]


@dataclass(frozen=True)
class ChainStatus:
    """
    Status of one chain.

    Attributes:
        chain_id: EIP-155 chain id
        name: Network name
        pending_nonce: Next nonce that will be reserved
        confirmed_nonce: Next nonce awaiting confirmation
        balance: Last seen faucet balance in wei (None until fetched)
        currency_symbol: Native currency symbol
        servings_left: How many payouts the last seen balance covers
        explorer_url: Explorer link for the faucet address, if configured
        use_fee_market: Whether EIP-1559 pricing is still in use
        last_requested_at: Epoch seconds of the last request
        last_confirmed_at: Epoch seconds of the last confirmation
        tracked_requesters: Number of addresses in the cooldown map
        recent_errors: Recent distinct error strings, oldest first
    """

    chain_id: int
    name: str
    pending_nonce: int
    confirmed_nonce: int
    balance: Optional[int]
    currency_symbol: str
    servings_left: Optional[int]
    explorer_url: Optional[str]
    use_fee_market: bool
    last_requested_at: Optional[float]
    last_confirmed_at: Optional[float]
    tracked_requesters: int
    recent_errors: List[str] = field(default_factory=list)

    @property
    def in_flight(self) -> int:
        """Reserved nonces that have not been confirmed yet."""
        return max(self.pending_nonce - self.confirmed_nonce, 0)


@dataclass(frozen=True)
class FaucetStatus:
    address: str
    chains: List[ChainStatus]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "chains": [asdict(chain) for chain in self.chains],
        }


def format_relative_time(timestamp: Optional[float], now: Optional[float] = None) -> str:
    """
    Format an epoch timestamp relative to now.

    Example:
        >>> format_relative_time(100.0, now=190.0)
        '1m ago'
    """
    if timestamp is None:
        return "never"

    now = time.time() if now is None else now
    seconds = max(int(now - timestamp), 0)

    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"
