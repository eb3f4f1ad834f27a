"""
EIP-1559 fee suggestions derived from ``eth_feeHistory``.

For each requested reward percentile the tip is the median of the
non-zero rewards observed over the last ``block_count`` blocks, and the
max fee leaves room for the base fee to double before inclusion.
"""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence

from evmfaucet.chain.rpc import IChainRpc
from evmfaucet.constants import (
    BASE_FEE_MULTIPLIER,
    FEE_HISTORY_BLOCK_COUNT,
    FEE_HISTORY_PERCENTILES,
)
from evmfaucet.errors import METHOD_NOT_FOUND, FeeMarketUnsupportedError, RpcError
from evmfaucet.utils.logging import get_logger

_logger = get_logger(__name__)

__all__ = ["FeeSuggestion", "suggest_fees", "cheapest"]

_UNSUPPORTED_MARKERS = ("not supported", "unsupported", "does not exist", "not available")


@dataclass(frozen=True)
class FeeSuggestion:
    """One priority tier of fee-market pricing, in wei."""

    max_priority_fee_per_gas: int
    max_fee_per_gas: int


def _is_unsupported(error: RpcError) -> bool:
    if error.status_code == METHOD_NOT_FOUND:
        return True
    message = error.message.lower()
    return any(marker in message for marker in _UNSUPPORTED_MARKERS)


def _as_int(value: Any) -> int:
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    return int(value)


async def suggest_fees(
    rpc: IChainRpc,
    block_count: int = FEE_HISTORY_BLOCK_COUNT,
    percentiles: Sequence[int] = FEE_HISTORY_PERCENTILES,
) -> Dict[int, FeeSuggestion]:
    """
    Query the node for fee suggestions.

    Args:
        rpc: Chain RPC facade
        block_count: Number of recent blocks to sample
        percentiles: Reward percentiles, one tier each

    Returns:
        Mapping of percentile to FeeSuggestion

    Raises:
        FeeMarketUnsupportedError: If the chain has no fee market
        RpcError: On any other RPC failure
    """
    try:
        history = await rpc.fee_history(block_count, "latest", list(percentiles))
    except FeeMarketUnsupportedError:
        raise
    except RpcError as e:
        if _is_unsupported(e):
            raise FeeMarketUnsupportedError(e.message, chain_id=e.chain_id) from e
        raise

    base_fees = history.get("baseFeePerGas") or []
    if not base_fees:
        raise FeeMarketUnsupportedError("No base fee reported", chain_id=rpc.chain_id)

    # Last entry is the base fee of the next block
    next_base_fee = _as_int(base_fees[-1])
    if next_base_fee <= 0:
        raise FeeMarketUnsupportedError("No base fee reported", chain_id=rpc.chain_id)

    rewards = history.get("reward") or []
    suggestions: Dict[int, FeeSuggestion] = {}
    for index, percentile in enumerate(percentiles):
        samples = [
            _as_int(block[index])
            for block in rewards
            if len(block) > index and _as_int(block[index]) > 0
        ]
        tip = int(statistics.median(samples)) if samples else 1
        suggestions[percentile] = FeeSuggestion(
            max_priority_fee_per_gas=tip,
            max_fee_per_gas=BASE_FEE_MULTIPLIER * next_base_fee + tip,
        )

    _logger.debug(
        "Fee suggestions computed",
        extra={"chain_id": rpc.chain_id, "base_fee": next_base_fee, "tiers": len(suggestions)},
    )
    return suggestions


def cheapest(suggestions: Mapping[int, FeeSuggestion]) -> FeeSuggestion:
    """Return the tier with the smallest max fee."""
    if not suggestions:
        raise FeeMarketUnsupportedError("Fee oracle returned no tiers")
    return min(suggestions.values(), key=lambda s: s.max_fee_per_gas)
