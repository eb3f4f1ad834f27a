"""
Fee strategy for transfers and their replacements.

Every re-priced fee for a transfer is at least the previous one bumped
by 20%, so a resubmission for the same nonce is accepted by nodes as a
replacement instead of being rejected as underpriced.

Two shapes are produced:
- LegacyFee: a single gas price (EIP-155 transactions)
- MarketFee: priority fee + max fee (EIP-1559 transactions)
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from evmfaucet.chain.policies import FEE_ORACLE_RETRY, GAS_PRICE_RETRY
from evmfaucet.chain.state import ChainRuntimeState
from evmfaucet.config import SenderConfig
from evmfaucet.constants import FEE_BUMP_DENOMINATOR, FEE_BUMP_NUMERATOR
from evmfaucet.errors import FeeMarketUnsupportedError, FeeOracleError, RpcError
from evmfaucet.fees.oracle import FeeSuggestion, cheapest, suggest_fees
from evmfaucet.utils.logging import get_logger
from evmfaucet.utils.retry import retry_async

_logger = get_logger(__name__)

__all__ = [
    "LegacyFee",
    "MarketFee",
    "Fee",
    "bump",
    "next_legacy_fee",
    "next_market_fee",
    "needs_refresh",
    "FeeStrategy",
]


@dataclass(frozen=True)
class LegacyFee:
    gas_price: int
    computed_at: float


@dataclass(frozen=True)
class MarketFee:
    max_priority_fee: int
    max_fee: int
    computed_at: float


Fee = Union[LegacyFee, MarketFee]


def bump(value: int) -> int:
    """Replacement floor: ``value * 1.2`` rounded down."""
    return value * FEE_BUMP_NUMERATOR // FEE_BUMP_DENOMINATOR


def next_legacy_fee(
    current_price: int,
    previous: Optional[LegacyFee],
    now: float,
) -> LegacyFee:
    """
    Gas price for the next submission.

    Example:
        >>> next_legacy_fee(100, LegacyFee(gas_price=100, computed_at=0), now=1).gas_price
        120
    """
    floor = bump(previous.gas_price if previous is not None else 1)
    return LegacyFee(gas_price=max(current_price, floor), computed_at=now)


def next_market_fee(
    suggestion: FeeSuggestion,
    previous: Optional[MarketFee],
    now: float,
) -> MarketFee:
    """
    Fee-market pricing for the next submission.

    The first computation adopts the suggestion. A replacement keeps the
    higher tip and at least 1.2x the previous max fee.
    """
    if previous is None:
        return MarketFee(
            max_priority_fee=suggestion.max_priority_fee_per_gas,
            max_fee=suggestion.max_fee_per_gas,
            computed_at=now,
        )

    return MarketFee(
        max_priority_fee=max(suggestion.max_priority_fee_per_gas, previous.max_priority_fee),
        max_fee=max(suggestion.max_fee_per_gas, bump(previous.max_fee)),
        computed_at=now,
    )


def needs_refresh(fee: Optional[Fee], now: float, refresh_after: float) -> bool:
    if not isinstance(fee, MarketFee):
        return True
    return now - fee.computed_at > refresh_after


class FeeStrategy:
    """
    Decides the fee of the next submission of a transfer.

    Fee-market chains query the fee oracle when no market fee is set or
    the last one is stale; otherwise the previous fee is reused as is.
    A chain whose oracle reports the fee market as unsupported is
    switched to legacy pricing for the rest of the process.

    Args:
        config: Sender tunables (fee refresh age)
        clock: Time source returning epoch seconds
    """

    def __init__(
        self,
        config: Optional[SenderConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or SenderConfig()
        self._clock = clock

    async def resolve(
        self,
        chain: ChainRuntimeState,
        previous: Optional[Fee],
        escalate: bool = True,
    ) -> Fee:
        """
        Compute the fee for the next submission.

        Args:
            chain: Runtime state of the chain being sent on
            previous: Fee of the last signed variant, if any
            escalate: Whether a legacy fee may be bumped. When False a
                previous legacy fee is returned unchanged, so waiting
                transfers resubmit the same variant instead of
                compounding the price on every tick.

        Returns:
            LegacyFee or MarketFee, never lower than ``previous``

        Raises:
            FeeOracleError: If the oracle stays unavailable after retries
            RpcError: If the gas price cannot be fetched after retries
        """
        now = self._clock()

        if chain.use_fee_market:
            if not needs_refresh(previous, now, self._config.fee_refresh_seconds):
                return previous
            try:
                return await self._market_fee(chain, previous, now)
            except FeeMarketUnsupportedError as e:
                chain.disable_fee_market(e.message)
        elif isinstance(previous, LegacyFee) and not escalate:
            return previous

        return await self._legacy_fee(chain, previous, now)

    async def _market_fee(
        self,
        chain: ChainRuntimeState,
        previous: Optional[Fee],
        now: float,
    ) -> MarketFee:
        async def query() -> FeeSuggestion:
            return cheapest(await suggest_fees(chain.rpc))

        try:
            suggestion = await retry_async(query, FEE_ORACLE_RETRY)
        except FeeMarketUnsupportedError:
            raise
        except RpcError as e:
            raise FeeOracleError(e.message, chain_id=chain.chain_id) from e

        prev_market = previous if isinstance(previous, MarketFee) else None
        fee = next_market_fee(suggestion, prev_market, now)
        _logger.info(
            "Fee-market fee computed",
            extra={
                "chain_id": chain.chain_id,
                "replacement": prev_market is not None,
                "max_priority_fee": fee.max_priority_fee,
                "max_fee": fee.max_fee,
            },
        )
        return fee

    async def _legacy_fee(
        self,
        chain: ChainRuntimeState,
        previous: Optional[Fee],
        now: float,
    ) -> LegacyFee:
        async def fetch() -> int:
            price = await chain.rpc.gas_price()
            if price is None:
                raise RpcError("Could not get gas price", code=404, chain_id=chain.chain_id)
            return price

        current = await retry_async(fetch, GAS_PRICE_RETRY)

        # A market variant may already be out; its max fee is the floor
        if isinstance(previous, MarketFee):
            previous = LegacyFee(gas_price=previous.max_fee, computed_at=previous.computed_at)

        fee = next_legacy_fee(current, previous, now)
        _logger.info(
            "Legacy gas price computed",
            extra={"chain_id": chain.chain_id, "gas_price": fee.gas_price},
        )
        return fee
