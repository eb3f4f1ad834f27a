"""
Per-chain runtime state.

Provides:
- NonceSequencer: pending-nonce counter plus confirmed-nonce ratchet
- ChainRuntimeState: everything the engine tracks for one network

All state lives in memory for the process lifetime and is rebuilt from
chain state on startup (``sync_from_chain``).

Nonce convention: ``confirmed`` is the next nonce awaiting confirmation.
A transfer holding nonce ``n`` advances the ratchet to ``n + 1`` once its
transaction is mined.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, List, Optional

from evmfaucet.chain.policies import BALANCE_RETRY, SYNC_RETRY
from evmfaucet.chain.rpc import IChainRpc
from evmfaucet.config import ChainConfig
from evmfaucet.constants import DEFAULT_MAX_RECENT_ERRORS
from evmfaucet.status import ChainStatus
from evmfaucet.utils.collections import BoundedSet
from evmfaucet.utils.logging import get_logger
from evmfaucet.utils.retry import retry_async

_logger = get_logger(__name__)

__all__ = ["NonceSequencer", "ChainRuntimeState"]


class NonceSequencer:
    """
    Hands out nonces for one chain and tracks the confirmed tip.

    ``reserve`` is the single serialization point per chain: every caller
    gets a distinct value, in increasing order, with no gaps. The
    confirmed value is a ratchet that only ever moves up.

    Both operations hold a ``threading.Lock`` so they are atomic for
    asyncio tasks and OS threads alike.

    Example:
        >>> nonces = NonceSequencer(pending=5, confirmed=5)
        >>> nonces.reserve()
        5
        >>> nonces.advance_confirmed(6)
        6
        >>> nonces.advance_confirmed(3)
        6
    """

    def __init__(self, pending: int = 0, confirmed: int = 0) -> None:
        if pending < 0 or confirmed < 0:
            raise ValueError("nonces must be non-negative")
        self._pending = pending
        self._confirmed = confirmed
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        return self._pending

    @property
    def confirmed(self) -> int:
        return self._confirmed

    def reserve(self) -> int:
        """Return the current pending nonce and increment it."""
        with self._lock:
            nonce = self._pending
            self._pending += 1
            return nonce

    def advance_confirmed(self, candidate: int) -> int:
        """
        Raise the confirmed nonce to ``candidate`` if it is larger.

        Returns:
            The confirmed nonce after the update
        """
        with self._lock:
            if candidate > self._confirmed:
                self._confirmed = candidate
            return self._confirmed

    def reset(self, pending: int, confirmed: int) -> None:
        """
        Rebuild both counters from chain state.

        Never moves either value backwards, so a sync racing with live
        reservations cannot hand out a nonce twice.
        """
        with self._lock:
            self._pending = max(self._pending, pending)
            self._confirmed = max(self._confirmed, confirmed)

    def __repr__(self) -> str:
        return f"NonceSequencer(pending={self._pending}, confirmed={self._confirmed})"


class ChainRuntimeState:
    """
    Mutable runtime state of one network.

    Correctness depends only on the nonce sequencer and the fee-market
    flag; balances, timestamps, errors and the requester map are advisory
    and updated last-write-wins.

    Args:
        config: Static chain configuration
        rpc: RPC facade shared by every transfer on this chain
        nonces: Nonce sequencer (fresh one at 0/0 if not given)
        max_recent_errors: Capacity of the recent error set
        clock: Time source returning epoch seconds
    """

    def __init__(
        self,
        config: ChainConfig,
        rpc: IChainRpc,
        *,
        nonces: Optional[NonceSequencer] = None,
        max_recent_errors: int = DEFAULT_MAX_RECENT_ERRORS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.rpc = rpc
        self.nonces = nonces or NonceSequencer()
        self._clock = clock
        self._use_fee_market = True
        self._recent_errors: BoundedSet[str] = BoundedSet(max_recent_errors)
        self._requesters: Dict[str, float] = {}

        self.last_seen_balance: Optional[int] = None
        self.last_requested_at: Optional[float] = None
        self.last_confirmed_at: Optional[float] = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def chain_id(self) -> int:
        return self.config.chain_id

    @property
    def name(self) -> str:
        return self.config.name

    # ------------------------------------------------------------------
    # Nonces
    # ------------------------------------------------------------------

    @property
    def pending_nonce(self) -> int:
        return self.nonces.pending

    @property
    def confirmed_nonce(self) -> int:
        return self.nonces.confirmed

    def reserve_nonce(self) -> int:
        return self.nonces.reserve()

    def advance_confirmed(self, candidate: int) -> int:
        return self.nonces.advance_confirmed(candidate)

    # ------------------------------------------------------------------
    # Fee mode
    # ------------------------------------------------------------------

    @property
    def use_fee_market(self) -> bool:
        return self._use_fee_market

    def disable_fee_market(self, reason: str = "") -> None:
        """Switch this chain to legacy gas pricing for the rest of the process."""
        if not self._use_fee_market:
            return
        self._use_fee_market = False
        _logger.info(
            "Chain does not seem to support EIP-1559, using legacy gas price",
            extra={"chain_id": self.chain_id, "reason": reason},
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    @property
    def recent_errors(self) -> List[str]:
        return self._recent_errors.to_list()

    def record_error(self, message: str) -> None:
        self._recent_errors.add(message)

    def mark_confirmed(self, at: Optional[float] = None) -> None:
        self.last_confirmed_at = self._clock() if at is None else at

    # ------------------------------------------------------------------
    # Requesters
    # ------------------------------------------------------------------

    def record_request(self, address: str, at: Optional[float] = None) -> None:
        """Remember when ``address`` was last served on this chain."""
        now = self._clock() if at is None else at
        self._requesters[address.lower()] = now
        self.last_requested_at = now

    def last_served(self, address: str) -> Optional[float]:
        return self._requesters.get(address.lower())

    @property
    def tracked_requesters(self) -> int:
        return len(self._requesters)

    # ------------------------------------------------------------------
    # Startup / status
    # ------------------------------------------------------------------

    async def sync_from_chain(self, address: str) -> None:
        """
        Rebuild nonces and balance from the chain.

        Both counters start at the "pending" transaction count. Nonces
        between the "latest" and "pending" counts belong to transactions
        left in the mempool by an earlier process; nothing here tracks
        them, so the confirmed ratchet starts past them.

        Args:
            address: The faucet account address
        """
        pending = await retry_async(
            lambda: self.rpc.get_transaction_count(address, "pending"), SYNC_RETRY
        )
        latest = await retry_async(
            lambda: self.rpc.get_transaction_count(address, "latest"), SYNC_RETRY
        )
        self.nonces.reset(pending=pending, confirmed=pending)
        self.last_seen_balance = await retry_async(
            lambda: self.rpc.get_balance(address), BALANCE_RETRY
        )
        if pending > latest:
            _logger.warning(
                "Inherited unconfirmed transactions",
                extra={"chain_id": self.chain_id, "latest": latest, "pending": pending},
            )
        _logger.info(
            "Chain state synced",
            extra={
                "chain_id": self.chain_id,
                "pending_nonce": self.pending_nonce,
                "confirmed_nonce": self.confirmed_nonce,
                "balance": self.last_seen_balance,
            },
        )

    async def refresh_confirmed(self, address: str) -> int:
        """
        Advance the confirmed ratchet to the on-chain "latest" count.

        Catches up on nonces whose transfers ended without observing
        their own confirmation.

        Returns:
            The confirmed nonce after the update

        Raises:
            RpcError: If the count cannot be fetched after retries
        """
        latest = await retry_async(
            lambda: self.rpc.get_transaction_count(address, "latest"), SYNC_RETRY
        )
        return self.advance_confirmed(latest)

    def snapshot(self, faucet_address: str, amount: int) -> ChainStatus:
        """
        Build a read-only status view of this chain.

        Args:
            faucet_address: Address of the dispensing account
            amount: Payout amount in wei

        Returns:
            ChainStatus snapshot
        """
        balance = self.last_seen_balance
        explorer_url = None
        if self.config.explorers:
            explorer_url = f"{self.config.explorers[0]}/address/{faucet_address}"

        return ChainStatus(
            chain_id=self.chain_id,
            name=self.name,
            pending_nonce=self.pending_nonce,
            confirmed_nonce=self.confirmed_nonce,
            balance=balance,
            currency_symbol=self.config.native_currency_symbol,
            servings_left=balance // amount if balance is not None and amount > 0 else None,
            explorer_url=explorer_url,
            use_fee_market=self.use_fee_market,
            last_requested_at=self.last_requested_at,
            last_confirmed_at=self.last_confirmed_at,
            tracked_requesters=self.tracked_requesters,
            recent_errors=self.recent_errors,
        )

    def __repr__(self) -> str:
        return (
            f"ChainRuntimeState(chain_id={self.chain_id}, "
            f"pending={self.pending_nonce}, confirmed={self.confirmed_nonce}, "
            f"fee_market={self._use_fee_market})"
        )
