"""
Transaction sender.

Drives one transfer from nonce reservation to a final outcome:

    RESERVED -> AWAITING_WINDOW -> SUBMITTING -> AWAITING_CONFIRMATION
             -> CONFIRMED | FAILED

The sender reserves a nonce before any network call, then polls. While
the reserved nonce is within ``window`` of the chain's confirmed nonce it
(re)builds, signs and broadcasts a transaction for it, escalating the fee
on every re-pricing. While it waits behind earlier nonces it re-reads the
chain's "latest" transaction count, so nonces whose transfers gave up do
not hold it back. Once the reserved nonce is the next one the chain
expects, it looks for any broadcast variant in a mined block.

The caller always receives exactly one TransferConfirmed or
TransferFailed. Step-local problems (gas estimation, fee oracle,
broadcast rejections) are retried on the next tick; only a dry faucet or
an RPC error surfacing from the loop ends the transfer early.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Union

from evmfaucet.chain.policies import (
    BALANCE_RETRY,
    BROADCAST_RETRY,
    CONFIRM_RETRY,
    ESTIMATE_GAS_RETRY,
)
from evmfaucet.chain.state import ChainRuntimeState
from evmfaucet.config import SenderConfig
from evmfaucet.errors import (
    FaucetDryError,
    FeeOracleError,
    GasEstimationError,
    RpcError,
)
from evmfaucet.fees.strategy import FeeStrategy
from evmfaucet.signing import LocalSigner, SignedTransfer, TransferDraft
from evmfaucet.utils.logging import LogContext, get_logger
from evmfaucet.utils.retry import retry_async

_logger = get_logger(__name__)

__all__ = [
    "TransferConfirmed",
    "TransferFailed",
    "TransferOutcome",
    "TransferState",
    "PendingTransfer",
    "TransactionSender",
]


# ============================================================================
# Outcomes
# ============================================================================

@dataclass(frozen=True)
class TransferConfirmed:
    tx_hash: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class TransferFailed:
    reason: str

    @property
    def ok(self) -> bool:
        return False


TransferOutcome = Union[TransferConfirmed, TransferFailed]


# ============================================================================
# Transfer State
# ============================================================================

class TransferState(Enum):
    RESERVED = "reserved"
    AWAITING_WINDOW = "awaiting_window"
    SUBMITTING = "submitting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class PendingTransfer:
    """
    One in-flight send request.

    ``submitted_hashes`` keeps every signed variant ever broadcast for the
    nonce, oldest first; any of them confirming completes the transfer.
    ``reprice_due`` is set when a confirmation round found none of them
    mined; only then may a legacy fee be bumped.
    """

    nonce: int
    destination: str
    value: int
    chain_id: int
    draft: TransferDraft
    state: TransferState = TransferState.RESERVED
    broadcasts: int = 0
    reprice_due: bool = False
    refreshed_at: Optional[float] = None
    _hashes: Dict[str, None] = field(default_factory=dict, repr=False)

    @property
    def submitted_hashes(self) -> List[str]:
        return list(self._hashes)

    def record_hash(self, tx_hash: str) -> None:
        self._hashes.setdefault(tx_hash, None)


# ============================================================================
# Transaction Sender
# ============================================================================

class TransactionSender:
    """
    Sends the faucet payout to an address on one chain.

    Example:
        >>> sender = TransactionSender(signer, amount=10**17)
        >>> outcome = await sender.send("0xabc...", chain)
        >>> if outcome.ok:
        ...     print(outcome.tx_hash)

    Args:
        signer: Signs transaction drafts for the faucet account
        amount: Payout per request in wei
        config: Sender tunables (window, polling cadence, reserve)
        clock: Time source returning epoch seconds
        sleep: Coroutine used for every poll pause
        fees: Fee strategy (built from ``config`` and ``clock`` if omitted)
    """

    def __init__(
        self,
        signer: LocalSigner,
        amount: int,
        config: Optional[SenderConfig] = None,
        *,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        fees: Optional[FeeStrategy] = None,
    ) -> None:
        self._signer = signer
        self._amount = amount
        self._config = config or SenderConfig()
        self._clock = clock
        self._sleep = sleep
        self._fees = fees or FeeStrategy(self._config, clock)

    @property
    def amount(self) -> int:
        return self._amount

    @property
    def config(self) -> SenderConfig:
        return self._config

    async def send(self, destination: str, chain: ChainRuntimeState) -> TransferOutcome:
        """
        Send the payout and wait for it to be mined.

        Cancelling the calling task propagates CancelledError; the
        reserved nonce is not handed back, and anything already broadcast
        may still confirm.

        Args:
            destination: Checksummed recipient address
            chain: Runtime state of the chain to send on

        Returns:
            TransferConfirmed with the mined hash, or TransferFailed
        """
        nonce = chain.reserve_nonce()
        transfer = PendingTransfer(
            nonce=nonce,
            destination=destination,
            value=self._amount,
            chain_id=chain.chain_id,
            draft=TransferDraft(
                chain_id=chain.chain_id,
                nonce=nonce,
                sender=self._signer.address,
                to=destination,
                value=self._amount,
            ),
        )

        with LogContext(chain_id=chain.chain_id, nonce=nonce):
            _logger.info("Nonce reserved", extra={"destination": destination})
            try:
                return await self._run(transfer, chain)
            except FaucetDryError as e:
                transfer.state = TransferState.FAILED
                chain.record_error(e.message)
                _logger.warning(
                    "Faucet is dry",
                    extra={"balance": e.balance, "required": e.required},
                )
                return TransferFailed(e.message)
            except RpcError as e:
                transfer.state = TransferState.FAILED
                chain.record_error(e.message)
                _logger.error(
                    "Transfer failed",
                    extra={"error": e.message, "status_code": e.status_code},
                )
                return TransferFailed(e.message)

    async def _run(self, transfer: PendingTransfer, chain: ChainRuntimeState) -> TransferOutcome:
        transfer.state = TransferState.AWAITING_WINDOW

        while True:
            delta = transfer.nonce - chain.confirmed_nonce

            if delta < self._config.window:
                await self._build_and_send(transfer, chain)

            if transfer.submitted_hashes:
                if delta > 0:
                    await self._refresh_confirmed(transfer, chain)
                else:
                    tx_hash = await self._await_confirmation(transfer, chain)
                    if tx_hash is not None:
                        transfer.state = TransferState.CONFIRMED
                        return TransferConfirmed(tx_hash)
                    transfer.reprice_due = True

            transfer.state = TransferState.AWAITING_WINDOW
            await self._sleep(self._config.poll_interval)

    # ------------------------------------------------------------------
    # Build and send
    # ------------------------------------------------------------------

    async def _build_and_send(self, transfer: PendingTransfer, chain: ChainRuntimeState) -> None:
        transfer.state = TransferState.SUBMITTING
        try:
            gas_limit = await self._estimate_gas(transfer, chain)
            fee = await self._fees.resolve(
                chain, transfer.draft.fee, escalate=transfer.reprice_due
            )
        except (GasEstimationError, FeeOracleError) as e:
            chain.record_error(e.message)
            _logger.warning(
                "Submission step failed, retrying next tick", extra={"error": e.message}
            )
            return

        transfer.reprice_due = False
        transfer.draft = transfer.draft.with_gas_limit(gas_limit).with_fee(fee)
        signed = self._signer.sign(transfer.draft)

        await self._check_balance(transfer, chain)

        transfer.record_hash(signed.hash)
        await self._broadcast(transfer, chain, signed)

    async def _estimate_gas(self, transfer: PendingTransfer, chain: ChainRuntimeState) -> int:
        params = transfer.draft.estimate_params()

        async def estimate() -> int:
            gas = await chain.rpc.estimate_gas(params)
            if gas is None:
                raise RpcError("Could not estimate gas limit", code=404, chain_id=chain.chain_id)
            return gas

        try:
            return await retry_async(estimate, ESTIMATE_GAS_RETRY)
        except RpcError as e:
            raise GasEstimationError(e.message, nonce=transfer.nonce) from e

    async def _check_balance(self, transfer: PendingTransfer, chain: ChainRuntimeState) -> None:
        async def fetch() -> int:
            balance = await chain.rpc.get_balance(self._signer.address)
            if balance is None:
                raise RpcError("Could not get balance", code=404, chain_id=chain.chain_id)
            return balance

        balance = await retry_async(fetch, BALANCE_RETRY)
        chain.last_seen_balance = balance

        required = self._config.reserve_multiplier * transfer.value
        if balance < required:
            raise FaucetDryError(balance, required, chain_id=chain.chain_id)

    async def _broadcast(
        self,
        transfer: PendingTransfer,
        chain: ChainRuntimeState,
        signed: SignedTransfer,
    ) -> None:
        async def submit() -> str:
            result = await chain.rpc.send_raw_transaction(signed.raw_hex)
            if not isinstance(result, str) or not result.startswith("0x"):
                _logger.error("sendRawTransaction returned no hash", extra={"result": result})
                raise RpcError("Got no hash from RPC for tx", code=404, chain_id=chain.chain_id)
            return result

        transfer.broadcasts += 1
        try:
            accepted = await retry_async(submit, BROADCAST_RETRY)
        except RpcError as e:
            # The poll loop re-prices and resubmits if nothing confirms
            _logger.warning(
                "Broadcast failed",
                extra={"tx_hash": signed.hash, "error": e.message},
            )
            return

        if accepted is None:
            _logger.debug("Broadcast rejected as known", extra={"tx_hash": signed.hash})
        else:
            _logger.info("Transaction broadcast", extra={"tx_hash": signed.hash})

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    async def _refresh_confirmed(
        self,
        transfer: PendingTransfer,
        chain: ChainRuntimeState,
    ) -> None:
        # Earlier nonces may have been mined by transfers that gave up
        now = self._clock()
        if (
            transfer.refreshed_at is not None
            and now - transfer.refreshed_at < self._config.confirmation_interval
        ):
            return
        transfer.refreshed_at = now

        try:
            confirmed = await chain.refresh_confirmed(self._signer.address)
        except RpcError as e:
            _logger.debug("Could not refresh confirmed nonce", extra={"error": e.message})
            return
        _logger.debug("Confirmed nonce refreshed", extra={"confirmed_nonce": confirmed})

    async def _await_confirmation(
        self,
        transfer: PendingTransfer,
        chain: ChainRuntimeState,
    ) -> Optional[str]:
        transfer.state = TransferState.AWAITING_CONFIRMATION

        for _ in range(self._config.confirmation_attempts):
            for tx_hash in transfer.submitted_hashes:
                tx = await retry_async(
                    lambda h=tx_hash: chain.rpc.get_transaction_by_hash(h), CONFIRM_RETRY
                )
                if tx is not None and tx.get("blockNumber") is not None:
                    chain.advance_confirmed(transfer.nonce + 1)
                    chain.mark_confirmed()
                    _logger.info(
                        "Transfer confirmed",
                        extra={"tx_hash": tx_hash, "block_number": tx["blockNumber"]},
                    )
                    return tx_hash
                await self._sleep(self._config.hash_check_interval)
            await self._sleep(self._config.confirmation_interval)

        _logger.info(
            "Not confirmed yet, re-pricing",
            extra={"variants": len(transfer.submitted_hashes)},
        )
        return None
