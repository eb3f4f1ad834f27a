"""
Retry policies for chain RPC calls.

Each policy classifies a failed attempt as RETRY, ABORT or IGNORE and is
plugged into ``RetryConfig.classify``. The presets at the bottom bind the
policies to the attempt limits and backoff used at each call site.
"""

from __future__ import annotations

from evmfaucet.constants import (
    FEE_ORACLE_ATTEMPTS,
    RETRY_BASE_DELAY_MS,
    RETRY_LIMITED_ATTEMPTS,
    RETRY_MAX_DELAY_MS,
)
from evmfaucet.errors import FeeMarketUnsupportedError, RpcError
from evmfaucet.utils.retry import RetryConfig, RetryDecision

# Node responses meaning this transaction (or one with the same nonce)
# has already been accepted
KNOWN_REJECTIONS = (
    "already known",
    "already exists",
    "known transaction",
    "replacement transaction underpriced",
    "transaction underpriced",
    "nonce too low",
)


def is_known_rejection(error: BaseException) -> bool:
    message = getattr(error, "message", None) or str(error)
    message = message.lower()
    return any(marker in message for marker in KNOWN_REJECTIONS)


def transient_policy(error: BaseException) -> RetryDecision:
    """Retry RPC failures, abort on anything else."""
    if isinstance(error, RpcError):
        return RetryDecision.RETRY
    return RetryDecision.ABORT


def broadcast_policy(error: BaseException) -> RetryDecision:
    """
    Policy for ``eth_sendRawTransaction``.

    Known rejections mean a variant of the transfer is already in the
    mempool or mined, so they are swallowed rather than retried.
    """
    if is_known_rejection(error):
        return RetryDecision.IGNORE
    return transient_policy(error)


def fee_market_policy(error: BaseException) -> RetryDecision:
    """Policy for fee oracle queries: unsupported chains are not retried."""
    if isinstance(error, FeeMarketUnsupportedError):
        return RetryDecision.ABORT
    return transient_policy(error)


def _preset(max_attempts, classify) -> RetryConfig:
    return RetryConfig(
        max_attempts=max_attempts,
        base_delay_ms=RETRY_BASE_DELAY_MS,
        max_delay_ms=RETRY_MAX_DELAY_MS,
        classify=classify,
    )


ESTIMATE_GAS_RETRY = _preset(RETRY_LIMITED_ATTEMPTS, transient_policy)
GAS_PRICE_RETRY = _preset(RETRY_LIMITED_ATTEMPTS, transient_policy)
# Balance must be known before spending
BALANCE_RETRY = _preset(None, transient_policy)
FEE_ORACLE_RETRY = _preset(FEE_ORACLE_ATTEMPTS, fee_market_policy)
BROADCAST_RETRY = _preset(RETRY_LIMITED_ATTEMPTS, broadcast_policy)
SYNC_RETRY = _preset(RETRY_LIMITED_ATTEMPTS, transient_policy)
CONFIRM_RETRY = _preset(RETRY_LIMITED_ATTEMPTS, transient_policy)

__all__ = [
    "KNOWN_REJECTIONS",
    "is_known_rejection",
    "transient_policy",
    "broadcast_policy",
    "fee_market_policy",
    "ESTIMATE_GAS_RETRY",
    "GAS_PRICE_RETRY",
    "BALANCE_RETRY",
    "FEE_ORACLE_RETRY",
    "BROADCAST_RETRY",
    "SYNC_RETRY",
    "CONFIRM_RETRY",
]
