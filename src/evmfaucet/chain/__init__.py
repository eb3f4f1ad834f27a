"""
Chain layer: RPC facade, retry policies and per-chain runtime state.
"""

from evmfaucet.chain.policies import (
    BALANCE_RETRY,
    BROADCAST_RETRY,
    CONFIRM_RETRY,
    ESTIMATE_GAS_RETRY,
    FEE_ORACLE_RETRY,
    GAS_PRICE_RETRY,
    SYNC_RETRY,
    broadcast_policy,
    fee_market_policy,
    is_known_rejection,
    transient_policy,
)
from evmfaucet.chain.rpc import IChainRpc, Web3ChainRpc, extract_rpc_error
from evmfaucet.chain.state import ChainRuntimeState, NonceSequencer

__all__ = [
    # RPC
    "IChainRpc",
    "Web3ChainRpc",
    "extract_rpc_error",
    # Policies
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
    # State
    "NonceSequencer",
    "ChainRuntimeState",
]
