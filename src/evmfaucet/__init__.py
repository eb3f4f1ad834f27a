"""
evmfaucet - multi-chain EVM faucet transaction engine.

Dispenses a fixed amount of native currency from one account to
requester addresses across independently configured EVM networks.

Quick Start:
    >>> from evmfaucet import Faucet, load_config
    >>> import asyncio
    >>>
    >>> async def main():
    ...     faucet = await Faucet.create(load_config("faucet.json"))
    ...     outcome = await faucet.send(11155111, "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb1")
    ...     print(outcome)
    ...
    >>> asyncio.run(main())

Modules:
- `client`: Faucet facade
- `sender`: TransactionSender state machine and outcomes
- `chain`: RPC facade, retry policies, per-chain runtime state
- `fees`: fee-market oracle and replacement-safe fee strategy
- `signing`: immutable transaction drafts and local signer
- `status`: read-only status view
- `errors`: exception hierarchy
- `utils`: retry, logging, validation and container helpers
"""

from evmfaucet.version import __version__, __version_info__

# Client
from evmfaucet.client import Faucet, RpcFactory

# Configuration
from evmfaucet.config import ChainConfig, FaucetConfig, SenderConfig, load_config

# Sender
from evmfaucet.sender import (
    PendingTransfer,
    TransactionSender,
    TransferConfirmed,
    TransferFailed,
    TransferOutcome,
    TransferState,
)

# Chain layer
from evmfaucet.chain import (
    ChainRuntimeState,
    IChainRpc,
    NonceSequencer,
    Web3ChainRpc,
)

# Fees
from evmfaucet.fees import FeeStrategy, FeeSuggestion, LegacyFee, MarketFee

# Signing
from evmfaucet.signing import LocalSigner, SignedTransfer, TransferDraft

# Status
from evmfaucet.status import ChainStatus, FaucetStatus, format_relative_time

# Errors
from evmfaucet.errors import (
    ConfigurationError,
    FaucetDryError,
    FaucetError,
    FeeMarketUnsupportedError,
    FeeOracleError,
    GasEstimationError,
    InvalidAddressError,
    RpcError,
    UnknownChainError,
    ValidationError,
)

# Logging
from evmfaucet.utils.logging import configure_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "__version_info__",
    # Client
    "Faucet",
    "RpcFactory",
    # Configuration
    "ChainConfig",
    "FaucetConfig",
    "SenderConfig",
    "load_config",
    # Sender
    "TransactionSender",
    "TransferConfirmed",
    "TransferFailed",
    "TransferOutcome",
    "TransferState",
    "PendingTransfer",
    # Chain layer
    "ChainRuntimeState",
    "NonceSequencer",
    "IChainRpc",
    "Web3ChainRpc",
    # Fees
    "FeeStrategy",
    "FeeSuggestion",
    "LegacyFee",
    "MarketFee",
    # Signing
    "LocalSigner",
    "SignedTransfer",
    "TransferDraft",
    # Status
    "ChainStatus",
    "FaucetStatus",
    "format_relative_time",
    # Errors
    "FaucetError",
    "RpcError",
    "FeeMarketUnsupportedError",
    "FeeOracleError",
    "ConfigurationError",
    "ValidationError",
    "InvalidAddressError",
    "UnknownChainError",
    "FaucetDryError",
    "GasEstimationError",
    # Logging
    "configure_logging",
    "get_logger",
]
