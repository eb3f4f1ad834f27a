"""
Exception hierarchy for the faucet.

- FaucetError: base class with code/tx_hash/details
- RpcError: typed RPC failure (message + status code)
- FeeMarketUnsupportedError: chain lacks EIP-1559 fee market
- ConfigurationError, ValidationError, InvalidAddressError, UnknownChainError
- FaucetDryError: balance below payout reserve
- GasEstimationError: step-local gas estimation failure
- FeeOracleError: step-local fee oracle failure
"""

from evmfaucet.errors.base import FaucetError
from evmfaucet.errors.rpc import (
    METHOD_NOT_FOUND,
    UNKNOWN_CODE,
    FeeMarketUnsupportedError,
    RpcError,
)
from evmfaucet.errors.transfer import (
    ConfigurationError,
    FaucetDryError,
    FeeOracleError,
    GasEstimationError,
    InvalidAddressError,
    UnknownChainError,
    ValidationError,
)

__all__ = [
    "FaucetError",
    "RpcError",
    "FeeMarketUnsupportedError",
    "METHOD_NOT_FOUND",
    "UNKNOWN_CODE",
    "ConfigurationError",
    "ValidationError",
    "InvalidAddressError",
    "UnknownChainError",
    "FaucetDryError",
    "FeeOracleError",
    "GasEstimationError",
]
