"""
Transfer, validation and configuration exceptions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from evmfaucet.errors.base import FaucetError


class ConfigurationError(FaucetError):
    """Raised when faucet configuration is missing or invalid."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


class ValidationError(FaucetError):
    """Raised when request input validation fails."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class InvalidAddressError(ValidationError):
    """
    Raised when a requester address is not a valid EVM address.

    Example:
        >>> raise InvalidAddressError("0xnope", reason="must be 40 hex characters")
    """

    def __init__(
        self,
        address: str,
        *,
        field: str = "address",
        reason: Optional[str] = None,
    ) -> None:
        message = f"Invalid {field}: {address}"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message,
            code="INVALID_ADDRESS",
            details={"address": address, "field": field, "reason": reason},
        )
        self.address = address
        self.reason = reason


class UnknownChainError(ValidationError):
    """Raised when a request names a chain the faucet does not serve."""

    def __init__(self, chain_id: int) -> None:
        super().__init__(
            f"Chain {chain_id} is not configured",
            code="UNKNOWN_CHAIN",
            details={"chain_id": chain_id},
        )
        self.chain_id = chain_id


class FaucetDryError(FaucetError):
    """
    Raised when the faucet balance cannot cover a payout plus its reserve.

    Terminal for the transfer, never retried.
    """

    def __init__(self, balance: int, required: int, *, chain_id: Optional[int] = None) -> None:
        super().__init__(
            "Faucet is dry",
            code="FAUCET_DRY",
            details={"balance": balance, "required": required, "chain_id": chain_id},
        )
        self.balance = balance
        self.required = required


class GasEstimationError(FaucetError):
    """
    Raised when the gas limit cannot be estimated after retries.

    Step-local: the sender records it and retries on its next poll tick.
    """

    def __init__(self, message: str, *, nonce: Optional[int] = None) -> None:
        super().__init__(message, code="GAS_ESTIMATION_FAILED", details={"nonce": nonce})
        self.nonce = nonce


class FeeOracleError(FaucetError):
    """
    Raised when fee-market suggestions stay unavailable after retries.

    Step-local like GasEstimationError. A chain that reports no fee
    market at all raises FeeMarketUnsupportedError instead.
    """

    def __init__(self, message: str, *, chain_id: Optional[int] = None) -> None:
        super().__init__(message, code="FEE_ORACLE_UNAVAILABLE", details={"chain_id": chain_id})
        self.chain_id = chain_id
