"""
RPC-related exceptions.

Every transport or JSON-RPC failure coming out of the chain facade is
raised as an RpcError carrying the node's message and a status code.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from evmfaucet.errors.base import FaucetError

# JSON-RPC "method not found"
METHOD_NOT_FOUND = -32601

# Used when the failure carried no code (transport errors, timeouts)
UNKNOWN_CODE = -1


class RpcError(FaucetError):
    """
    Raised when an RPC call against a chain endpoint fails.

    Example:
        >>> raise RpcError("already known", code=-32000, chain_id=5)
    """

    def __init__(
        self,
        message: str,
        *,
        code: int = UNKNOWN_CODE,
        chain_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["status_code"] = code
        if chain_id is not None:
            details["chain_id"] = chain_id

        super().__init__(message, code="RPC_ERROR", details=details)
        self.status_code = code
        self.chain_id = chain_id


class FeeMarketUnsupportedError(RpcError):
    """
    Raised when a chain does not support EIP-1559 fee market queries.

    Not retried: the chain is downgraded to legacy gas pricing instead.
    """

    def __init__(
        self,
        message: str = "Fee market not supported",
        *,
        code: int = METHOD_NOT_FOUND,
        chain_id: Optional[int] = None,
    ) -> None:
        super().__init__(message, code=code, chain_id=chain_id)
        self.code = "FEE_MARKET_UNSUPPORTED"
