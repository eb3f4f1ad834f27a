"""
Chain RPC facade.

Abstracts the handful of JSON-RPC calls the transaction engine needs
against one network endpoint. Every transport or protocol failure is
surfaced as an RpcError carrying the node's message and a status code;
a transaction that the node does not know yet is not an error.

One instance is created per chain and shared by every transfer on that
chain, so implementations must be safe for concurrent use.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Sequence, Tuple, TypeVar

from eth_utils import to_checksum_address
from web3 import AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound

from evmfaucet.constants import PROVIDER_TIMEOUT_SECONDS
from evmfaucet.errors import UNKNOWN_CODE, RpcError
from evmfaucet.utils.logging import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")

__all__ = ["IChainRpc", "Web3ChainRpc", "extract_rpc_error"]


class IChainRpc(Protocol):
    """Operations the transaction engine consumes from a chain endpoint."""

    chain_id: int

    async def estimate_gas(self, tx: Dict[str, Any]) -> Optional[int]: ...

    async def gas_price(self) -> Optional[int]: ...

    async def get_balance(self, address: str) -> Optional[int]: ...

    async def get_transaction_by_hash(self, tx_hash: str) -> Optional[Dict[str, Any]]: ...

    async def send_raw_transaction(self, raw_tx: str) -> Optional[str]: ...

    async def get_transaction_count(self, address: str, block: str = "latest") -> int: ...

    async def fee_history(
        self,
        block_count: int,
        newest_block: str,
        reward_percentiles: Sequence[float],
    ) -> Dict[str, Any]: ...


def extract_rpc_error(error: BaseException) -> Tuple[int, str]:
    """
    Pull a (code, message) pair out of whatever web3 raised.

    Handles JSON-RPC error payloads (``Web3RPCError.rpc_response`` or a
    dict passed as the first exception argument), HTTP errors carrying a
    ``status`` attribute, and plain transport exceptions.
    """
    payload: Optional[Dict[str, Any]] = None

    rpc_response = getattr(error, "rpc_response", None)
    if isinstance(rpc_response, dict) and isinstance(rpc_response.get("error"), dict):
        payload = rpc_response["error"]
    elif error.args and isinstance(error.args[0], dict):
        payload = error.args[0]

    if payload is not None:
        try:
            code = int(payload.get("code", UNKNOWN_CODE))
        except (TypeError, ValueError):
            code = UNKNOWN_CODE
        message = payload.get("message") or payload.get("reason") or str(payload)
        return code, str(message)

    status = getattr(error, "status", None)
    if isinstance(status, int):
        return status, str(error) or f"HTTP {status}"

    return UNKNOWN_CODE, str(error) or error.__class__.__name__


class Web3ChainRpc:
    """
    IChainRpc implementation backed by ``AsyncWeb3``.

    Example:
        >>> rpc = Web3ChainRpc("https://rpc.sepolia.org", chain_id=11155111)
        >>> balance = await rpc.get_balance("0x...")
    """

    def __init__(
        self,
        rpc_url: str,
        chain_id: int,
        timeout: int = PROVIDER_TIMEOUT_SECONDS,
        w3: Optional[AsyncWeb3] = None,
    ) -> None:
        self.chain_id = chain_id
        self.rpc_url = rpc_url
        self._w3 = w3 or AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout})
        )

    async def _call(self, method: str, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        except RpcError:
            raise
        except Exception as e:
            code, message = extract_rpc_error(e)
            _logger.debug(
                "RPC call failed",
                extra={"chain_id": self.chain_id, "method": method, "code": code, "error": message},
            )
            raise RpcError(message, code=code, chain_id=self.chain_id) from e

    async def estimate_gas(self, tx: Dict[str, Any]) -> Optional[int]:
        result = await self._call("eth_estimateGas", lambda: self._w3.eth.estimate_gas(tx))
        return int(result) if result is not None else None

    async def gas_price(self) -> Optional[int]:
        async def fetch() -> Any:
            return await self._w3.eth.gas_price

        result = await self._call("eth_gasPrice", fetch)
        return int(result) if result is not None else None

    async def get_balance(self, address: str) -> Optional[int]:
        checksummed = to_checksum_address(address)
        result = await self._call("eth_getBalance", lambda: self._w3.eth.get_balance(checksummed))
        return int(result) if result is not None else None

    async def get_transaction_by_hash(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        async def fetch() -> Optional[Dict[str, Any]]:
            try:
                tx = await self._w3.eth.get_transaction(tx_hash)
            except TransactionNotFound:
                return None
            return dict(tx) if tx is not None else None

        return await self._call("eth_getTransactionByHash", fetch)

    async def send_raw_transaction(self, raw_tx: str) -> Optional[str]:
        result = await self._call(
            "eth_sendRawTransaction",
            lambda: self._w3.eth.send_raw_transaction(raw_tx),
        )
        if result is None:
            return None
        return result if isinstance(result, str) else Web3.to_hex(result)

    async def get_transaction_count(self, address: str, block: str = "latest") -> int:
        checksummed = to_checksum_address(address)
        result = await self._call(
            "eth_getTransactionCount",
            lambda: self._w3.eth.get_transaction_count(checksummed, block),
        )
        return int(result)

    async def fee_history(
        self,
        block_count: int,
        newest_block: str,
        reward_percentiles: Sequence[float],
    ) -> Dict[str, Any]:
        result = await self._call(
            "eth_feeHistory",
            lambda: self._w3.eth.fee_history(block_count, newest_block, list(reward_percentiles)),
        )
        return dict(result)

    def __repr__(self) -> str:
        return f"Web3ChainRpc(chain_id={self.chain_id}, rpc_url={self.rpc_url!r})"
