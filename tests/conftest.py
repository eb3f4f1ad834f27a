"""
Shared fixtures for faucet tests.

FakeChainRpc simulates one node in memory: balances, transaction counts,
a mempool that can mine on broadcast, fee history, and scripted failures
per RPC method.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence
from unittest.mock import patch

import pytest
from eth_utils import keccak, to_hex
from pydantic import SecretStr

from evmfaucet.chain.state import ChainRuntimeState, NonceSequencer
from evmfaucet.config import ChainConfig, FaucetConfig, SenderConfig
from evmfaucet.signing import LocalSigner


# =============================================================================
# Test Constants
# =============================================================================

# Well-known development key (hardhat account #0)
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
OTHER_RECIPIENT = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

TEST_CHAIN_ID = 11155111
TEST_AMOUNT = 10**17
ONE_ETH = 10**18


# =============================================================================
# Fake Node
# =============================================================================


class FakeChainRpc:
    """In-memory IChainRpc implementation."""

    def __init__(
        self,
        chain_id: int = TEST_CHAIN_ID,
        *,
        balance: int = 10 * ONE_ETH,
        gas_price: int = 1_000_000_000,
        gas_estimate: int = 21_000,
        base_fee: int = 10_000_000_000,
        rewards: Sequence[int] = (1_000_000_000, 1_500_000_000, 2_000_000_000),
        auto_mine: bool = True,
        pending_count: int = 0,
        latest_count: int = 0,
    ) -> None:
        self.chain_id = chain_id
        self.balance: Optional[int] = balance
        self.gas_price_value: Optional[int] = gas_price
        self.gas_estimate: Optional[int] = gas_estimate
        self.base_fee = base_fee
        self.rewards = list(rewards)
        self.auto_mine = auto_mine
        self.tx_counts = {"pending": pending_count, "latest": latest_count}

        self.broadcast_raw: List[str] = []
        self.broadcast_hashes: List[str] = []
        self.mined: Dict[str, int] = {}
        self.send_response: Optional[Callable[[str], Optional[str]]] = None
        self.on_broadcast: Optional[Callable[["FakeChainRpc", str], None]] = None

        self.calls: Dict[str, int] = {}
        self._failures: Dict[str, List[BaseException]] = {}
        self._block = 100

    # -- scripting -------------------------------------------------------

    def fail(self, method: str, error: BaseException, times: int = 1) -> None:
        """Make the next ``times`` calls of ``method`` raise ``error``."""
        self._failures.setdefault(method, []).extend([error] * times)

    def mine(self, tx_hash: str) -> None:
        self._block += 1
        self.mined[tx_hash] = self._block

    def _enter(self, method: str) -> None:
        self.calls[method] = self.calls.get(method, 0) + 1
        pending = self._failures.get(method)
        if pending:
            raise pending.pop(0)

    # -- IChainRpc -------------------------------------------------------

    async def estimate_gas(self, tx: Dict[str, Any]) -> Optional[int]:
        self._enter("estimate_gas")
        return self.gas_estimate

    async def gas_price(self) -> Optional[int]:
        self._enter("gas_price")
        return self.gas_price_value

    async def get_balance(self, address: str) -> Optional[int]:
        self._enter("get_balance")
        return self.balance

    async def get_transaction_by_hash(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        self._enter("get_transaction_by_hash")
        if tx_hash in self.mined:
            return {"hash": tx_hash, "blockNumber": self.mined[tx_hash]}
        if tx_hash in self.broadcast_hashes:
            return {"hash": tx_hash, "blockNumber": None}
        return None

    async def send_raw_transaction(self, raw_tx: str) -> Optional[str]:
        self._enter("send_raw_transaction")
        tx_hash = to_hex(keccak(hexstr=raw_tx))
        if self.send_response is not None:
            return self.send_response(tx_hash)

        self.broadcast_raw.append(raw_tx)
        self.broadcast_hashes.append(tx_hash)
        if self.on_broadcast is not None:
            self.on_broadcast(self, tx_hash)
        if self.auto_mine:
            self.mine(tx_hash)
        return tx_hash

    async def get_transaction_count(self, address: str, block: str = "latest") -> int:
        self._enter("get_transaction_count")
        return self.tx_counts[block]

    async def fee_history(
        self,
        block_count: int,
        newest_block: str,
        reward_percentiles: Sequence[float],
    ) -> Dict[str, Any]:
        self._enter("fee_history")
        return {
            "oldestBlock": self._block - block_count + 1,
            "baseFeePerGas": [self.base_fee] * (block_count + 1),
            "gasUsedRatio": [0.5] * block_count,
            "reward": [list(self.rewards[: len(reward_percentiles)])] * block_count,
        }


class TickLimit:
    """
    Replacement for ``asyncio.sleep`` that records pauses and cancels the
    transfer after ``max_sleeps`` of them.
    """

    def __init__(self, max_sleeps: int = 10_000) -> None:
        self.max_sleeps = max_sleeps
        self.pauses: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.pauses.append(seconds)
        await asyncio.sleep(0)
        if len(self.pauses) >= self.max_sleeps:
            raise asyncio.CancelledError()


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def no_backoff():
    """Run retry loops without sleeping between attempts."""
    with patch("evmfaucet.utils.retry.calculate_delay", return_value=0.0):
        yield


@pytest.fixture
def chain_config() -> ChainConfig:
    return ChainConfig(
        chain_id=TEST_CHAIN_ID,
        name="Sepolia",
        rpc_url="https://rpc.sepolia.example",
        native_currency_symbol="SEP",
        explorers=["https://sepolia.etherscan.io/"],
    )


@pytest.fixture
def sender_config() -> SenderConfig:
    return SenderConfig(
        poll_interval=0,
        hash_check_interval=0,
        confirmation_interval=0,
        confirmation_attempts=2,
    )


@pytest.fixture
def faucet_config(chain_config: ChainConfig, sender_config: SenderConfig) -> FaucetConfig:
    return FaucetConfig(
        private_key=SecretStr(TEST_PRIVATE_KEY),
        amount=TEST_AMOUNT,
        chains=[chain_config],
        sender=sender_config,
    )


@pytest.fixture
def rpc() -> FakeChainRpc:
    return FakeChainRpc()


@pytest.fixture
def chain(chain_config: ChainConfig, rpc: FakeChainRpc) -> ChainRuntimeState:
    return ChainRuntimeState(chain_config, rpc, nonces=NonceSequencer(0, 0))


@pytest.fixture
def signer() -> LocalSigner:
    return LocalSigner(TEST_PRIVATE_KEY)
