"""
Faucet facade.

Ties configuration, signer, per-chain runtime state and the transaction
sender together. HTTP handlers call ``Faucet.send`` with a chain id and a
requester address and get back a TransferOutcome.

Example:
    ```python
    from evmfaucet import Faucet, load_config

    faucet = await Faucet.create(load_config("faucet.json"))
    outcome = await faucet.send(11155111, "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb1")
    ```
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Dict, List, Optional

from evmfaucet.chain.rpc import IChainRpc, Web3ChainRpc
from evmfaucet.chain.state import ChainRuntimeState
from evmfaucet.config import ChainConfig, FaucetConfig
from evmfaucet.errors import UnknownChainError
from evmfaucet.sender import TransactionSender, TransferOutcome
from evmfaucet.signing import LocalSigner
from evmfaucet.status import FaucetStatus
from evmfaucet.utils.logging import LogContext, get_logger
from evmfaucet.utils.validation import validate_address

_logger = get_logger(__name__)

RpcFactory = Callable[[ChainConfig], IChainRpc]

__all__ = ["Faucet", "RpcFactory"]


class Faucet:
    """
    Multi-chain faucet.

    Prefer ``Faucet.create`` which builds the RPC clients and rebuilds
    nonces and balances from chain state.

    Args:
        config: Faucet configuration
        signer: Signer holding the dispensing key
        chains: Runtime state per chain
        sender: Transaction sender shared by all chains
    """

    def __init__(
        self,
        config: FaucetConfig,
        signer: LocalSigner,
        chains: List[ChainRuntimeState],
        sender: TransactionSender,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._signer = signer
        self._chains: Dict[int, ChainRuntimeState] = {c.chain_id: c for c in chains}
        self._sender = sender
        self._clock = clock

    @classmethod
    async def create(
        cls,
        config: FaucetConfig,
        rpc_factory: Optional[RpcFactory] = None,
        sync: bool = True,
        *,
        clock: Callable[[], float] = time.time,
    ) -> "Faucet":
        """
        Factory method for creating a Faucet with async initialization.

        Args:
            config: Faucet configuration
            rpc_factory: Builds the RPC facade for a chain (Web3ChainRpc by default)
            sync: Rebuild nonces and balances from the chain before serving

        Returns:
            Initialized Faucet

        Raises:
            ConfigurationError: If the private key is invalid
            RpcError: If a chain cannot be synced
        """
        signer = LocalSigner(config.private_key.get_secret_value())
        sender_config = config.sender

        if rpc_factory is None:
            def rpc_factory(chain: ChainConfig) -> IChainRpc:
                return Web3ChainRpc(
                    chain.rpc_url, chain.chain_id, timeout=sender_config.rpc_timeout
                )

        chains = [
            ChainRuntimeState(
                chain,
                rpc_factory(chain),
                max_recent_errors=sender_config.max_recent_errors,
                clock=clock,
            )
            for chain in config.chains
        ]

        if sync:
            await asyncio.gather(*(c.sync_from_chain(signer.address) for c in chains))

        sender = TransactionSender(signer, config.amount, sender_config, clock=clock)
        faucet = cls(config, signer, chains, sender, clock=clock)
        _logger.info(
            "Faucet ready",
            extra={"address": signer.address, "chains": [c.chain_id for c in chains]},
        )
        return faucet

    @property
    def address(self) -> str:
        """Address of the dispensing account."""
        return self._signer.address

    @property
    def amount(self) -> int:
        return self._config.amount

    @property
    def chains(self) -> List[ChainRuntimeState]:
        return list(self._chains.values())

    def chain(self, chain_id: int) -> ChainRuntimeState:
        try:
            return self._chains[chain_id]
        except KeyError:
            raise UnknownChainError(chain_id) from None

    async def send(self, chain_id: int, address: str) -> TransferOutcome:
        """
        Pay out to ``address`` on ``chain_id``.

        Args:
            chain_id: Target chain
            address: Requester address

        Returns:
            TransferConfirmed or TransferFailed

        Raises:
            UnknownChainError: If the chain is not configured
            InvalidAddressError: If the address is malformed
        """
        chain = self.chain(chain_id)
        destination = validate_address(address)
        chain.record_request(destination, at=self._clock())

        with LogContext(requester=destination):
            return await self._sender.send(destination, chain)

    def status(self) -> FaucetStatus:
        """Read-only snapshot of every chain."""
        return FaucetStatus(
            address=self.address,
            chains=[c.snapshot(self.address, self.amount) for c in self._chains.values()],
        )

    def __repr__(self) -> str:
        return f"Faucet(address={self.address}, chains={list(self._chains)})"
