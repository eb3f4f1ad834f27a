"""
Transaction drafts and local signing.

A TransferDraft is immutable: every escalation step (new gas limit, new
fee) produces a new draft, so a stale signature can never be reused for
a re-priced transaction. Signing, encoding and hashing are delegated to
eth_account.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from eth_account import Account
from eth_utils import encode_hex

from evmfaucet.errors import ConfigurationError
from evmfaucet.fees.strategy import Fee, LegacyFee, MarketFee

__all__ = ["TransferDraft", "SignedTransfer", "LocalSigner"]

# EIP-2718 type of fee-market transactions
DYNAMIC_FEE_TX_TYPE = 2


@dataclass(frozen=True)
class TransferDraft:
    """
    Unsigned native-currency transfer.

    The transaction shape follows the fee: a LegacyFee yields an EIP-155
    transaction, a MarketFee an EIP-1559 one.
    """

    chain_id: int
    nonce: int
    sender: str
    to: str
    value: int
    gas_limit: Optional[int] = None
    fee: Optional[Fee] = None

    def with_gas_limit(self, gas_limit: int) -> "TransferDraft":
        return replace(self, gas_limit=gas_limit)

    def with_fee(self, fee: Fee) -> "TransferDraft":
        return replace(self, fee=fee)

    def estimate_params(self) -> Dict[str, Any]:
        """Fields passed to ``eth_estimateGas``."""
        return {"from": self.sender, "to": self.to, "value": self.value}

    def to_tx_dict(self) -> Dict[str, Any]:
        """
        Build the transaction dict accepted by ``Account.sign_transaction``.

        Raises:
            ValueError: If gas limit or fee have not been set yet
        """
        if self.gas_limit is None or self.fee is None:
            raise ValueError("Draft needs a gas limit and a fee before signing")

        tx: Dict[str, Any] = {
            "chainId": self.chain_id,
            "nonce": self.nonce,
            "to": self.to,
            "value": self.value,
            "gas": self.gas_limit,
            "data": b"",
        }

        if isinstance(self.fee, MarketFee):
            tx["type"] = DYNAMIC_FEE_TX_TYPE
            tx["maxFeePerGas"] = self.fee.max_fee
            tx["maxPriorityFeePerGas"] = self.fee.max_priority_fee
            tx["accessList"] = []
        elif isinstance(self.fee, LegacyFee):
            tx["gasPrice"] = self.fee.gas_price
        else:
            raise ValueError(f"Unsupported fee type: {type(self.fee).__name__}")

        return tx


@dataclass(frozen=True)
class SignedTransfer:
    raw: bytes
    hash: str

    @property
    def raw_hex(self) -> str:
        return encode_hex(self.raw)


class LocalSigner:
    """
    Signs drafts with an in-memory private key.

    Example:
        >>> signer = LocalSigner(os.environ["FAUCET_PRIVATE_KEY"])
        >>> signed = signer.sign(draft)
        >>> signed.hash
        '0x...'
    """

    def __init__(self, private_key: str) -> None:
        try:
            self._account = Account.from_key(private_key)
        except Exception:
            # Never echo the key back
            raise ConfigurationError("Invalid private key") from None

    @property
    def address(self) -> str:
        return self._account.address

    def sign(self, draft: TransferDraft) -> SignedTransfer:
        signed = self._account.sign_transaction(draft.to_tx_dict())
        return SignedTransfer(
            raw=bytes(signed.raw_transaction),
            hash=encode_hex(bytes(signed.hash)),
        )

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address})"
