"""
Tests for transfer drafts and the local signer.
"""

import pytest
from eth_account import Account
from eth_utils import keccak

from evmfaucet.errors import ConfigurationError
from evmfaucet.fees.strategy import LegacyFee, MarketFee
from evmfaucet.signing import LocalSigner, TransferDraft

from .conftest import RECIPIENT, TEST_ADDRESS, TEST_CHAIN_ID, TEST_PRIVATE_KEY


@pytest.fixture
def draft() -> TransferDraft:
    return TransferDraft(
        chain_id=TEST_CHAIN_ID,
        nonce=3,
        sender=TEST_ADDRESS,
        to=RECIPIENT,
        value=10**17,
        gas_limit=21000,
    )


class TestTransferDraft:
    """Tests for TransferDraft."""

    def test_drafts_are_rebuilt_not_mutated(self, draft: TransferDraft) -> None:
        """Test escalation returns new drafts."""
        priced = draft.with_fee(LegacyFee(gas_price=10, computed_at=0))

        assert draft.fee is None
        assert priced.fee.gas_price == 10
        assert priced.with_gas_limit(30000).gas_limit == 30000
        assert priced.gas_limit == 21000

    def test_legacy_shape(self, draft: TransferDraft) -> None:
        """Test a legacy fee produces an EIP-155 transaction dict."""
        tx = draft.with_fee(LegacyFee(gas_price=10, computed_at=0)).to_tx_dict()

        assert tx["gasPrice"] == 10
        assert tx["chainId"] == TEST_CHAIN_ID
        assert "maxFeePerGas" not in tx
        assert "type" not in tx

    def test_fee_market_shape(self, draft: TransferDraft) -> None:
        """Test a market fee produces a type-2 transaction dict."""
        fee = MarketFee(max_priority_fee=2, max_fee=30, computed_at=0)
        tx = draft.with_fee(fee).to_tx_dict()

        assert tx["type"] == 2
        assert tx["maxFeePerGas"] == 30
        assert tx["maxPriorityFeePerGas"] == 2
        assert "gasPrice" not in tx

    def test_incomplete_draft_rejected(self, draft: TransferDraft) -> None:
        """Test a draft without fee cannot be turned into a transaction."""
        with pytest.raises(ValueError):
            draft.to_tx_dict()

    def test_estimate_params(self, draft: TransferDraft) -> None:
        """Test gas estimation parameters."""
        assert draft.estimate_params() == {"from": TEST_ADDRESS, "to": RECIPIENT, "value": 10**17}


class TestLocalSigner:
    """Tests for LocalSigner."""

    def test_address_derived_from_key(self) -> None:
        """Test the account address."""
        assert LocalSigner(TEST_PRIVATE_KEY).address == TEST_ADDRESS

    def test_invalid_key_does_not_leak(self) -> None:
        """Test a bad key raises ConfigurationError without echoing it."""
        with pytest.raises(ConfigurationError) as exc_info:
            LocalSigner("0xdeadbeef")

        assert "deadbeef" not in str(exc_info.value)

    def test_legacy_signature(self, draft: TransferDraft) -> None:
        """Test legacy transactions recover to the signer with the right hash."""
        signed = LocalSigner(TEST_PRIVATE_KEY).sign(
            draft.with_fee(LegacyFee(gas_price=10**9, computed_at=0))
        )

        assert signed.hash == "0x" + keccak(signed.raw).hex()
        assert signed.raw_hex.startswith("0x")
        assert Account.recover_transaction(signed.raw_hex) == TEST_ADDRESS

    def test_fee_market_signature(self, draft: TransferDraft) -> None:
        """Test type-2 transactions are signed as typed envelopes."""
        fee = MarketFee(max_priority_fee=10**9, max_fee=3 * 10**10, computed_at=0)
        signed = LocalSigner(TEST_PRIVATE_KEY).sign(draft.with_fee(fee))

        assert signed.raw[0] == 2
        assert signed.hash == "0x" + keccak(signed.raw).hex()
        assert Account.recover_transaction(signed.raw_hex) == TEST_ADDRESS

    def test_replacement_changes_hash(self, draft: TransferDraft) -> None:
        """Test a bumped fee yields a different variant hash."""
        signer = LocalSigner(TEST_PRIVATE_KEY)
        first = signer.sign(draft.with_fee(LegacyFee(gas_price=100, computed_at=0)))
        second = signer.sign(draft.with_fee(LegacyFee(gas_price=120, computed_at=0)))

        assert first.hash != second.hash
