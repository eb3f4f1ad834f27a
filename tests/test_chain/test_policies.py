"""
Tests for RPC error classification.
"""

import pytest

from evmfaucet.chain.policies import (
    BALANCE_RETRY,
    BROADCAST_RETRY,
    CONFIRM_RETRY,
    ESTIMATE_GAS_RETRY,
    FEE_ORACLE_RETRY,
    broadcast_policy,
    fee_market_policy,
    is_known_rejection,
    transient_policy,
)
from evmfaucet.errors import FeeMarketUnsupportedError, RpcError
from evmfaucet.utils.retry import RetryDecision


class TestKnownRejection:
    """Tests for is_known_rejection."""

    @pytest.mark.parametrize(
        "message",
        [
            "already known",
            "Transaction with the same hash was already imported / already exists",
            "replacement transaction underpriced",
            "transaction underpriced",
            "nonce too low: next nonce 7, tx nonce 5",
            "Known transaction: 0xabc",
        ],
    )
    def test_known_messages(self, message: str) -> None:
        """Test node phrasings of an accepted predecessor are recognised."""
        assert is_known_rejection(RpcError(message, code=-32000)) is True

    def test_other_messages(self) -> None:
        """Test unrelated failures are not known rejections."""
        assert is_known_rejection(RpcError("insufficient funds for gas")) is False


class TestPolicies:
    """Tests for the classifiers."""

    def test_transient_policy(self) -> None:
        """Test RPC failures retry and programming errors abort."""
        assert transient_policy(RpcError("timeout")) is RetryDecision.RETRY
        assert transient_policy(KeyError("x")) is RetryDecision.ABORT

    def test_broadcast_policy(self) -> None:
        """Test known rejections are ignored and others retried."""
        assert broadcast_policy(RpcError("already known")) is RetryDecision.IGNORE
        assert broadcast_policy(RpcError("503")) is RetryDecision.RETRY
        assert broadcast_policy(TypeError("bad")) is RetryDecision.ABORT

    def test_fee_market_policy(self) -> None:
        """Test an unsupported fee market is never retried."""
        assert fee_market_policy(FeeMarketUnsupportedError()) is RetryDecision.ABORT
        assert fee_market_policy(RpcError("timeout")) is RetryDecision.RETRY


class TestPresets:
    """Tests for per-call-site retry presets."""

    def test_bounded_presets(self) -> None:
        """Test estimate gas and broadcast use five attempts."""
        assert ESTIMATE_GAS_RETRY.max_attempts == 5
        assert BROADCAST_RETRY.max_attempts == 5
        assert BROADCAST_RETRY.classify is broadcast_policy

    def test_confirmation_lookups_are_bounded(self) -> None:
        """Test transaction lookups retry transient errors a bounded number of times."""
        assert CONFIRM_RETRY.max_attempts == 5
        assert CONFIRM_RETRY.classify is transient_policy

    def test_balance_is_unbounded(self) -> None:
        """Test balance lookups retry until they succeed."""
        assert BALANCE_RETRY.max_attempts is None

    def test_backoff_window(self) -> None:
        """Test presets share the 10 ms base and 5 s cap."""
        for preset in (ESTIMATE_GAS_RETRY, BALANCE_RETRY, FEE_ORACLE_RETRY, BROADCAST_RETRY):
            assert preset.base_delay_ms == 10
            assert preset.max_delay_ms == 5000
            assert preset.jitter is True
