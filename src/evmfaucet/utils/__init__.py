"""
Faucet utilities.

This module provides retry, logging, validation and container helpers.
"""

from evmfaucet.utils.collections import BoundedSet
from evmfaucet.utils.logging import (
    LogContext,
    configure_logging,
    disable_logging,
    enable_debug,
    get_logger,
    set_level,
)
from evmfaucet.utils.retry import (
    ErrorClassifier,
    RetryConfig,
    RetryDecision,
    calculate_delay,
    retry_async,
)
from evmfaucet.utils.validation import validate_address

__all__ = [
    # Containers
    "BoundedSet",
    # Structured logging
    "get_logger",
    "configure_logging",
    "set_level",
    "disable_logging",
    "enable_debug",
    "LogContext",
    # Retry
    "RetryConfig",
    "RetryDecision",
    "ErrorClassifier",
    "calculate_delay",
    "retry_async",
    # Validation
    "validate_address",
]
