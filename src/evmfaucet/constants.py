"""Constants for the faucet.

This module defines the default values used by the transaction engine,
including the nonce window, polling cadence, fee escalation and retry
parameters.
"""

# Nonce window: max gap between a reserved nonce and the confirmed tip
DEFAULT_NONCE_WINDOW = 7

# Confirmation polling
DEFAULT_CONFIRMATION_ATTEMPTS = 20
DEFAULT_POLL_INTERVAL_SECONDS = 0.1
DEFAULT_HASH_CHECK_INTERVAL_SECONDS = 0.1
DEFAULT_CONFIRMATION_INTERVAL_SECONDS = 0.7

# Fee escalation (replacement fee = previous * 12 / 10)
FEE_BUMP_NUMERATOR = 12
FEE_BUMP_DENOMINATOR = 10
DEFAULT_FEE_REFRESH_SECONDS = 20.0

# Balance must cover this many payouts before sending
DEFAULT_RESERVE_MULTIPLIER = 2

# Fee oracle (eth_feeHistory)
FEE_HISTORY_BLOCK_COUNT = 20
FEE_HISTORY_PERCENTILES = (10, 25, 50)
BASE_FEE_MULTIPLIER = 2

# Retry/backoff
RETRY_BASE_DELAY_MS = 10
RETRY_MAX_DELAY_MS = 5000
RETRY_LIMITED_ATTEMPTS = 5
FEE_ORACLE_ATTEMPTS = 10

# Diagnostics
DEFAULT_MAX_RECENT_ERRORS = 20

# Network
PROVIDER_TIMEOUT_SECONDS = 30

# Environment variables read by load_config()
ENV_PRIVATE_KEY = "FAUCET_PRIVATE_KEY"
ENV_AMOUNT = "FAUCET_AMOUNT"

__all__ = [
    "DEFAULT_NONCE_WINDOW",
    "DEFAULT_CONFIRMATION_ATTEMPTS",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "DEFAULT_HASH_CHECK_INTERVAL_SECONDS",
    "DEFAULT_CONFIRMATION_INTERVAL_SECONDS",
    "FEE_BUMP_NUMERATOR",
    "FEE_BUMP_DENOMINATOR",
    "DEFAULT_FEE_REFRESH_SECONDS",
    "DEFAULT_RESERVE_MULTIPLIER",
    "FEE_HISTORY_BLOCK_COUNT",
    "FEE_HISTORY_PERCENTILES",
    "BASE_FEE_MULTIPLIER",
    "RETRY_BASE_DELAY_MS",
    "RETRY_MAX_DELAY_MS",
    "RETRY_LIMITED_ATTEMPTS",
    "FEE_ORACLE_ATTEMPTS",
    "DEFAULT_MAX_RECENT_ERRORS",
    "PROVIDER_TIMEOUT_SECONDS",
    "ENV_PRIVATE_KEY",
    "ENV_AMOUNT",
]
