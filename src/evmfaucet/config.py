"""
Faucet configuration.

Static configuration loaded once at startup and treated as immutable for
the process lifetime:
- per-chain identifier, RPC endpoint, currency symbol and explorers
- the global payout amount and signing key
- tunables of the transaction engine (nonce window, polling cadence)

Example:
    ```python
    config = load_config("faucet.json", env_file=".env")
    faucet = await Faucet.create(config)
    ```
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from evmfaucet.constants import (
    DEFAULT_CONFIRMATION_ATTEMPTS,
    DEFAULT_CONFIRMATION_INTERVAL_SECONDS,
    DEFAULT_FEE_REFRESH_SECONDS,
    DEFAULT_HASH_CHECK_INTERVAL_SECONDS,
    DEFAULT_MAX_RECENT_ERRORS,
    DEFAULT_NONCE_WINDOW,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_RESERVE_MULTIPLIER,
    ENV_AMOUNT,
    ENV_PRIVATE_KEY,
    PROVIDER_TIMEOUT_SECONDS,
)
from evmfaucet.errors import ConfigurationError

__all__ = ["ChainConfig", "SenderConfig", "FaucetConfig", "load_config"]


# ============================================================================
# Chain Configuration
# ============================================================================

class ChainConfig(BaseModel):
    """
    One network the faucet serves.

    Example:
        ```python
        ChainConfig(
            chain_id=11155111,
            name="Sepolia",
            rpc_url="https://rpc.sepolia.org",
            explorers=["https://sepolia.etherscan.io"],
        )
        ```
    """

    model_config = ConfigDict(frozen=True)

    chain_id: int = Field(
        ...,
        ge=1,
        description="EIP-155 chain id",
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Human-readable network name",
    )
    rpc_url: str = Field(
        ...,
        description="JSON-RPC endpoint (http or https)",
    )
    native_currency_symbol: str = Field(
        default="ETH",
        description="Symbol of the currency being dispensed",
    )
    explorers: List[str] = Field(
        default_factory=list,
        description="Block explorer base URLs, first one is used for links",
    )

    @field_validator("rpc_url")
    @classmethod
    def _check_rpc_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("rpc_url must use http or https")
        return value

    @field_validator("explorers")
    @classmethod
    def _strip_explorer_slashes(cls, value: List[str]) -> List[str]:
        return [url.rstrip("/") for url in value]


# ============================================================================
# Sender Configuration
# ============================================================================

class SenderConfig(BaseModel):
    """Tunables of the transaction engine."""

    model_config = ConfigDict(frozen=True)

    window: int = Field(
        default=DEFAULT_NONCE_WINDOW,
        ge=1,
        description="Max gap between a reserved nonce and the confirmed tip before broadcasting",
    )
    confirmation_attempts: int = Field(
        default=DEFAULT_CONFIRMATION_ATTEMPTS,
        ge=1,
        description="Rounds over all broadcast hashes before re-pricing",
    )
    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS,
        ge=0,
        description="Sleep in seconds between state machine ticks",
    )
    hash_check_interval: float = Field(
        default=DEFAULT_HASH_CHECK_INTERVAL_SECONDS,
        ge=0,
        description="Sleep in seconds between individual hash lookups",
    )
    confirmation_interval: float = Field(
        default=DEFAULT_CONFIRMATION_INTERVAL_SECONDS,
        ge=0,
        description="Sleep in seconds between confirmation rounds",
    )
    fee_refresh_seconds: float = Field(
        default=DEFAULT_FEE_REFRESH_SECONDS,
        ge=0,
        description="Age after which a fee-market quote is recomputed",
    )
    reserve_multiplier: int = Field(
        default=DEFAULT_RESERVE_MULTIPLIER,
        ge=1,
        description="Balance must be at least this many payouts before sending",
    )
    max_recent_errors: int = Field(
        default=DEFAULT_MAX_RECENT_ERRORS,
        ge=1,
        description="Number of distinct error strings kept per chain",
    )
    rpc_timeout: int = Field(
        default=PROVIDER_TIMEOUT_SECONDS,
        ge=1,
        description="HTTP timeout in seconds for RPC requests",
    )


# ============================================================================
# Faucet Configuration
# ============================================================================

class FaucetConfig(BaseModel):
    """
    Complete faucet configuration.

    The private key is held as a SecretStr so it never shows up in
    reprs or logs.
    """

    model_config = ConfigDict(frozen=True)

    private_key: SecretStr = Field(
        ...,
        description="Hex private key of the dispensing account. SECURITY: Store in env var",
    )
    amount: int = Field(
        ...,
        gt=0,
        description="Payout per request in wei",
    )
    chains: List[ChainConfig] = Field(
        ...,
        min_length=1,
        description="Networks served by this faucet",
    )
    sender: SenderConfig = Field(
        default_factory=SenderConfig,
        description="Transaction engine tunables",
    )

    @field_validator("chains")
    @classmethod
    def _unique_chain_ids(cls, value: List[ChainConfig]) -> List[ChainConfig]:
        ids = [chain.chain_id for chain in value]
        if len(ids) != len(set(ids)):
            raise ValueError("chain ids must be unique")
        return value


def load_config(
    path: Union[str, Path],
    env_file: Optional[Union[str, Path]] = None,
) -> FaucetConfig:
    """
    Load faucet configuration from a JSON file.

    The private key may be given in the file or through the
    FAUCET_PRIVATE_KEY environment variable (optionally loaded from a
    .env file). FAUCET_AMOUNT overrides the payout amount.

    Args:
        path: Path to the JSON configuration file
        env_file: Optional .env file to load first

    Returns:
        Validated FaucetConfig

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text())
    except FileNotFoundError:
        raise ConfigurationError(f"Config file not found: {config_path}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file is not valid JSON: {e}")

    if not isinstance(raw, dict):
        raise ConfigurationError("Config file must contain a JSON object")

    env_key = os.environ.get(ENV_PRIVATE_KEY)
    if env_key:
        raw["private_key"] = env_key
    env_amount = os.environ.get(ENV_AMOUNT)
    if env_amount:
        raw["amount"] = env_amount

    if not raw.get("private_key"):
        raise ConfigurationError(
            f"No private key configured (set {ENV_PRIVATE_KEY} or 'private_key')"
        )

    try:
        return FaucetConfig.model_validate(raw)
    except ValidationError as e:
        # Drop input values so the key never leaks into messages
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from None
