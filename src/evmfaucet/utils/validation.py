"""
Validation utilities for the faucet.

Provides input validation for requester addresses. Failures raise
InvalidAddressError, a ValidationError subclass.
"""

from __future__ import annotations

import re

from eth_utils import to_checksum_address

from evmfaucet.errors import InvalidAddressError

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def validate_address(address: str, field_name: str = "address") -> str:
    """
    Validate an EVM address.

    Mixed-case input must carry a valid EIP-55 checksum; all-lowercase or
    all-uppercase input is accepted as is.

    Args:
        address: Address to validate
        field_name: Field name for error messages

    Returns:
        Checksummed address

    Raises:
        InvalidAddressError: If address is invalid
    """
    if not address:
        raise InvalidAddressError("", field=field_name, reason=f"{field_name} is required")

    if not isinstance(address, str):
        raise InvalidAddressError(
            str(address),
            field=field_name,
            reason=f"{field_name} must be a string",
        )

    address = address.strip()
    if not ADDRESS_PATTERN.match(address):
        raise InvalidAddressError(
            address,
            field=field_name,
            reason="must be 0x followed by 40 hex characters",
        )

    checksummed = to_checksum_address(address)
    body = address[2:]
    is_mixed_case = body != body.lower() and body != body.upper()
    if is_mixed_case and checksummed != address:
        raise InvalidAddressError(address, field=field_name, reason="invalid checksum")

    return checksummed

