"""
Tests for input validation helpers.
"""

import pytest

from evmfaucet.errors import InvalidAddressError
from evmfaucet.utils.validation import validate_address

CHECKSUMMED = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


# =============================================================================
# Address Validation
# =============================================================================


class TestValidateAddress:
    """Tests for validate_address."""

    def test_checksummed_address_passes(self) -> None:
        """Test a valid checksummed address is returned unchanged."""
        assert validate_address(CHECKSUMMED) == CHECKSUMMED

    def test_lowercase_address_is_checksummed(self) -> None:
        """Test all-lowercase input is accepted and checksummed."""
        assert validate_address(CHECKSUMMED.lower()) == CHECKSUMMED

    def test_whitespace_is_stripped(self) -> None:
        """Test surrounding whitespace is ignored."""
        assert validate_address(f"  {CHECKSUMMED}\n") == CHECKSUMMED

    def test_bad_checksum_rejected(self) -> None:
        """Test mixed-case input with a wrong checksum is rejected."""
        bad = CHECKSUMMED.replace("C51812", "c51812", 1)

        with pytest.raises(InvalidAddressError) as exc_info:
            validate_address(bad)

        assert exc_info.value.reason == "invalid checksum"

    @pytest.mark.parametrize(
        "address",
        ["", "0x123", "70997970C51812dc3A010C7d01b50e0d17dc79C8", "0x" + "g" * 40],
    )
    def test_malformed_addresses(self, address: str) -> None:
        """Test malformed input raises InvalidAddressError."""
        with pytest.raises(InvalidAddressError):
            validate_address(address)

    def test_error_names_field(self) -> None:
        """Test the field name ends up in the error."""
        with pytest.raises(InvalidAddressError) as exc_info:
            validate_address("nope", field_name="recipient")

        assert exc_info.value.details["field"] == "recipient"
        assert exc_info.value.code == "INVALID_ADDRESS"

