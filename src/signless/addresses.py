"""Address normalization helpers."""
from __future__ import annotations

from eth_utils import is_address, to_checksum_address

from signless.errors import InvalidAddressError

ZERO_ADDRESS: str = "0x0000000000000000000000000000000000000000"


def normalize_address(value: object) -> str:
    """Return *value* as an EIP-55 checksummed address.

    Raises
    ------
    InvalidAddressError
        If *value* is not a 20-byte hex address.
    """
    if not isinstance(value, str) or not is_address(value):
        raise InvalidAddressError(value)
    return to_checksum_address(value)


def is_zero_address(value: str) -> bool:
    return normalize_address(value) == ZERO_ADDRESS
