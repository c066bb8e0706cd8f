"""Address normalisation shared by every operation."""

from __future__ import annotations

from eth_utils import is_checksum_address, is_hex_address, to_checksum_address

from .errors import InvalidAddressError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def validate_address(value: str, field: str) -> str:
    """Return ``value`` in EIP-55 checksum form or raise :class:`InvalidAddressError`.

    All-lowercase and all-uppercase hex is accepted as-is; mixed case must
    already match its checksum.
    """

    if not isinstance(value, str) or not value.startswith("0x") or not is_hex_address(value):
        raise InvalidAddressError(field, value)
    body = value[2:]
    if body != body.lower() and body != body.upper() and not is_checksum_address(value):
        raise InvalidAddressError(field, value)
    return to_checksum_address(value)


def is_zero_address(value: str) -> bool:
    return value.lower() == ZERO_ADDRESS
