"""Shared type definitions for request/response models and address handling."""

import re
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from quote_engine.constants import UINT256_MAX
from quote_engine.errors import InvalidAddress

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_BYTES32_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")
_DECIMAL_RE = re.compile(r"^[0-9]+$")


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")

    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Uint256 cannot be negative: {value}")
        if value > UINT256_MAX:
            raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
        return str(value)

    if not isinstance(value, str):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if _DECIMAL_RE.match(value) is None:
        raise ValueError(f"Uint256 must be a decimal integer string: '{value}'")

    if int(value) > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return value


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# 32-byte identifier (pool id) as 0x-prefixed hex
Bytes32 = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{64}$")]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an Ethereum address to lowercase.

    Args:
        address: An Ethereum address (0x prefix optional unless validating)
        validate: If True, raises InvalidAddress for malformed addresses.
                  If False (default), returns normalized form without validation.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        InvalidAddress: If validate=True and address is not a valid Ethereum address
    """
    if not isinstance(address, str):
        if validate:
            raise InvalidAddress(f"Invalid address: {address!r}")
        address = str(address)

    # Validated input must already carry the 0x prefix
    if validate and not is_valid_address(address):
        raise InvalidAddress(f"Invalid address: {address}")

    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a 0x-prefixed 20-byte hex address."""
    if not isinstance(address, str):
        return False
    return _ADDRESS_RE.match(address) is not None


def is_valid_bytes32(value: str) -> bool:
    """Check if a string is a 0x-prefixed 32-byte hex value."""
    if not isinstance(value, str):
        return False
    return _BYTES32_RE.match(value) is not None


def address_to_bytes(address: str) -> bytes:
    """Convert a validated address to its 20 raw bytes."""
    return bytes.fromhex(normalize_address(address, validate=True)[2:])
