"""Shared types and API models for the quote engine."""

from quote_engine.models.types import (
    Address,
    Bytes32,
    Uint256,
    address_to_bytes,
    is_valid_address,
    is_valid_bytes32,
    normalize_address,
    validate_uint256,
)

__all__ = [
    "Address",
    "Bytes32",
    "Uint256",
    "address_to_bytes",
    "is_valid_address",
    "is_valid_bytes32",
    "normalize_address",
    "validate_uint256",
]
