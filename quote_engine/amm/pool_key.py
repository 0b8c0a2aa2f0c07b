"""Canonical pool keys and pool id derivation.

A pool is identified on-chain by ``keccak256(abi.encode(PoolKey))`` where
PoolKey is ``(address currency0, address currency1, uint24 fee,
int24 tickSpacing, address hooks)`` with ``currency0 < currency1``.
The encoding here must match the contract byte for byte: a different field
order, width or padding yields an id that silently points at another pool.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from eth_abi import encode  # type: ignore[attr-defined]
from eth_utils.crypto import keccak

from quote_engine.constants import (
    FEE_DENOMINATOR,
    MAX_TICK_SPACING,
    MIN_TICK_SPACING,
    UINT24_MAX,
    ZERO_ADDRESS,
)
from quote_engine.errors import InvalidAddress, InvalidFee, InvalidTickSpacing
from quote_engine.models.types import address_to_bytes, normalize_address

from .fee_tiers import FeeTierRegistry

POOL_KEY_ABI_TYPES = ["address", "address", "uint24", "int24", "address"]

_DEFAULT_REGISTRY = FeeTierRegistry()


@dataclass(frozen=True)
class PoolKey:
    """Canonical 5-tuple identifying a pool.

    Addresses are stored lowercase. Build instances through
    ``build_pool_key`` to get sorting and validation; the adapters below
    only reshape already-canonical input.
    """

    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str = ZERO_ADDRESS

    def as_tuple(self) -> tuple[str, str, int, int, str]:
        """Key in contract field order (the "array" form)."""
        return (self.currency0, self.currency1, self.fee, self.tick_spacing, self.hooks)

    def encode(self) -> bytes:
        """ABI-encode the key as (address,address,uint24,int24,address)."""
        return encode(
            POOL_KEY_ABI_TYPES,
            [
                address_to_bytes(self.currency0),
                address_to_bytes(self.currency1),
                self.fee,
                self.tick_spacing,
                address_to_bytes(self.hooks),
            ],
        )

    @property
    def pool_id(self) -> bytes:
        return compute_pool_id(self)

    @property
    def pool_id_hex(self) -> str:
        return "0x" + compute_pool_id(self).hex()

    def contains(self, token: str) -> bool:
        token_norm = normalize_address(token)
        return token_norm in (self.currency0, self.currency1)

    def is_currency0(self, token: str) -> bool:
        """Check if token is currency0 (determines swap direction)."""
        return normalize_address(token) == self.currency0

    @classmethod
    def from_sequence(cls, values: Sequence[Any]) -> PoolKey:
        """Adapter for the array form ``[currency0, currency1, fee, tickSpacing, hooks]``.

        The order of the currencies is taken as given; the key is validated
        but not re-sorted, since a caller hashing an explicit key expects
        that exact key.
        """
        if len(values) != 5:
            raise InvalidAddress(f"Pool key array must have 5 elements, got {len(values)}")
        currency0, currency1, fee, tick_spacing, hooks = values
        return _validated_key(currency0, currency1, int(fee), int(tick_spacing), hooks)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> PoolKey:
        """Adapter for the object form ``{currency0, currency1, fee, tickSpacing, hooks}``."""
        tick_spacing = values.get("tickSpacing", values.get("tick_spacing"))
        if tick_spacing is None:
            raise InvalidTickSpacing("Pool key is missing tickSpacing")
        return _validated_key(
            values["currency0"],
            values["currency1"],
            int(values["fee"]),
            int(tick_spacing),
            values.get("hooks") or ZERO_ADDRESS,
        )


def validate_fee(fee: int) -> None:
    """Check that fee fits the key's uint24 field.

    Any uint24 hashes to a valid id, including flag values such as the
    dynamic-fee marker 0x800000. Whether the fee is usable as a swap fee is
    checked separately by ``validate_swap_fee``.
    """
    if isinstance(fee, bool) or not isinstance(fee, int):
        raise InvalidFee(f"Fee must be an integer, got {type(fee).__name__}")
    if fee < 0 or fee > UINT24_MAX:
        raise InvalidFee(f"Fee {fee} does not fit in uint24")


def validate_swap_fee(fee: int) -> None:
    """Check that fee can be deducted from a trade (below 100%)."""
    validate_fee(fee)
    if fee >= FEE_DENOMINATOR:
        raise InvalidFee(f"Fee {fee} is 100% or more")


def validate_tick_spacing(tick_spacing: int) -> None:
    if isinstance(tick_spacing, bool) or not isinstance(tick_spacing, int):
        raise InvalidTickSpacing(
            f"Tick spacing must be an integer, got {type(tick_spacing).__name__}"
        )
    if not MIN_TICK_SPACING <= tick_spacing <= MAX_TICK_SPACING:
        raise InvalidTickSpacing(
            f"Tick spacing {tick_spacing} outside [{MIN_TICK_SPACING}, {MAX_TICK_SPACING}]"
        )


def _validated_key(
    currency0: str, currency1: str, fee: int, tick_spacing: int, hooks: str
) -> PoolKey:
    validate_fee(fee)
    validate_tick_spacing(tick_spacing)
    return PoolKey(
        currency0=normalize_address(currency0, validate=True),
        currency1=normalize_address(currency1, validate=True),
        fee=fee,
        tick_spacing=tick_spacing,
        hooks=normalize_address(hooks, validate=True),
    )


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Order two addresses so the lower (case-insensitive) comes first.

    Raises:
        InvalidAddress: If either address is malformed or both are the same token
    """
    a = normalize_address(token_a, validate=True)
    b = normalize_address(token_b, validate=True)
    if a == b:
        raise InvalidAddress(f"Pool tokens must differ, got {token_a} twice")
    # Equal-length lowercase hex compares the same as the raw bytes
    return (a, b) if a < b else (b, a)


def build_pool_key(
    token_a: str,
    token_b: str,
    fee: int,
    tick_spacing: int | None = None,
    hooks: str | None = None,
    *,
    registry: FeeTierRegistry | None = None,
) -> PoolKey:
    """Build the canonical pool key for a token pair.

    Args:
        token_a: One token address, any case
        token_b: The other token address, any case
        fee: Fee tier in hundredths of a basis point (e.g., 3000 for 0.3%)
        tick_spacing: Explicit tick spacing; resolved from the fee tier if None
        hooks: Hooks contract address; zero address if None
        registry: Fee tier registry to resolve tick spacing with

    Returns:
        PoolKey with currency0 < currency1, identical for either token order

    Raises:
        InvalidAddress: If a token or hook address is malformed
        InvalidFee: If fee is outside uint24
        InvalidTickSpacing: If an explicit tick spacing is out of range
        UnknownFeeTier: If tick spacing is resolved by a strict registry
            and the fee is unknown
    """
    currency0, currency1 = sort_tokens(token_a, token_b)
    hooks_norm = normalize_address(hooks if hooks is not None else ZERO_ADDRESS, validate=True)
    validate_fee(fee)

    if tick_spacing is None:
        tick_spacing = (registry or _DEFAULT_REGISTRY).resolve(fee).tick_spacing
    else:
        validate_tick_spacing(tick_spacing)

    return PoolKey(
        currency0=currency0,
        currency1=currency1,
        fee=fee,
        tick_spacing=tick_spacing,
        hooks=hooks_norm,
    )


def compute_pool_id(key: PoolKey) -> bytes:
    """Keccak-256 of the ABI-encoded pool key (32 bytes)."""
    return keccak(key.encode())


__all__ = [
    "POOL_KEY_ABI_TYPES",
    "PoolKey",
    "sort_tokens",
    "build_pool_key",
    "compute_pool_id",
    "validate_fee",
    "validate_swap_fee",
    "validate_tick_spacing",
]
