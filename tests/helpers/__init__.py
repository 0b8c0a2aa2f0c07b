"""Test helpers module for shared test utilities.

- constants: Token addresses and fixed-point reference values
- factories: Slot0 and mock pool factory functions
"""

from tests.helpers.constants import (
    DAI,
    HOOKS,
    NATIVE,
    ONE_ETHER,
    Q96,
    SQRT_PRICE_1,
    SQRT_PRICE_4,
    SQRT_PRICE_QUARTER,
    USDC,
    USDC_CHECKSUM,
    USDT,
    WETH,
    WETH_CHECKSUM,
)
from tests.helpers.factories import make_slot0, seed_pool

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "WETH_CHECKSUM",
    "USDC_CHECKSUM",
    "NATIVE",
    "HOOKS",
    "Q96",
    "SQRT_PRICE_1",
    "SQRT_PRICE_4",
    "SQRT_PRICE_QUARTER",
    "ONE_ETHER",
    # Factories
    "make_slot0",
    "seed_pool",
]
