"""Shared token constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import WETH, USDC
"""

# =============================================================================
# Mainnet tokens
# =============================================================================

WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"  # Wrapped Ether (18 decimals)
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"  # USD Coin (6 decimals)
DAI = "0x6b175474e89094c44da98b954eedeac495271d0f"  # Dai Stablecoin (18 decimals)
USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"  # Tether USD (6 decimals)

# Checksummed forms, to exercise case-insensitive handling
WETH_CHECKSUM = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC_CHECKSUM = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"

# Native currency in v4 pool keys, and a dummy hooks contract
NATIVE = "0x0000000000000000000000000000000000000000"
HOOKS = "0x00000000000000000000000000000000000000c0"

# =============================================================================
# Fixed-point reference values
# =============================================================================

Q96 = 2**96
SQRT_PRICE_1 = Q96  # price 1.0
SQRT_PRICE_4 = 2 * Q96  # price 4.0
SQRT_PRICE_QUARTER = Q96 // 2  # price 0.25

ONE_ETHER = 10**18
