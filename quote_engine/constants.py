"""Protocol constants for the quote engine.

Centralizes fixed-point scales, integer bounds and the zero address.
"""

# Fixed-point scale of sqrtPriceX96 (96 fractional bits)
Q96 = 2**96
Q192 = 2**192

# Integer bounds of the on-chain types we read and encode
UINT24_MAX = 2**24 - 1
UINT128_MAX = 2**128 - 1
UINT160_MAX = 2**160 - 1
UINT256_MAX = 2**256 - 1

# v4 PoolManager accepts tick spacings in [MIN_TICK_SPACING, MAX_TICK_SPACING]
MIN_TICK_SPACING = 1
MAX_TICK_SPACING = 2**15 - 1

# Fees are expressed in hundredths of a basis point: fee / FEE_DENOMINATOR
FEE_DENOMINATOR = 1_000_000

# Native currency in pool keys, and the hook address of pools without hooks
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
