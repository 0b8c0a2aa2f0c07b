"""AMM pool identification and quote math.

This package provides the deterministic core of the engine:
- Fee tier registry (fee -> tick spacing)
- sqrtPriceX96 <-> price conversion
- Canonical pool keys and pool id hashing
- Constant-price quote estimation
"""

from .estimator import (
    Quote,
    QuoteEstimator,
    Slot0,
    estimate_amount_out,
    estimate_price_impact_pct,
)
from .fee_tiers import (
    DEFAULT_TICK_SPACINGS,
    FALLBACK_TICK_SPACING,
    FEE_HIGH,
    FEE_LOW,
    FEE_MEDIUM,
    FEE_TIERS,
    FeeTierRegistry,
    TickSpacingResolution,
)
from .pool_key import (
    POOL_KEY_ABI_TYPES,
    PoolKey,
    build_pool_key,
    compute_pool_id,
    sort_tokens,
    validate_swap_fee,
)
from .price_math import (
    price_from_amounts,
    price_to_sqrt_price_x96,
    sqrt_price_x96_to_price,
    sqrt_price_x96_to_price_decimal,
    sqrt_price_x96_to_price_float,
)

__all__ = [
    # Fee tiers
    "FEE_LOW",
    "FEE_MEDIUM",
    "FEE_HIGH",
    "FEE_TIERS",
    "DEFAULT_TICK_SPACINGS",
    "FALLBACK_TICK_SPACING",
    "FeeTierRegistry",
    "TickSpacingResolution",
    # Price math
    "sqrt_price_x96_to_price",
    "sqrt_price_x96_to_price_decimal",
    "sqrt_price_x96_to_price_float",
    "price_to_sqrt_price_x96",
    "price_from_amounts",
    # Pool key
    "POOL_KEY_ABI_TYPES",
    "PoolKey",
    "build_pool_key",
    "compute_pool_id",
    "sort_tokens",
    "validate_swap_fee",
    # Estimator
    "Slot0",
    "Quote",
    "QuoteEstimator",
    "estimate_amount_out",
    "estimate_price_impact_pct",
]
