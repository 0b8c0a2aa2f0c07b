"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_slot0, seed_pool

    key = seed_pool(rpc, USDC, WETH, fee=3000, sqrt_price_x96=SQRT_PRICE_4)
"""

from quote_engine.amm import PoolKey, Slot0, build_pool_key
from quote_engine.rpc import MockChainRpc
from tests.helpers.constants import SQRT_PRICE_4, USDC, WETH


def make_slot0(
    sqrt_price_x96: int = SQRT_PRICE_4,
    tick: int = 13863,
    protocol_fee: int = 0,
    lp_fee: int = 3000,
) -> Slot0:
    """Create a Slot0 snapshot with sensible defaults (price 4.0)."""
    return Slot0(
        sqrt_price_x96=sqrt_price_x96,
        tick=tick,
        protocol_fee=protocol_fee,
        lp_fee=lp_fee,
    )


def seed_pool(
    rpc: MockChainRpc,
    token_a: str = USDC,
    token_b: str = WETH,
    fee: int = 3000,
    sqrt_price_x96: int = SQRT_PRICE_4,
    liquidity: int = 10**20,
) -> PoolKey:
    """Register pool state on the mock chain and return the pool key.

    The pool is keyed exactly as the engine would resolve it, so quotes
    for (token_a, token_b, fee) read this state.
    """
    key = build_pool_key(token_a, token_b, fee)
    rpc.set_pool(key.pool_id, make_slot0(sqrt_price_x96=sqrt_price_x96, lp_fee=fee), liquidity)
    return key
