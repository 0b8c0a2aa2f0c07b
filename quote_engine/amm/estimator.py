"""Constant-price quote approximation.

The output amount is computed at the pool's current price with the fee
deducted:

    zeroForOne:  amountOut = floor(amountIn * price * (1 - fee / 1e6))
    oneForZero:  amountOut = floor(amountIn / price * (1 - fee / 1e6))

This ignores the concentrated-liquidity curve entirely (no tick crossing,
no price movement during the swap). It is only meaningful for trades that
are small relative to the liquidity at the current tick.

Price impact is ``amountIn / liquidity * 100``: a linear display heuristic,
not a slippage bound. It must never be used to derive on-chain limits.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal

import structlog

from quote_engine.constants import FEE_DENOMINATOR, UINT128_MAX, UINT256_MAX
from quote_engine.errors import (
    InsufficientLiquidity,
    InvalidAddress,
    InvalidAmount,
    InvalidFee,
    PoolNotInitialized,
)
from quote_engine.models.types import normalize_address

from .fee_tiers import FeeTierRegistry
from .pool_key import PoolKey, build_pool_key, validate_swap_fee
from .price_math import (
    DECIMAL_HIGH_PREC_CONTEXT,
    sqrt_price_x96_to_price,
    sqrt_price_x96_to_price_decimal,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class Slot0:
    """Pool state snapshot as reported by the chain. Read-only, per request."""

    sqrt_price_x96: int  # Current sqrt(price) * 2^96
    tick: int  # Current tick index
    protocol_fee: int
    lp_fee: int

    @property
    def is_initialized(self) -> bool:
        return self.sqrt_price_x96 != 0


@dataclass(frozen=True)
class Quote:
    """Approximate result of swapping ``amount_in`` through one pool.

    ``price`` is always the pool price (token1 per token0), independent of
    the trade direction.
    """

    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    price: float
    price_impact_pct: float
    fee: int
    pool_id: str
    zero_for_one: bool
    fee_tier_known: bool = True

    @property
    def route(self) -> tuple[str, str]:
        return (self.token_in, self.token_out)


def _check_amount(name: str, value: int, maximum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmount(f"{name} cannot be negative: {value}")
    if value > maximum:
        raise InvalidAmount(f"{name} overflow: {value}")


def estimate_amount_out(amount_in: int, price: Decimal, fee: int, zero_for_one: bool) -> int:
    """Output amount at a constant price, after the fee, rounded down.

    Args:
        amount_in: Raw input amount
        price: Pool price, token1 per token0 (must be > 0)
        fee: Fee in hundredths of a basis point
        zero_for_one: True when selling currency0 for currency1

    Returns:
        Floor of the fee-adjusted output amount
    """
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        fee_multiplier = Decimal(FEE_DENOMINATOR - fee) / Decimal(FEE_DENOMINATOR)
        if zero_for_one:
            gross = Decimal(amount_in) * price
        else:
            gross = Decimal(amount_in) / price
        return int((gross * fee_multiplier).to_integral_value(rounding=ROUND_FLOOR))


def estimate_price_impact_pct(amount_in: int, liquidity: int) -> float:
    """Linear price-impact proxy in percent; 0 when there is no liquidity."""
    if liquidity <= 0:
        return 0.0
    return amount_in / liquidity * 100


class QuoteEstimator:
    """Approximates quotes from a pool's Slot0 and active liquidity."""

    def __init__(
        self,
        registry: FeeTierRegistry | None = None,
        *,
        allow_zero_liquidity: bool = False,
    ):
        """Initialize the estimator.

        Args:
            registry: Fee tier registry used to resolve the pool key
            allow_zero_liquidity: If True, a zero-liquidity pool yields a quote
                with zero price impact instead of raising InsufficientLiquidity
        """
        self.registry = registry or FeeTierRegistry()
        self.allow_zero_liquidity = allow_zero_liquidity

    def estimate(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        fee: int,
        slot0: Slot0,
        liquidity: int,
        *,
        pool_key: PoolKey | None = None,
    ) -> Quote:
        """Approximate the output of swapping amount_in of token_in.

        Args:
            token_in: Input token address
            token_out: Output token address
            amount_in: Raw input amount (uint256)
            fee: Fee tier used both for the pool key and the fee deduction
            slot0: Current pool state
            liquidity: Active liquidity at the current tick (uint128)
            pool_key: Already-resolved key for the pair; built if None

        Returns:
            Quote for this single pool

        Raises:
            PoolNotInitialized: If slot0.sqrt_price_x96 == 0
            InsufficientLiquidity: If liquidity == 0 and amount_in > 0, unless
                zero-liquidity quotes are allowed
            InvalidAmount: If amount_in, liquidity or the output is out of range
            InvalidFee: If fee is 100% or more, or differs from pool_key.fee
        """
        _check_amount("amountIn", amount_in, UINT256_MAX)
        _check_amount("liquidity", liquidity, UINT128_MAX)
        validate_swap_fee(fee)

        fee_tier_known = self.registry.is_known(fee)
        if pool_key is None:
            pool_key = build_pool_key(token_in, token_out, fee, registry=self.registry)
        else:
            if fee != pool_key.fee:
                raise InvalidFee(f"Fee {fee} does not match pool key fee {pool_key.fee}")
            in_norm = normalize_address(token_in, validate=True)
            out_norm = normalize_address(token_out, validate=True)
            in_pool = pool_key.contains(in_norm) and pool_key.contains(out_norm)
            if in_norm == out_norm or not in_pool:
                raise InvalidAddress(f"Tokens {token_in}, {token_out} do not match pool currencies")
        pool_id = pool_key.pool_id_hex

        if not slot0.is_initialized:
            raise PoolNotInitialized(f"Pool {pool_id} is not initialized")

        if liquidity == 0 and amount_in > 0 and not self.allow_zero_liquidity:
            raise InsufficientLiquidity(f"Pool {pool_id} has no active liquidity")

        zero_for_one = pool_key.is_currency0(token_in)
        amount_out = estimate_amount_out(
            amount_in,
            sqrt_price_x96_to_price_decimal(slot0.sqrt_price_x96),
            fee,
            zero_for_one,
        )
        if amount_out > UINT256_MAX:
            raise InvalidAmount(f"amountOut overflow for amountIn {amount_in} in pool {pool_id}")

        quote = Quote(
            token_in=normalize_address(token_in),
            token_out=normalize_address(token_out),
            amount_in=amount_in,
            amount_out=amount_out,
            price=sqrt_price_x96_to_price(slot0.sqrt_price_x96),
            price_impact_pct=estimate_price_impact_pct(amount_in, liquidity),
            fee=fee,
            pool_id=pool_id,
            zero_for_one=zero_for_one,
            fee_tier_known=fee_tier_known,
        )

        logger.debug(
            "quote_estimated",
            pool_id=pool_id,
            zero_for_one=zero_for_one,
            amount_in=amount_in,
            amount_out=amount_out,
            price_impact_pct=quote.price_impact_pct,
        )
        return quote


__all__ = [
    "Slot0",
    "Quote",
    "QuoteEstimator",
    "estimate_amount_out",
    "estimate_price_impact_pct",
]
