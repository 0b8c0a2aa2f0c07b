"""Conversions between sqrtPriceX96 and human-readable prices.

The AMM stores ``sqrt(price) * 2^96`` as a uint160, where price is token1
per token0 in raw (undecimalized) units. Values routinely exceed the 53-bit
mantissa of a float, so squaring happens on exact integers and narrowing to
float is the last step:

    price = sqrtPriceX96^2 / 2^192

Python's ``int / int`` is correctly rounded, so the float result is the
nearest double to the exact rational price.
"""

from __future__ import annotations

import decimal
import math
from decimal import ROUND_FLOOR, Decimal

from quote_engine.constants import Q96, Q192, UINT160_MAX
from quote_engine.errors import InvalidAmount, InvalidPrice

# 78 digits of precision, enough for uint256 values (up to ~10^77)
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)


def _check_sqrt_price(sqrt_price_x96: int) -> None:
    if isinstance(sqrt_price_x96, bool) or not isinstance(sqrt_price_x96, int):
        raise InvalidAmount(
            f"sqrtPriceX96 must be an integer, got {type(sqrt_price_x96).__name__}"
        )
    if sqrt_price_x96 < 0:
        raise InvalidAmount(f"sqrtPriceX96 cannot be negative: {sqrt_price_x96}")
    if sqrt_price_x96 > UINT160_MAX:
        raise InvalidAmount(f"sqrtPriceX96 does not fit in uint160: {sqrt_price_x96}")


def sqrt_price_x96_to_price(sqrt_price_x96: int) -> float:
    """Convert sqrtPriceX96 to price (token1 per token0) as a float.

    Args:
        sqrt_price_x96: Square root price scaled by 2^96

    Returns:
        Price as the float nearest to sqrtPriceX96^2 / 2^192

    Raises:
        InvalidAmount: If sqrt_price_x96 is not an integer in uint160 range
    """
    _check_sqrt_price(sqrt_price_x96)
    return (sqrt_price_x96 * sqrt_price_x96) / Q192


def sqrt_price_x96_to_price_decimal(sqrt_price_x96: int) -> Decimal:
    """Convert sqrtPriceX96 to price as a 78-digit Decimal.

    Used where the price feeds further integer arithmetic (amount estimates).
    """
    _check_sqrt_price(sqrt_price_x96)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(sqrt_price_x96 * sqrt_price_x96) / Decimal(Q192)


def sqrt_price_x96_to_price_float(sqrt_price_x96: int) -> float:
    """Naive float conversion: narrow first, then square.

    Loses precision once sqrtPriceX96 exceeds 2^53. Display/fallback only;
    prefer ``sqrt_price_x96_to_price``.
    """
    _check_sqrt_price(sqrt_price_x96)
    sqrt_price = float(sqrt_price_x96) / float(Q96)
    return sqrt_price * sqrt_price


def price_to_sqrt_price_x96(price: float | Decimal | int) -> int:
    """Convert a price (token1 per token0) to sqrtPriceX96.

    Computes ``floor(sqrt(price) * 2^96)`` in high-precision Decimal so the
    result is exact to the last bit for any float input.

    Raises:
        InvalidPrice: If price is not a finite number greater than zero
    """
    if isinstance(price, bool) or not isinstance(price, (int, float, Decimal)):
        raise InvalidPrice(f"Price must be a number, got {type(price).__name__}")

    if isinstance(price, float) and not math.isfinite(price):
        raise InvalidPrice(f"Price must be finite, got {price}")
    if isinstance(price, Decimal) and not price.is_finite():
        raise InvalidPrice(f"Price must be finite, got {price}")
    if price <= 0:
        raise InvalidPrice(f"Price must be greater than zero, got {price}")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        scaled = Decimal(price).sqrt() * Decimal(Q96)
        sqrt_price_x96 = int(scaled.to_integral_value(rounding=ROUND_FLOOR))

    if sqrt_price_x96 > UINT160_MAX:
        raise InvalidPrice(f"Price {price} is too large for a uint160 sqrtPriceX96")
    if sqrt_price_x96 == 0:
        raise InvalidPrice(f"Price {price} is too small to represent as sqrtPriceX96")
    return sqrt_price_x96


def price_from_amounts(token0_amount: float | Decimal, token1_amount: float | Decimal) -> float:
    """Price implied by depositing token0_amount against token1_amount.

    Raises:
        InvalidPrice: If either amount is not positive
    """
    if token0_amount <= 0 or token1_amount <= 0:
        raise InvalidPrice(
            f"Token amounts must be greater than zero, got {token0_amount} and {token1_amount}"
        )
    return float(token1_amount) / float(token0_amount)


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "sqrt_price_x96_to_price",
    "sqrt_price_x96_to_price_decimal",
    "sqrt_price_x96_to_price_float",
    "price_to_sqrt_price_x96",
    "price_from_amounts",
]
