"""Error classes for the quote engine.

Every error carries a stable machine-readable ``code`` that the HTTP layer
forwards to clients unchanged.
"""


class QuoteEngineError(Exception):
    """Base error for quote engine operations."""

    code = "QUOTE_ENGINE_ERROR"


class ValidationError(QuoteEngineError, ValueError):
    """Local input validation failed. Raised before any hashing or RPC call."""

    code = "VALIDATION_ERROR"


class InvalidAddress(ValidationError):
    """Token or hook address is not a 0x-prefixed 20-byte hex string."""

    code = "INVALID_ADDRESS"


class InvalidPrice(ValidationError):
    """Price must be a finite number greater than zero."""

    code = "INVALID_PRICE"


class InvalidFee(ValidationError):
    """Fee does not fit in uint24 or is 100% or more."""

    code = "INVALID_FEE"


class InvalidTickSpacing(ValidationError):
    """Explicit tick spacing is outside [1, 32767]."""

    code = "INVALID_TICK_SPACING"


class InvalidAmount(ValidationError):
    """Amount is negative or exceeds uint256."""

    code = "INVALID_AMOUNT"


class UnknownFeeTier(ValidationError):
    """Fee tier has no registered tick spacing (strict mode only)."""

    code = "UNKNOWN_FEE_TIER"


class RpcUnavailable(QuoteEngineError):
    """The chain RPC failed, timed out, or is not configured."""

    code = "RPC_UNAVAILABLE"


class PoolNotInitialized(QuoteEngineError):
    """Pool reports sqrtPriceX96 == 0, so no price or quote exists."""

    code = "POOL_NOT_INITIALIZED"


class InsufficientLiquidity(QuoteEngineError):
    """Pool has zero active liquidity for a non-zero trade."""

    code = "INSUFFICIENT_LIQUIDITY"


__all__ = [
    "QuoteEngineError",
    "ValidationError",
    "InvalidAddress",
    "InvalidPrice",
    "InvalidFee",
    "InvalidTickSpacing",
    "InvalidAmount",
    "UnknownFeeTier",
    "RpcUnavailable",
    "PoolNotInitialized",
    "InsufficientLiquidity",
]
