"""Engine configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from quote_engine.cache import (
    DEFAULT_POOL_STATE_TTL,
    DEFAULT_QUOTE_TTL,
    DEFAULT_TOKEN_METADATA_TTL,
)

_TRUE_VALUES = ("true", "1", "yes")


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(name)
    if value is None:
        return default
    return value.lower() in _TRUE_VALUES


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    value = environ.get(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError as err:
        raise ValueError(f"{name} must be a number, got '{value}'") from err


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for one QuoteEngine instance.

    Attributes:
        quote_ttl_seconds: Cache lifetime of trade quotes (default: 30)
        pool_state_ttl_seconds: Cache lifetime of pool price snapshots (default: 60)
        token_metadata_ttl_seconds: Cache lifetime of symbol/decimals (default: 3600)
        single_flight: If True, concurrent identical requests share one
            computation. If False, each issues its own RPC reads.
        strict_fee_tiers: If True, unknown fee tiers raise UnknownFeeTier.
            If False, they resolve to tick spacing 60.
        allow_zero_liquidity_quotes: If True, zero-liquidity pools return a
            quote with zero price impact. If False, raise InsufficientLiquidity.
        rpc_url: JSON-RPC endpoint; quotes are unavailable when unset
        state_view_address: StateView contract used for pool reads
        rpc_timeout_seconds: HTTP timeout per RPC request
    """

    quote_ttl_seconds: float = DEFAULT_QUOTE_TTL
    pool_state_ttl_seconds: float = DEFAULT_POOL_STATE_TTL
    token_metadata_ttl_seconds: float = DEFAULT_TOKEN_METADATA_TTL

    single_flight: bool = True
    strict_fee_tiers: bool = False
    allow_zero_liquidity_quotes: bool = False

    rpc_url: str | None = None
    state_view_address: str | None = None
    rpc_timeout_seconds: float = 10.0

    @property
    def rpc_configured(self) -> bool:
        return bool(self.rpc_url and self.state_view_address)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a config from environment variables.

        Raises:
            ValueError: If a numeric variable is not a number
        """
        env = os.environ if environ is None else environ
        return cls(
            quote_ttl_seconds=_env_float(env, "QUOTE_ENGINE_QUOTE_TTL", DEFAULT_QUOTE_TTL),
            pool_state_ttl_seconds=_env_float(
                env, "QUOTE_ENGINE_POOL_STATE_TTL", DEFAULT_POOL_STATE_TTL
            ),
            token_metadata_ttl_seconds=_env_float(
                env, "QUOTE_ENGINE_TOKEN_TTL", DEFAULT_TOKEN_METADATA_TTL
            ),
            single_flight=_env_bool(env, "QUOTE_ENGINE_SINGLE_FLIGHT", True),
            strict_fee_tiers=_env_bool(env, "QUOTE_ENGINE_STRICT_FEE_TIERS", False),
            allow_zero_liquidity_quotes=_env_bool(env, "QUOTE_ENGINE_ALLOW_ZERO_LIQUIDITY", False),
            rpc_url=env.get("RPC_URL") or None,
            state_view_address=env.get("STATE_VIEW_ADDRESS") or None,
            rpc_timeout_seconds=_env_float(env, "QUOTE_ENGINE_RPC_TIMEOUT", 10.0),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
