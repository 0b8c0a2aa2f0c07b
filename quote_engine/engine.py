"""Quote engine: the operations the API layer calls.

Control flow for a quote:

    validate -> build pool key + id -> cache lookup
      -> [miss] read Slot0 and liquidity from the chain -> estimate -> cache store

Local validation fails before any hashing or RPC. RPC failures surface as
RpcUnavailable without retries or stale fallbacks.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from decimal import Decimal

import structlog

from quote_engine.amm import (
    FeeTierRegistry,
    PoolKey,
    Quote,
    QuoteEstimator,
    Slot0,
    build_pool_key,
    compute_pool_id,
    price_to_sqrt_price_x96,
    sqrt_price_x96_to_price,
    validate_swap_fee,
)
from quote_engine.cache import QuoteCache, QuoteFingerprint
from quote_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from quote_engine.constants import UINT256_MAX
from quote_engine.errors import InvalidAddress, InvalidAmount, PoolNotInitialized, RpcUnavailable
from quote_engine.models.types import is_valid_bytes32, normalize_address
from quote_engine.rpc import ChainRpc, TokenMetadata

logger = structlog.get_logger()


@dataclass(frozen=True)
class PoolResolution:
    """A pool key together with its on-chain id."""

    pool_key: PoolKey
    pool_id: bytes
    fee_tier_known: bool

    @property
    def pool_id_hex(self) -> str:
        return "0x" + self.pool_id.hex()


@dataclass(frozen=True)
class PoolPrice:
    """Current price view of a pool, derived from one Slot0 read."""

    pool_id: str
    sqrt_price_x96: int
    tick: int
    liquidity: int
    protocol_fee: int
    lp_fee: int
    price: float  # token1 per token0
    inverse_price: float  # token0 per token1
    pool_key: PoolKey | None = None


def _parse_pool_id(pool_id: bytes | str) -> bytes:
    if isinstance(pool_id, bytes):
        if len(pool_id) != 32:
            raise InvalidAddress(f"Pool id must be 32 bytes, got {len(pool_id)}")
        return pool_id
    if not is_valid_bytes32(pool_id):
        raise InvalidAddress(f"Pool id must be 0x + 64 hex chars: {pool_id}")
    return bytes.fromhex(pool_id[2:])


class QuoteEngine:
    """Resolves pools, converts prices and produces cached quotes.

    Each instance owns its cache and fee tier registry. Concurrent calls on
    one event loop are safe; only the cache holds mutable state.
    """

    def __init__(
        self,
        rpc: ChainRpc | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        *,
        cache: QuoteCache | None = None,
        registry: FeeTierRegistry | None = None,
    ):
        """Initialize the engine.

        Args:
            rpc: Chain reader. If None, operations needing chain state raise
                RpcUnavailable; pure operations still work.
            config: TTLs and behaviour flags
            cache: Cache to use; a new one is created from config if None
            registry: Fee tier registry; a new one is created from config if None
        """
        self.rpc = rpc
        self.config = config
        self.registry = registry or FeeTierRegistry(strict=config.strict_fee_tiers)
        self.cache = cache if cache is not None else QuoteCache(
            default_ttl=config.quote_ttl_seconds,
            single_flight=config.single_flight,
        )
        self.estimator = QuoteEstimator(
            self.registry,
            allow_zero_liquidity=config.allow_zero_liquidity_quotes,
        )

    @classmethod
    def from_config(cls, config: EngineConfig) -> QuoteEngine:
        """Create an engine with a web3-backed RPC client if one is configured."""
        rpc: ChainRpc | None = None
        if config.rpc_url and config.state_view_address:
            from quote_engine.rpc import Web3ChainRpc

            logger.info("rpc_enabled", rpc_url=config.rpc_url[:50] + "...")
            rpc = Web3ChainRpc(
                config.rpc_url,
                config.state_view_address,
                timeout_seconds=config.rpc_timeout_seconds,
            )
        else:
            logger.info("rpc_disabled", reason="RPC_URL or STATE_VIEW_ADDRESS not set")
        return cls(rpc=rpc, config=config)

    def _require_rpc(self) -> ChainRpc:
        if self.rpc is None:
            raise RpcUnavailable("No chain RPC configured")
        return self.rpc

    # ------------------------------------------------------------------
    # Pure operations
    # ------------------------------------------------------------------

    def resolve_pool(
        self,
        token_a: str,
        token_b: str,
        fee: int,
        tick_spacing: int | None = None,
        hooks: str | None = None,
    ) -> PoolResolution:
        """Build the canonical pool key for a pair and derive its pool id."""
        key = build_pool_key(token_a, token_b, fee, tick_spacing, hooks, registry=self.registry)
        return PoolResolution(
            pool_key=key,
            pool_id=compute_pool_id(key),
            fee_tier_known=self.registry.is_known(fee),
        )

    def calculate_pool_id(self, key: PoolKey) -> str:
        """Pool id of an explicit key, as 0x hex."""
        return "0x" + compute_pool_id(key).hex()

    def sqrt_price_to_price(self, sqrt_price_x96: int) -> float:
        return sqrt_price_x96_to_price(sqrt_price_x96)

    def price_to_sqrt_price(self, price: float | Decimal) -> int:
        return price_to_sqrt_price_x96(price)

    # ------------------------------------------------------------------
    # Chain-backed operations
    # ------------------------------------------------------------------

    async def quote(self, token_in: str, token_out: str, amount_in: int, fee: int) -> Quote:
        """Approximate quote for swapping amount_in of token_in into token_out.

        Identical requests within the quote TTL are served from the cache.

        Raises:
            InvalidAddress, InvalidFee, InvalidAmount, UnknownFeeTier: Bad input
            RpcUnavailable: The chain could not be read
            PoolNotInitialized: The pool has no price
            InsufficientLiquidity: The pool has no liquidity for a non-zero trade
        """
        if isinstance(amount_in, bool) or not isinstance(amount_in, int):
            raise InvalidAmount(f"amountIn must be an integer, got {type(amount_in).__name__}")
        if amount_in < 0 or amount_in > UINT256_MAX:
            raise InvalidAmount(f"amountIn out of uint256 range: {amount_in}")
        validate_swap_fee(fee)

        resolution = self.resolve_pool(token_in, token_out, fee)
        fingerprint = QuoteFingerprint.of(token_in, token_out, amount_in, fee)

        async def compute() -> Quote:
            rpc = self._require_rpc()
            slot0, liquidity = await asyncio.gather(
                rpc.get_slot0(resolution.pool_id),
                rpc.get_liquidity(resolution.pool_id),
            )
            quote = self.estimator.estimate(
                token_in,
                token_out,
                amount_in,
                fee,
                slot0,
                liquidity,
                pool_key=resolution.pool_key,
            )
            logger.info(
                "quote_computed",
                pool_id=quote.pool_id,
                token_in=quote.token_in,
                token_out=quote.token_out,
                amount_in=quote.amount_in,
                amount_out=quote.amount_out,
                price_impact_pct=quote.price_impact_pct,
            )
            return quote

        return await self.cache.get_or_compute(
            fingerprint, compute, self.config.quote_ttl_seconds
        )

    async def pool_state(self, pool_id: bytes | str, pool_key: PoolKey | None = None) -> PoolPrice:
        """Current price view of a pool by id, cached for the pool-state TTL.

        Raises:
            InvalidAddress: If pool_id is not 32 bytes
            RpcUnavailable: The chain could not be read
            PoolNotInitialized: The pool has no price
        """
        pool_id_bytes = _parse_pool_id(pool_id)

        async def compute() -> PoolPrice:
            rpc = self._require_rpc()
            slot0, liquidity = await asyncio.gather(
                rpc.get_slot0(pool_id_bytes),
                rpc.get_liquidity(pool_id_bytes),
            )
            return self._pool_price(pool_id_bytes, slot0, liquidity, pool_key)

        return await self.cache.get_or_compute(
            ("pool_state", pool_id_bytes), compute, self.config.pool_state_ttl_seconds
        )

    async def pool_price(self, token_a: str, token_b: str, fee: int) -> PoolPrice:
        """Current price view of the pool for a token pair and fee tier."""
        resolution = self.resolve_pool(token_a, token_b, fee)
        state = await self.pool_state(resolution.pool_id, resolution.pool_key)
        if state.pool_key is None:
            # Snapshot was cached by a lookup by id
            state = replace(state, pool_key=resolution.pool_key)
        return state

    async def token_info(self, address: str) -> TokenMetadata:
        """ERC20 name, symbol and decimals, cached for the token-metadata TTL."""
        token = normalize_address(address, validate=True)

        async def compute() -> TokenMetadata:
            metadata = await self._require_rpc().get_token_metadata(token)
            logger.info("token_info_retrieved", token=token, symbol=metadata.symbol)
            return metadata

        return await self.cache.get_or_compute(
            ("token", token), compute, self.config.token_metadata_ttl_seconds
        )

    @staticmethod
    def _pool_price(
        pool_id: bytes, slot0: Slot0, liquidity: int, pool_key: PoolKey | None
    ) -> PoolPrice:
        pool_id_hex = "0x" + pool_id.hex()
        if not slot0.is_initialized:
            raise PoolNotInitialized(f"Pool {pool_id_hex} is not initialized")

        price = sqrt_price_x96_to_price(slot0.sqrt_price_x96)
        return PoolPrice(
            pool_id=pool_id_hex,
            sqrt_price_x96=slot0.sqrt_price_x96,
            tick=slot0.tick,
            liquidity=liquidity,
            protocol_fee=slot0.protocol_fee,
            lp_fee=slot0.lp_fee,
            price=price,
            inverse_price=1 / price if price > 0 else 0.0,
            pool_key=pool_key,
        )


__all__ = ["PoolResolution", "PoolPrice", "QuoteEngine"]
