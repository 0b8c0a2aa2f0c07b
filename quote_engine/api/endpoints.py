"""API endpoints for the quote engine.

Handlers only translate between HTTP models and engine calls. Engine errors
propagate to the exception handler registered in ``main``.
"""

from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, Query

from quote_engine.config import EngineConfig
from quote_engine.engine import QuoteEngine
from quote_engine.models.api import (
    CalculatePoolIdRequest,
    PoolIdResponse,
    PoolPriceResponse,
    PriceToSqrtRequest,
    PriceToSqrtResponse,
    QuoteRequest,
    QuoteResponse,
    ResolvePoolRequest,
    ResolvePoolResponse,
    SqrtToPriceRequest,
    SqrtToPriceResponse,
    TokenInfoResponse,
)

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_default_engine() -> QuoteEngine:
    """Engine built from environment configuration, created on first use."""
    return QuoteEngine.from_config(EngineConfig.from_env())


def get_engine() -> QuoteEngine:
    """Dependency provider for the engine instance.

    Override this in tests to inject an engine backed by a mock chain:
        app.dependency_overrides[get_engine] = lambda: engine
    """
    return get_default_engine()


@router.post("/pools/resolve", response_model_exclude_none=True)
@router.post("/utils/encode-poolkey", response_model_exclude_none=True)
async def resolve_pool(
    request: ResolvePoolRequest,
    engine: QuoteEngine = Depends(get_engine),
) -> ResolvePoolResponse:
    """Canonical pool key and pool id for a token pair and fee tier."""
    resolution = engine.resolve_pool(
        request.token_a,
        request.token_b,
        request.fee,
        tick_spacing=request.tick_spacing,
        hooks=request.hooks,
    )
    return ResolvePoolResponse.from_resolution(resolution)


@router.get("/pools/price", response_model_exclude_none=True)
async def get_pool_price(
    token_a: str = Query(alias="tokenA"),
    token_b: str = Query(alias="tokenB"),
    fee: int = Query(default=3000, ge=0),
    engine: QuoteEngine = Depends(get_engine),
) -> PoolPriceResponse:
    """Current price of the pool for a token pair."""
    state = await engine.pool_price(token_a, token_b, fee)
    return PoolPriceResponse.from_pool_price(state)


@router.get("/pools/{pool_id}", response_model_exclude_none=True)
async def get_pool(
    pool_id: str,
    engine: QuoteEngine = Depends(get_engine),
) -> PoolPriceResponse:
    """Current state of a pool by its id."""
    state = await engine.pool_state(pool_id)
    return PoolPriceResponse.from_pool_price(state)


@router.post("/quote")
async def quote(
    request: QuoteRequest,
    engine: QuoteEngine = Depends(get_engine),
) -> QuoteResponse:
    """Approximate swap quote at the pool's current price."""
    logger.info(
        "received_quote_request",
        token_in=request.token_in,
        token_out=request.token_out,
        amount_in=request.amount_in,
        fee=request.fee,
    )
    result = await engine.quote(
        request.token_in, request.token_out, int(request.amount_in), request.fee
    )
    return QuoteResponse.from_quote(result)


@router.post("/utils/calculate-poolid")
async def calculate_pool_id(
    request: CalculatePoolIdRequest,
    engine: QuoteEngine = Depends(get_engine),
) -> PoolIdResponse:
    """Pool id of an explicit pool key (object or array form)."""
    return PoolIdResponse(pool_id=engine.calculate_pool_id(request.to_key()))


@router.post("/utils/price-to-sqrt")
async def price_to_sqrt(
    request: PriceToSqrtRequest,
    engine: QuoteEngine = Depends(get_engine),
) -> PriceToSqrtResponse:
    """Convert a price (or a token amount ratio) to sqrtPriceX96."""
    price = request.resolved_price()
    sqrt_price_x96 = engine.price_to_sqrt_price(price)
    return PriceToSqrtResponse(price=price, sqrt_price_x96=sqrt_price_x96)


@router.post("/utils/sqrt-to-price")
async def sqrt_to_price(
    request: SqrtToPriceRequest,
    engine: QuoteEngine = Depends(get_engine),
) -> SqrtToPriceResponse:
    """Convert sqrtPriceX96 to a price."""
    price = engine.sqrt_price_to_price(int(request.sqrt_price_x96))
    return SqrtToPriceResponse(
        sqrt_price_x96=request.sqrt_price_x96,
        price=price,
        human_readable=f"{price:.6f}",
    )


@router.get("/tokens/{address}")
async def get_token(
    address: str,
    engine: QuoteEngine = Depends(get_engine),
) -> TokenInfoResponse:
    """ERC20 metadata for a token."""
    metadata = await engine.token_info(address)
    return TokenInfoResponse.from_metadata(metadata)
