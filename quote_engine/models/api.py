"""Pydantic models for the HTTP request and response bodies.

Field names are camelCase on the wire (aliases) and snake_case in Python.
Amounts travel as decimal strings so uint256 values survive JSON.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from quote_engine.amm import PoolKey, Quote, price_from_amounts
from quote_engine.constants import ZERO_ADDRESS
from quote_engine.engine import PoolPrice, PoolResolution
from quote_engine.errors import InvalidPrice
from quote_engine.models.types import Address, Bytes32, Uint256
from quote_engine.rpc import TokenMetadata


class PoolKeyModel(BaseModel):
    """Pool key in object form."""

    currency0: Address
    currency1: Address
    fee: int = Field(ge=0, le=2**24 - 1)
    tick_spacing: int = Field(alias="tickSpacing")
    hooks: Address = ZERO_ADDRESS

    model_config = {"populate_by_name": True}

    @classmethod
    def from_key(cls, key: PoolKey) -> PoolKeyModel:
        return cls(
            currency0=key.currency0,
            currency1=key.currency1,
            fee=key.fee,
            tick_spacing=key.tick_spacing,
            hooks=key.hooks,
        )

    def to_key(self) -> PoolKey:
        return PoolKey.from_mapping(self.model_dump())


class ResolvePoolRequest(BaseModel):
    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")
    fee: int = Field(default=3000, ge=0, le=2**24 - 1, description="Fee tier, e.g. 3000 for 0.3%")
    tick_spacing: int | None = Field(default=None, alias="tickSpacing")
    hooks: Address | None = None

    model_config = {"populate_by_name": True}


class ResolvePoolResponse(BaseModel):
    pool_key: PoolKeyModel = Field(alias="poolKey")
    pool_key_array: list[Any] = Field(alias="poolKeyArray")
    pool_id: Bytes32 = Field(alias="poolId")
    fee_tier_known: bool = Field(alias="feeTierKnown")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_resolution(cls, resolution: PoolResolution) -> ResolvePoolResponse:
        return cls(
            pool_key=PoolKeyModel.from_key(resolution.pool_key),
            pool_key_array=list(resolution.pool_key.as_tuple()),
            pool_id=resolution.pool_id_hex,
            fee_tier_known=resolution.fee_tier_known,
        )


class QuoteRequest(BaseModel):
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    fee: int = Field(default=3000, ge=0, le=2**24 - 1, description="Fee tier, e.g. 3000 for 0.3%")

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    """Approximate single-pool quote.

    ``priceImpact`` is a linear display heuristic (amountIn / liquidity),
    not a slippage bound.
    """

    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    price: float
    price_impact: float = Field(alias="priceImpact", description="Percent")
    fee: int
    pool_id: Bytes32 = Field(alias="poolId")
    route: list[Address]
    zero_for_one: bool = Field(alias="zeroForOne")
    fee_tier_known: bool = Field(alias="feeTierKnown")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: Quote) -> QuoteResponse:
        return cls(
            token_in=quote.token_in,
            token_out=quote.token_out,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            price=quote.price,
            price_impact=round(quote.price_impact_pct, 4),
            fee=quote.fee,
            pool_id=quote.pool_id,
            route=list(quote.route),
            zero_for_one=quote.zero_for_one,
            fee_tier_known=quote.fee_tier_known,
        )


class PoolPriceResponse(BaseModel):
    pool_id: Bytes32 = Field(alias="poolId")
    pool_key: PoolKeyModel | None = Field(default=None, alias="poolKey")
    sqrt_price_x96: Uint256 = Field(alias="sqrtPriceX96")
    tick: int
    liquidity: Uint256
    protocol_fee: int = Field(alias="protocolFee")
    lp_fee: int = Field(alias="lpFee")
    price: float
    inverse_price: float = Field(alias="inversePrice")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pool_price(cls, state: PoolPrice) -> PoolPriceResponse:
        return cls(
            pool_id=state.pool_id,
            pool_key=PoolKeyModel.from_key(state.pool_key) if state.pool_key else None,
            sqrt_price_x96=state.sqrt_price_x96,
            tick=state.tick,
            liquidity=state.liquidity,
            protocol_fee=state.protocol_fee,
            lp_fee=state.lp_fee,
            price=state.price,
            inverse_price=state.inverse_price,
        )


class CalculatePoolIdRequest(BaseModel):
    """Pool key in either object or 5-element array form."""

    pool_key: PoolKeyModel | tuple[Address, Address, int, int, Address] = Field(alias="poolKey")

    model_config = {"populate_by_name": True}

    def to_key(self) -> PoolKey:
        if isinstance(self.pool_key, PoolKeyModel):
            return self.pool_key.to_key()
        return PoolKey.from_sequence(self.pool_key)


class PoolIdResponse(BaseModel):
    pool_id: Bytes32 = Field(alias="poolId")

    model_config = {"populate_by_name": True}


class PriceToSqrtRequest(BaseModel):
    """Either ``price`` or both token amounts (price = token1 / token0)."""

    price: float | None = None
    token0_amount: float | None = Field(default=None, alias="token0Amount")
    token1_amount: float | None = Field(default=None, alias="token1Amount")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_price_source(self) -> PriceToSqrtRequest:
        if self.price is None and (self.token0_amount is None or self.token1_amount is None):
            raise ValueError("Provide either price or (token0Amount and token1Amount)")
        return self

    def resolved_price(self) -> float:
        """The explicit price, or token1Amount / token0Amount.

        Raises:
            InvalidPrice: If neither source is complete, or an amount is not positive
        """
        if self.price is not None:
            return self.price
        if self.token0_amount is None or self.token1_amount is None:
            raise InvalidPrice("Provide either price or (token0Amount and token1Amount)")
        return price_from_amounts(self.token0_amount, self.token1_amount)


class PriceToSqrtResponse(BaseModel):
    price: float
    sqrt_price_x96: Uint256 = Field(alias="sqrtPriceX96")

    model_config = {"populate_by_name": True}


class SqrtToPriceRequest(BaseModel):
    sqrt_price_x96: Uint256 = Field(alias="sqrtPriceX96")

    model_config = {"populate_by_name": True}


class SqrtToPriceResponse(BaseModel):
    sqrt_price_x96: Uint256 = Field(alias="sqrtPriceX96")
    price: float
    human_readable: str = Field(alias="humanReadable")

    model_config = {"populate_by_name": True}


class TokenInfoResponse(BaseModel):
    address: Address
    name: str
    symbol: str
    decimals: int

    @classmethod
    def from_metadata(cls, metadata: TokenMetadata) -> TokenInfoResponse:
        return cls(
            address=metadata.address,
            name=metadata.name,
            symbol=metadata.symbol,
            decimals=metadata.decimals,
        )


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
