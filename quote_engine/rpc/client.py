"""Chain RPC clients for reading pool state and token metadata."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from quote_engine.amm.estimator import Slot0
from quote_engine.errors import RpcUnavailable
from quote_engine.models.types import normalize_address

from .abi import ERC20_METADATA_ABI, STATE_VIEW_ABI

logger = structlog.get_logger()


@dataclass(frozen=True)
class TokenMetadata:
    """ERC20 metadata. Static for the lifetime of a token."""

    address: str
    name: str
    symbol: str
    decimals: int


class ChainRpc(Protocol):
    """Protocol for the read-only chain collaborator.

    Implementations raise RpcUnavailable when the node cannot be reached or
    the call fails. They own timeouts and any retry policy; the engine does
    neither.
    """

    async def get_slot0(self, pool_id: bytes) -> Slot0:
        """Read (sqrtPriceX96, tick, protocolFee, lpFee) for a pool."""
        ...

    async def get_liquidity(self, pool_id: bytes) -> int:
        """Read the active liquidity at the pool's current tick."""
        ...

    async def get_token_metadata(self, address: str) -> TokenMetadata:
        """Read name, symbol and decimals of an ERC20 token."""
        ...


@dataclass
class MockPoolState:
    slot0: Slot0
    liquidity: int


@dataclass
class MockChainRpc:
    """In-memory chain for tests and local runs.

    Configure pool state per pool id and token metadata per address. Every
    read is recorded in ``calls`` for assertions. Unconfigured pools read as
    uninitialized (all zeros), like the real StateView.
    """

    pools: dict[bytes, MockPoolState] = field(default_factory=dict)
    tokens: dict[str, TokenMetadata] = field(default_factory=dict)
    latency: float = 0.0
    fail_with: Exception | None = None
    calls: list[tuple[str, str]] = field(default_factory=list)  # (method, pool id hex or address)

    def set_pool(self, pool_id: bytes, slot0: Slot0, liquidity: int) -> None:
        self.pools[pool_id] = MockPoolState(slot0=slot0, liquidity=liquidity)

    def set_token(self, metadata: TokenMetadata) -> None:
        self.tokens[normalize_address(metadata.address)] = metadata

    def call_count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    async def _read(self, method: str, target: str) -> None:
        self.calls.append((method, target))
        if self.latency:
            await asyncio.sleep(self.latency)
        if self.fail_with is not None:
            raise RpcUnavailable(f"{method} failed: {self.fail_with}") from self.fail_with

    async def get_slot0(self, pool_id: bytes) -> Slot0:
        await self._read("get_slot0", "0x" + pool_id.hex())
        state = self.pools.get(pool_id)
        if state is None:
            return Slot0(sqrt_price_x96=0, tick=0, protocol_fee=0, lp_fee=0)
        return state.slot0

    async def get_liquidity(self, pool_id: bytes) -> int:
        await self._read("get_liquidity", "0x" + pool_id.hex())
        state = self.pools.get(pool_id)
        return 0 if state is None else state.liquidity

    async def get_token_metadata(self, address: str) -> TokenMetadata:
        address = normalize_address(address)
        await self._read("get_token_metadata", address)
        metadata = self.tokens.get(address)
        if metadata is None:
            raise RpcUnavailable(f"Token {address} metadata call reverted")
        return metadata


class Web3ChainRpc:
    """Reads pool state through the StateView contract over JSON-RPC.

    This makes actual eth_call requests; each public method is one logical
    read and a suspension point for the event loop.
    """

    def __init__(
        self,
        rpc_url: str,
        state_view_address: str,
        timeout_seconds: float = 10.0,
    ):
        """Initialize client with an HTTP RPC endpoint.

        Args:
            rpc_url: HTTP RPC URL (e.g., "https://eth.llamarpc.com")
            state_view_address: StateView contract address
            timeout_seconds: Per-request HTTP timeout
        """
        from web3 import AsyncWeb3

        self.w3 = AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout_seconds})
        )
        self.state_view = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(state_view_address),
            abi=STATE_VIEW_ABI,
        )

    async def get_slot0(self, pool_id: bytes) -> Slot0:
        try:
            result = await self.state_view.functions.getSlot0(pool_id).call()
        except Exception as e:
            logger.warning(
                "rpc_read_failed", method="getSlot0", pool_id="0x" + pool_id.hex(), error=str(e)
            )
            raise RpcUnavailable(f"getSlot0 failed: {e}") from e

        # Result is (sqrtPriceX96, tick, protocolFee, lpFee)
        return Slot0(
            sqrt_price_x96=int(result[0]),
            tick=int(result[1]),
            protocol_fee=int(result[2]),
            lp_fee=int(result[3]),
        )

    async def get_liquidity(self, pool_id: bytes) -> int:
        try:
            result = await self.state_view.functions.getLiquidity(pool_id).call()
        except Exception as e:
            logger.warning(
                "rpc_read_failed", method="getLiquidity", pool_id="0x" + pool_id.hex(), error=str(e)
            )
            raise RpcUnavailable(f"getLiquidity failed: {e}") from e
        return int(result)

    async def get_token_metadata(self, address: str) -> TokenMetadata:
        from web3 import AsyncWeb3

        token = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address),
            abi=ERC20_METADATA_ABI,
        )
        try:
            name, symbol, decimals = await asyncio.gather(
                token.functions.name().call(),
                token.functions.symbol().call(),
                token.functions.decimals().call(),
            )
        except Exception as e:
            logger.warning("rpc_read_failed", method="erc20_metadata", token=address, error=str(e))
            raise RpcUnavailable(f"Token metadata read failed: {e}") from e

        return TokenMetadata(
            address=normalize_address(address),
            name=str(name),
            symbol=str(symbol),
            decimals=int(decimals),
        )


__all__ = [
    "TokenMetadata",
    "ChainRpc",
    "MockPoolState",
    "MockChainRpc",
    "Web3ChainRpc",
]
