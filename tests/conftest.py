"""Pytest configuration and fixtures."""

import pytest

from quote_engine.cache import QuoteCache
from quote_engine.config import EngineConfig
from quote_engine.engine import QuoteEngine
from quote_engine.rpc import MockChainRpc, TokenMetadata
from tests.helpers import USDC, WETH, seed_pool


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_rpc() -> MockChainRpc:
    """Mock chain with a USDC/WETH 0.3% pool at price 4.0 and token metadata."""
    rpc = MockChainRpc()
    seed_pool(rpc, USDC, WETH, fee=3000)
    rpc.set_token(TokenMetadata(address=WETH, name="Wrapped Ether", symbol="WETH", decimals=18))
    rpc.set_token(TokenMetadata(address=USDC, name="USD Coin", symbol="USDC", decimals=6))
    return rpc


@pytest.fixture
def engine(mock_rpc: MockChainRpc, clock: FakeClock) -> QuoteEngine:
    """Engine over the mock chain with a controllable cache clock."""
    config = EngineConfig()
    cache = QuoteCache(
        default_ttl=config.quote_ttl_seconds,
        single_flight=config.single_flight,
        clock=clock,
    )
    return QuoteEngine(rpc=mock_rpc, config=config, cache=cache)
