"""Tests for the HTTP routes and error rendering."""

import pytest
from fastapi.testclient import TestClient

from quote_engine.api.endpoints import get_engine
from quote_engine.api.main import app, status_code_for
from quote_engine.errors import (
    InsufficientLiquidity,
    InvalidFee,
    InvalidPrice,
    PoolNotInitialized,
    QuoteEngineError,
    RpcUnavailable,
    UnknownFeeTier,
)
from quote_engine.models.api import PriceToSqrtRequest
from tests.helpers import DAI, NATIVE, Q96, USDC, USDC_CHECKSUM, WETH, WETH_CHECKSUM, seed_pool


@pytest.fixture
def client(engine):
    """Test client with the engine backed by the mock chain."""
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def assert_error(response, status_code: int, code: str) -> None:
    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["message"]


class TestStatusCodes:
    @pytest.mark.parametrize(
        "error,status_code",
        [
            (InvalidFee("bad"), 400),
            (UnknownFeeTier("bad"), 400),
            (PoolNotInitialized("bad"), 404),
            (InsufficientLiquidity("bad"), 409),
            (RpcUnavailable("bad"), 503),
            (QuoteEngineError("bad"), 500),
        ],
    )
    def test_mapping(self, error, status_code):
        assert status_code_for(error) == status_code


class TestResolvePool:
    """Tests for POST /pools/resolve."""

    def test_same_id_for_either_order(self, client):
        forward = client.post("/pools/resolve", json={"tokenA": WETH, "tokenB": USDC, "fee": 3000})
        backward = client.post(
            "/pools/resolve", json={"tokenA": USDC_CHECKSUM, "tokenB": WETH_CHECKSUM, "fee": 3000}
        )

        assert forward.status_code == 200
        assert forward.json()["poolId"] == backward.json()["poolId"]

    def test_response_shape(self, client):
        data = client.post("/pools/resolve", json={"tokenA": WETH, "tokenB": USDC}).json()

        assert data["poolKey"] == {
            "currency0": USDC,
            "currency1": WETH,
            "fee": 3000,
            "tickSpacing": 60,
            "hooks": NATIVE,
        }
        assert data["poolKeyArray"] == [USDC, WETH, 3000, 60, NATIVE]
        assert len(data["poolId"]) == 66
        assert data["feeTierKnown"] is True

    def test_unknown_fee_tier(self, client):
        data = client.post(
            "/pools/resolve", json={"tokenA": WETH, "tokenB": USDC, "fee": 1234}
        ).json()
        assert data["poolKey"]["tickSpacing"] == 60
        assert data["feeTierKnown"] is False

    def test_malformed_address(self, client):
        response = client.post("/pools/resolve", json={"tokenA": "0x123", "tokenB": USDC})
        assert response.status_code == 422

    def test_identical_tokens(self, client):
        response = client.post("/pools/resolve", json={"tokenA": WETH, "tokenB": WETH_CHECKSUM})
        assert_error(response, 400, "INVALID_ADDRESS")

    @pytest.mark.parametrize("fee", [1_000_000, 0x800000])
    def test_fee_at_or_above_denominator_resolves(self, client, fee):
        response = client.post("/pools/resolve", json={"tokenA": WETH, "tokenB": USDC, "fee": fee})

        assert response.status_code == 200
        data = response.json()
        assert data["poolKey"]["fee"] == fee
        assert data["feeTierKnown"] is False


class TestQuote:
    """Tests for POST /quote."""

    def test_quote(self, client):
        response = client.post(
            "/quote",
            json={"tokenIn": USDC, "tokenOut": WETH, "amountIn": "1000000000000000000"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amountOut"] == "3988000000000000000"
        assert data["amountIn"] == "1000000000000000000"
        assert data["price"] == 4.0
        assert data["priceImpact"] == 1.0
        assert data["route"] == [USDC, WETH]
        assert data["zeroForOne"] is True
        assert data["feeTierKnown"] is True

    def test_integer_amount_accepted(self, client):
        response = client.post(
            "/quote", json={"tokenIn": WETH, "tokenOut": USDC, "amountIn": 10**18, "fee": 3000}
        )
        assert response.json()["amountOut"] == "249250000000000000"

    @pytest.mark.parametrize("amount", ["-5", "1.5", "abc", str(2**256)])
    def test_bad_amount(self, client, amount):
        body = {"tokenIn": USDC, "tokenOut": WETH, "amountIn": amount}
        response = client.post("/quote", json=body)
        assert response.status_code == 422

    def test_full_fee_rejected(self, client, mock_rpc):
        body = {"tokenIn": USDC, "tokenOut": WETH, "amountIn": "1000", "fee": 1_000_000}
        assert_error(client.post("/quote", json=body), 400, "INVALID_FEE")
        assert mock_rpc.calls == []

    def test_uninitialized_pool(self, client):
        response = client.post(
            "/quote", json={"tokenIn": USDC, "tokenOut": WETH, "amountIn": "1", "fee": 500}
        )
        assert_error(response, 404, "POOL_NOT_INITIALIZED")

    def test_zero_liquidity(self, client, mock_rpc):
        seed_pool(mock_rpc, USDC, DAI, fee=500, liquidity=0)
        response = client.post(
            "/quote", json={"tokenIn": USDC, "tokenOut": DAI, "amountIn": "1", "fee": 500}
        )
        assert_error(response, 409, "INSUFFICIENT_LIQUIDITY")

    def test_rpc_down(self, client, mock_rpc):
        mock_rpc.fail_with = ConnectionError("connection refused")
        response = client.post("/quote", json={"tokenIn": USDC, "tokenOut": WETH, "amountIn": "1"})
        assert_error(response, 503, "RPC_UNAVAILABLE")


class TestPriceConversions:
    """Tests for the /utils conversion routes."""

    def test_sqrt_to_price(self, client):
        response = client.post("/utils/sqrt-to-price", json={"sqrtPriceX96": str(Q96)})

        assert response.status_code == 200
        data = response.json()
        assert data["price"] == 1.0
        assert data["humanReadable"] == "1.000000"
        assert data["sqrtPriceX96"] == str(Q96)

    def test_sqrt_to_price_out_of_range(self, client):
        response = client.post("/utils/sqrt-to-price", json={"sqrtPriceX96": str(2**160)})
        assert_error(response, 400, "INVALID_AMOUNT")

    def test_price_to_sqrt(self, client):
        data = client.post("/utils/price-to-sqrt", json={"price": 4}).json()
        assert data["sqrtPriceX96"] == str(2 * Q96)
        assert data["price"] == 4.0

    def test_price_to_sqrt_from_amounts(self, client):
        data = client.post(
            "/utils/price-to-sqrt", json={"token0Amount": 1, "token1Amount": 4}
        ).json()
        assert data["sqrtPriceX96"] == str(2 * Q96)

    def test_price_to_sqrt_missing_input(self, client):
        assert client.post("/utils/price-to-sqrt", json={}).status_code == 422
        assert client.post("/utils/price-to-sqrt", json={"token0Amount": 1}).status_code == 422

    @pytest.mark.parametrize(
        "body", [{"price": 0}, {"price": -1.5}, {"token0Amount": 0, "token1Amount": 4}]
    )
    def test_price_to_sqrt_non_positive(self, client, body):
        assert_error(client.post("/utils/price-to-sqrt", json=body), 400, "INVALID_PRICE")

    def test_resolved_price_from_amounts(self):
        request = PriceToSqrtRequest(token0Amount=2, token1Amount=8)
        assert request.resolved_price() == 4.0
        assert PriceToSqrtRequest(price=2.5, token0Amount=1).resolved_price() == 2.5

    def test_resolved_price_without_source(self):
        """Unvalidated requests raise a domain error instead of failing an assertion."""
        request = PriceToSqrtRequest.model_construct(token0_amount=1.0)
        with pytest.raises(InvalidPrice):
            request.resolved_price()


class TestCalculatePoolId:
    def test_object_and_array_forms_agree(self, client):
        key = {
            "currency0": USDC,
            "currency1": WETH,
            "fee": 3000,
            "tickSpacing": 60,
            "hooks": NATIVE,
        }
        by_object = client.post("/utils/calculate-poolid", json={"poolKey": key}).json()
        by_array = client.post(
            "/utils/calculate-poolid", json={"poolKey": [USDC, WETH, 3000, 60, NATIVE]}
        ).json()

        assert by_object["poolId"] == by_array["poolId"]

    def test_matches_resolve(self, client):
        resolved = client.post("/pools/resolve", json={"tokenA": WETH, "tokenB": USDC}).json()
        calculated = client.post(
            "/utils/calculate-poolid", json={"poolKey": resolved["poolKeyArray"]}
        ).json()
        assert calculated["poolId"] == resolved["poolId"]

    def test_invalid_tick_spacing(self, client):
        response = client.post(
            "/utils/calculate-poolid", json={"poolKey": [USDC, WETH, 3000, 0, NATIVE]}
        )
        assert_error(response, 400, "INVALID_TICK_SPACING")

    def test_dynamic_fee_key(self, client):
        response = client.post(
            "/utils/calculate-poolid", json={"poolKey": [USDC, WETH, 0x800000, 60, NATIVE]}
        )
        assert response.status_code == 200
        assert response.json()["poolId"] != client.post(
            "/utils/calculate-poolid", json={"poolKey": [USDC, WETH, 3000, 60, NATIVE]}
        ).json()["poolId"]


class TestPoolRoutes:
    def test_pool_price(self, client):
        response = client.get(
            "/pools/price", params={"tokenA": WETH, "tokenB": USDC, "fee": 3000}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["price"] == 4.0
        assert data["inversePrice"] == 0.25
        assert data["sqrtPriceX96"] == str(2 * Q96)
        assert data["liquidity"] == str(10**20)
        assert data["poolKey"]["currency0"] == USDC

    def test_pool_by_id(self, client):
        pool_id = client.post("/pools/resolve", json={"tokenA": WETH, "tokenB": USDC}).json()[
            "poolId"
        ]
        data = client.get(f"/pools/{pool_id}").json()

        assert data["poolId"] == pool_id
        assert data["price"] == 4.0
        assert "poolKey" not in data

    def test_bad_pool_id(self, client):
        assert_error(client.get("/pools/0x1234"), 400, "INVALID_ADDRESS")

    def test_uninitialized_pool(self, client):
        response = client.get("/pools/price", params={"tokenA": WETH, "tokenB": DAI})
        assert_error(response, 404, "POOL_NOT_INITIALIZED")


class TestTokenRoute:
    def test_token_info(self, client):
        data = client.get(f"/tokens/{WETH_CHECKSUM}").json()
        assert data == {"address": WETH, "name": "Wrapped Ether", "symbol": "WETH", "decimals": 18}

    def test_unknown_token(self, client):
        assert_error(client.get(f"/tokens/{DAI}"), 503, "RPC_UNAVAILABLE")

    def test_invalid_address(self, client):
        assert_error(client.get("/tokens/0xabc"), 400, "INVALID_ADDRESS")


def test_health(client):
    data = client.get("/health").json()
    assert data["status"] == "ok"
    assert data["rpc_configured"] is True
    assert data["cached_entries"] == 0


def test_encode_pool_key_matches_resolve(client):
    body = {"tokenA": WETH, "tokenB": USDC, "fee": 500, "hooks": NATIVE}
    encoded = client.post("/utils/encode-poolkey", json=body).json()
    resolved = client.post("/pools/resolve", json=body).json()
    assert encoded == resolved
