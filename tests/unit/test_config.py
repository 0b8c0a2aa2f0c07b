"""Tests for EngineConfig."""

import pytest

from quote_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig


class TestFromEnv:
    def test_defaults(self):
        config = EngineConfig.from_env({})
        assert config == EngineConfig()
        assert config == DEFAULT_ENGINE_CONFIG
        assert config.quote_ttl_seconds == 30
        assert config.pool_state_ttl_seconds == 60
        assert config.token_metadata_ttl_seconds == 3600
        assert config.single_flight is True
        assert config.strict_fee_tiers is False
        assert config.allow_zero_liquidity_quotes is False

    def test_overrides(self):
        config = EngineConfig.from_env(
            {
                "QUOTE_ENGINE_QUOTE_TTL": "5",
                "QUOTE_ENGINE_POOL_STATE_TTL": "12.5",
                "QUOTE_ENGINE_SINGLE_FLIGHT": "false",
                "QUOTE_ENGINE_STRICT_FEE_TIERS": "yes",
                "QUOTE_ENGINE_ALLOW_ZERO_LIQUIDITY": "1",
                "RPC_URL": "http://localhost:8545",
                "STATE_VIEW_ADDRESS": "0x7ffe42c4a5deea5b0fec41c94c136cf115597227",
            }
        )

        assert config.quote_ttl_seconds == 5.0
        assert config.pool_state_ttl_seconds == 12.5
        assert config.single_flight is False
        assert config.strict_fee_tiers is True
        assert config.allow_zero_liquidity_quotes is True
        assert config.rpc_url == "http://localhost:8545"

    def test_empty_values_use_defaults(self):
        config = EngineConfig.from_env({"QUOTE_ENGINE_QUOTE_TTL": "", "RPC_URL": ""})
        assert config.quote_ttl_seconds == 30
        assert config.rpc_url is None

    def test_bad_number(self):
        with pytest.raises(ValueError, match="QUOTE_ENGINE_QUOTE_TTL"):
            EngineConfig.from_env({"QUOTE_ENGINE_QUOTE_TTL": "soon"})


class TestRpcConfigured:
    def test_needs_both_url_and_contract(self):
        assert not EngineConfig().rpc_configured
        assert not EngineConfig(rpc_url="http://localhost:8545").rpc_configured
        assert EngineConfig(
            rpc_url="http://localhost:8545",
            state_view_address="0x7ffe42c4a5deea5b0fec41c94c136cf115597227",
        ).rpc_configured
