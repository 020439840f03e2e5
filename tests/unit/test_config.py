"""Unit tests for environment-driven settings."""

from pathlib import Path

import pytest

from game_deployments.config import Settings, load_settings
from game_deployments.constants import DEFAULT_RPC_URL
from game_deployments.exceptions import ConfigError
from game_deployments.types import ContractType

SCORE_FACTORY = "0x" + "aa" * 20


class TestLoadSettings:
    """Test the load_settings function."""

    def test_defaults(self):
        """Test settings from an empty environment."""
        settings = load_settings({})

        assert settings.rpc_url == DEFAULT_RPC_URL
        assert settings.chain_id is None
        assert settings.factories == {}
        assert not settings.is_managed_mode
        assert settings.storage_dir.name == ".game-deployments"

    def test_reads_variables(self, tmp_path):
        """Test that every variable is picked up."""
        settings = load_settings(
            {
                "RPC_URL": "http://node:8545",
                "SDK_CHAIN_ID": "8453",
                "GAME_SCORE_FACTORY": SCORE_FACTORY,
                "GAME_DEPLOYMENTS_DIR": str(tmp_path),
            }
        )

        assert settings.rpc_url == "http://node:8545"
        assert settings.chain_id == 8453
        assert settings.factories == {ContractType.SCORE: SCORE_FACTORY}
        assert settings.storage_dir == tmp_path
        assert settings.paths.contracts == tmp_path / "contracts.json"

    def test_hex_chain_id(self):
        """Test that a 0x-prefixed chain id is accepted."""
        assert load_settings({"SDK_CHAIN_ID": "0x2105"}).chain_id == 8453

    def test_blank_chain_id_is_unset(self):
        """Test that an empty chain id means not configured."""
        assert load_settings({"SDK_CHAIN_ID": "  "}).chain_id is None

    def test_invalid_chain_id_raises(self):
        """Test that a non-numeric chain id is a ConfigError."""
        with pytest.raises(ConfigError, match="SDK_CHAIN_ID"):
            load_settings({"SDK_CHAIN_ID": "mainnet"})

    def test_prize_matches_per_pool(self):
        """Test that the Prize pool size is read as an integer."""
        assert load_settings({}).prize_matches_per_pool is None
        assert load_settings({"GAME_PRIZE_MATCHES_PER_POOL": "4"}).prize_matches_per_pool == 4

    def test_invalid_prize_matches_per_pool_raises(self):
        """Test that a non-numeric pool size names its variable."""
        with pytest.raises(ConfigError, match="GAME_PRIZE_MATCHES_PER_POOL"):
            load_settings({"GAME_PRIZE_MATCHES_PER_POOL": "four"})

    def test_managed_mode_needs_url_and_token(self):
        """Test that managed mode requires both URL and token."""
        assert not load_settings({"MANAGED_API_URL": "https://api.example"}).is_managed_mode
        assert load_settings(
            {"MANAGED_API_URL": "https://api.example", "MANAGED_API_TOKEN": "secret"}
        ).is_managed_mode


class TestFactoryAddress:
    """Test Settings.factory_address."""

    def test_configured_factory(self):
        """Test lookup of a configured factory."""
        settings = Settings(factories={ContractType.SCORE: SCORE_FACTORY}, storage_dir=Path("/tmp"))
        assert settings.factory_address(ContractType.SCORE) == SCORE_FACTORY

    def test_missing_factory_names_variable(self):
        """Test that a missing factory error names the env variable to set."""
        settings = Settings(storage_dir=Path("/tmp"))

        with pytest.raises(ConfigError, match="GAME_EVENT_BUS_FACTORY"):
            settings.factory_address(ContractType.EVENT_BUS)
