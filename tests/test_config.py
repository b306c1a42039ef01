"""Unit tests for saver configuration."""

import pytest
from pydantic import ValidationError

from checkpoint_dynamodb.config.saver_config import (
    DYNAMODB_BATCH_LIMIT,
    DYNAMODB_ITEM_SIZE_LIMIT,
    SaverConfig,
)

ENV_VARS = [
    "CHECKPOINTS_TABLE_NAME",
    "WRITES_TABLE_NAME",
    "AWS_REGION",
    "AWS_DYNAMODB_ENDPOINT",
    "DYNAMODB_MAX_BATCH_SIZE",
    "DYNAMODB_MAX_ITEM_SIZE",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove saver environment variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSaverConfig:
    """Test suite for SaverConfig."""

    def test_defaults(self, clean_env):
        """Test defaults without environment overrides."""
        config = SaverConfig()

        # Verify
        assert config.checkpoints_table_name == "checkpoints"
        assert config.writes_table_name == "writes"
        assert config.region_name is None
        assert config.endpoint_url is None
        assert config.max_batch_size == DYNAMODB_BATCH_LIMIT == 25
        assert config.max_item_size == DYNAMODB_ITEM_SIZE_LIMIT == 409600

    def test_environment_overrides(self, clean_env):
        """Test values are read from the environment."""
        clean_env.setenv("CHECKPOINTS_TABLE_NAME", "ckpts")
        clean_env.setenv("WRITES_TABLE_NAME", "wrts")
        clean_env.setenv("AWS_REGION", "eu-west-1")
        clean_env.setenv("AWS_DYNAMODB_ENDPOINT", "http://localhost:8000")
        clean_env.setenv("DYNAMODB_MAX_BATCH_SIZE", "10")

        config = SaverConfig()

        # Verify
        assert config.checkpoints_table_name == "ckpts"
        assert config.writes_table_name == "wrts"
        assert config.region_name == "eu-west-1"
        assert config.endpoint_url == "http://localhost:8000"
        assert config.max_batch_size == 10

    def test_batch_size_above_store_limit(self, clean_env):
        """Test batch sizes above the DynamoDB limit are rejected."""
        with pytest.raises(ValidationError):
            SaverConfig(max_batch_size=30)

    def test_batch_size_from_environment_validated(self, clean_env):
        """Test environment-supplied batch size is validated too."""
        clean_env.setenv("DYNAMODB_MAX_BATCH_SIZE", "0")
        with pytest.raises(ValidationError):
            SaverConfig()
