"""Unit tests for configuration module."""

import os
import tempfile

import pytest

from wallet_assets.config import CacheConfig, load_config
from wallet_assets.constants import DEFAULT_PRICE_ASSETS, USD, WAVES


@pytest.fixture(autouse=True)
def no_log_level_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)


@pytest.fixture
def write_config():
    """Write TOML content to a temporary file and remove it afterwards."""
    paths = []

    def _write(content: str) -> str:
        with tempfile.NamedTemporaryFile(mode="w", suffix=".toml", delete=False) as f:
            f.write(content)
            paths.append(f.name)
            return f.name

    yield _write

    for path in paths:
        os.unlink(path)


@pytest.fixture
def valid_config_toml():
    """Valid configuration TOML content."""
    return f"""
[wallet]
address = "3PAbCdEfGhIjKlMnOpQrStUvWxYz12345"

[node]
node_url = "https://nodes.example.com/"
matcher_url = "https://matcher.example.com"
market_data_url = "https://marketdata.example.com/api/"
timeout_seconds = 5
max_retries = 4
backoff_factor = 1.5
initial_delay_seconds = 0.5
price_assets = ["{USD}", "{WAVES}"]

[cache]
rate_ttl_seconds = 30
bid_ask_ttl_seconds = 0

[logging]
log_level = "debug"
log_file = "logs/wallet.jsonl"
"""


@pytest.fixture
def minimal_config_toml():
    """Minimal configuration with only required fields."""
    return """
[wallet]
address = "3PAbCdEfGhIjKlMnOpQrStUvWxYz12345"

[node]
node_url = "https://nodes.example.com"
"""


def test_load_valid_config(write_config, valid_config_toml):
    """Test loading a valid configuration file."""
    config = load_config(write_config(valid_config_toml))

    assert config.wallet.address == "3PAbCdEfGhIjKlMnOpQrStUvWxYz12345"

    # Trailing slashes are stripped from endpoints
    assert config.node.node_url == "https://nodes.example.com"
    assert config.node.matcher_url == "https://matcher.example.com"
    assert config.node.market_data_url == "https://marketdata.example.com/api"
    assert config.node.timeout_seconds == 5.0
    assert config.node.max_retries == 4
    assert config.node.backoff_factor == 1.5
    assert config.node.initial_delay_seconds == 0.5
    assert config.node.price_assets == (USD, WAVES)

    assert config.cache.rate_ttl_seconds == 30
    assert config.cache.bid_ask_ttl_seconds == 0
    assert config.cache.change_ttl_seconds == 60

    assert config.logging.log_level == "DEBUG"
    assert config.logging.log_file == "logs/wallet.jsonl"


def test_load_minimal_config_with_defaults(write_config, minimal_config_toml):
    """Test loading minimal config applies default values."""
    config = load_config(write_config(minimal_config_toml))

    assert config.node.matcher_url == "https://matcher.wavesplatform.com"
    assert config.node.market_data_url == "https://marketdata.wavesplatform.com/api"
    assert config.node.max_retries == 3
    assert config.node.price_assets == DEFAULT_PRICE_ASSETS
    assert config.cache == CacheConfig()
    assert config.logging.log_level == "INFO"
    assert config.logging.log_file is None


def test_load_config_file_not_found():
    """Test loading non-existent config file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError, match="Configuration file not found"):
        load_config("nonexistent_config.toml")


def test_load_config_missing_node_section(write_config):
    path = write_config('[wallet]\naddress = "3P"\n')

    with pytest.raises(ValueError, match="Missing required configuration section.*node"):
        load_config(path)


def test_load_config_missing_address(write_config):
    path = write_config('[wallet]\n\n[node]\nnode_url = "https://n"\n')

    with pytest.raises(ValueError, match="address"):
        load_config(path)


def test_load_config_missing_node_url(write_config):
    path = write_config('[wallet]\naddress = "3P"\n\n[node]\nmatcher_url = "https://m"\n')

    with pytest.raises(ValueError, match="node_url"):
        load_config(path)


@pytest.mark.parametrize(
    "extra,message",
    [
        ("price_assets = \"WAVES\"", "price_assets"),
        ("price_assets = [1, 2]", "price_assets"),
        ("max_retries = 0", "max_retries"),
    ],
)
def test_load_config_invalid_node_values(write_config, minimal_config_toml, extra, message):
    path = write_config(minimal_config_toml + extra + "\n")

    with pytest.raises(ValueError, match=message):
        load_config(path)


def test_load_config_negative_ttl(write_config, minimal_config_toml):
    """Test negative cache lifetimes are rejected."""
    path = write_config(minimal_config_toml + "\n[cache]\nrate_ttl_seconds = -1\n")

    with pytest.raises(ValueError, match="rate_ttl_seconds"):
        load_config(path)


def test_load_config_invalid_log_level(write_config, minimal_config_toml):
    path = write_config(minimal_config_toml + '\n[logging]\nlog_level = "VERBOSE"\n')

    with pytest.raises(ValueError, match="Invalid log level"):
        load_config(path)


def test_log_level_environment_variable_override(write_config, minimal_config_toml, monkeypatch):
    """Test LOG_LEVEL environment variable overrides config file."""
    path = write_config(minimal_config_toml + '\n[logging]\nlog_level = "INFO"\nlog_file = ""\n')

    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    assert load_config(path).logging.log_level == "ERROR"

    # Lowercase is converted to uppercase
    monkeypatch.setenv("LOG_LEVEL", "warning")
    config = load_config(path)
    assert config.logging.log_level == "WARNING"
    assert config.logging.log_file is None
