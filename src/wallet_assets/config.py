"""Configuration management for the wallet assets service."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from wallet_assets.constants import DEFAULT_PRICE_ASSETS


@dataclass
class WalletConfig:
    """Wallet account configuration."""

    address: str


@dataclass
class NodeConfig:
    """Ledger node, matcher and market-data endpoints."""

    node_url: str
    matcher_url: str = "https://matcher.wavesplatform.com"
    market_data_url: str = "https://marketdata.wavesplatform.com/api"
    timeout_seconds: float = 10.0
    max_retries: int = 3
    backoff_factor: float = 2.0
    initial_delay_seconds: float = 1.0
    price_assets: tuple[str, ...] = DEFAULT_PRICE_ASSETS


@dataclass
class CacheConfig:
    """Lifetime of memoized results, in seconds.

    Asset metadata is immutable and never expires; everything else reflects live
    ledger or market state.
    """

    asset_balance_ttl_seconds: float = 2
    balance_list_ttl_seconds: float = 2
    bid_ask_ttl_seconds: float = 2
    rate_history_ttl_seconds: float = 20
    change_ttl_seconds: float = 60
    rate_ttl_seconds: float = 60

    def __post_init__(self):
        """Validate configuration."""
        for name, value in vars(self).items():
            if value < 0:
                raise ValueError(f"[cache].{name} must be non-negative (got {value!r})")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "INFO"
    log_file: str | None = None


@dataclass
class Config:
    """Complete application configuration."""

    wallet: WalletConfig
    node: NodeConfig
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: str | Path = "config.toml") -> Config:
    """Load configuration from TOML file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Parsed configuration object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If required fields are missing or invalid
    """
    import tomllib

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, "rb") as f:
        data = tomllib.load(f)

    # Validate required sections
    required_sections = ["wallet", "node"]
    for section in required_sections:
        if section not in data:
            raise ValueError(f"Missing required configuration section: [{section}]")

    wallet_data = data["wallet"]
    if not wallet_data.get("address"):
        raise ValueError("Missing required field in [wallet]: address")

    wallet_config = WalletConfig(address=wallet_data["address"])

    node_data = data["node"]
    if not node_data.get("node_url"):
        raise ValueError("Missing required field in [node]: node_url")

    price_assets = node_data.get("price_assets", list(DEFAULT_PRICE_ASSETS))
    if not isinstance(price_assets, list) or not all(isinstance(a, str) for a in price_assets):
        raise ValueError("[node].price_assets must be a list of asset ids")

    max_retries = int(node_data.get("max_retries", 3))
    if max_retries < 1:
        raise ValueError(f"[node].max_retries must be at least 1 (got {max_retries})")

    node_config = NodeConfig(
        node_url=node_data["node_url"].rstrip("/"),
        matcher_url=node_data.get("matcher_url", "https://matcher.wavesplatform.com").rstrip("/"),
        market_data_url=node_data.get(
            "market_data_url", "https://marketdata.wavesplatform.com/api"
        ).rstrip("/"),
        timeout_seconds=float(node_data.get("timeout_seconds", 10.0)),
        max_retries=max_retries,
        backoff_factor=float(node_data.get("backoff_factor", 2.0)),
        initial_delay_seconds=float(node_data.get("initial_delay_seconds", 1.0)),
        price_assets=tuple(price_assets),
    )

    # Parse cache TTLs (optional)
    cache_data = data.get("cache", {})
    cache_config = CacheConfig(
        asset_balance_ttl_seconds=float(cache_data.get("asset_balance_ttl_seconds", 2)),
        balance_list_ttl_seconds=float(cache_data.get("balance_list_ttl_seconds", 2)),
        bid_ask_ttl_seconds=float(cache_data.get("bid_ask_ttl_seconds", 2)),
        rate_history_ttl_seconds=float(cache_data.get("rate_history_ttl_seconds", 20)),
        change_ttl_seconds=float(cache_data.get("change_ttl_seconds", 60)),
        rate_ttl_seconds=float(cache_data.get("rate_ttl_seconds", 60)),
    )

    # Allow LOG_LEVEL environment variable to override config file
    logging_data = data.get("logging", {})
    log_level = os.environ.get("LOG_LEVEL", logging_data.get("log_level", "INFO")).upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ValueError(f"Invalid log level: {log_level}")

    # Empty string should be treated as None
    log_file = logging_data.get("log_file") or None

    return Config(
        wallet=wallet_config,
        node=node_config,
        cache=cache_config,
        logging=LoggingConfig(log_level=log_level, log_file=log_file),
    )
