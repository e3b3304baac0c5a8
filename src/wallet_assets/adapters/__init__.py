"""Reference implementations of the collaborator ports."""

from wallet_assets.adapters.events import InMemoryBalanceEventSource, PendingTransfer
from wallet_assets.adapters.http import JsonHttpClient
from wallet_assets.adapters.market_data import MarketDataClient
from wallet_assets.adapters.matcher import MatcherClient, PriorityPairResolver
from wallet_assets.adapters.node import NodeClient
from wallet_assets.adapters.providers import CircuitBreaker, RetryConfig
from wallet_assets.adapters.session import StaticSession

__all__ = [
    "CircuitBreaker",
    "InMemoryBalanceEventSource",
    "JsonHttpClient",
    "MarketDataClient",
    "MatcherClient",
    "NodeClient",
    "PendingTransfer",
    "PriorityPairResolver",
    "RetryConfig",
    "StaticSession",
]
