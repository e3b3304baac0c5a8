"""Wallet-facing facade over asset metadata, balances and rates."""

import logging
from collections.abc import Sequence

from wallet_assets.adapters.events import InMemoryBalanceEventSource
from wallet_assets.adapters.http import JsonHttpClient
from wallet_assets.adapters.market_data import MarketDataClient
from wallet_assets.adapters.matcher import MatcherClient, PriorityPairResolver
from wallet_assets.adapters.node import NodeClient
from wallet_assets.adapters.providers import RetryConfig
from wallet_assets.adapters.session import StaticSession
from wallet_assets.asset_registry import AssetRegistry
from wallet_assets.balances import BalancePipeline
from wallet_assets.config import CacheConfig, Config
from wallet_assets.constants import SEND_FEE
from wallet_assets.memoize import CacheMetrics, MemoizedCall
from wallet_assets.models import AssetInfo, AssetWithBalance, BidAsk, FeeData, RateHistoryPoint
from wallet_assets.ports import (
    BalanceEventSource,
    MarketDataApi,
    MatcherApi,
    NodeApi,
    PairResolver,
    SessionGate,
)
from wallet_assets.rate_api import RateApi, generate_rate_api
from wallet_assets.rates import CrossRateCalculator

logger = logging.getLogger(__name__)


class AssetsService:
    """Single entry point the wallet uses for assets, balances and rates."""

    def __init__(
        self,
        session: SessionGate,
        node: NodeApi,
        matcher: MatcherApi,
        pairs: PairResolver,
        market_data: MarketDataApi,
        events: BalanceEventSource,
        cache_config: CacheConfig | None = None,
        *,
        registry: AssetRegistry | None = None,
    ):
        cache_config = cache_config or CacheConfig()
        self.registry = registry or AssetRegistry(session, node)
        self.balances = BalancePipeline(session, node, self.registry, events, cache_config)
        self.rates = CrossRateCalculator(
            session, self.registry, pairs, market_data, matcher, cache_config
        )

    async def get_asset_info(self, asset_id: str) -> AssetInfo:
        return await self.registry.get_asset_info(asset_id)

    async def get_balance(self, asset_id: str) -> AssetWithBalance:
        return await self.balances.get_balance(asset_id)

    async def get_balance_list(
        self,
        asset_ids: Sequence[str] | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[AssetWithBalance]:
        return await self.balances.get_balance_list(asset_ids, limit=limit, offset=offset)

    async def get_rate(self, id_from: str, id_to: str) -> RateApi:
        """Rate between two assets wrapped with conversion helpers."""
        rate = await self.rates.get_rate(id_from, id_to)
        return generate_rate_api(rate)

    async def get_change(self, id_from: str, id_to: str) -> float:
        return await self.rates.get_change(id_from, id_to)

    async def get_rate_history(
        self, from_id: str, to_id: str, interval_minutes: int, count: int
    ) -> tuple[RateHistoryPoint, ...]:
        return await self.rates.get_rate_history(from_id, to_id, interval_minutes, count)

    async def get_bid_ask(self, asset_id_1: str, asset_id_2: str) -> BidAsk:
        return await self.rates.get_bid_ask(asset_id_1, asset_id_2)

    async def get_fee_send(self) -> FeeData:
        return SEND_FEE

    def memoized_calls(self) -> list[MemoizedCall]:
        return [
            self.registry.get_asset_info,
            *self.balances.memoized_calls,
            *self.rates.memoized_calls,
        ]

    def get_cache_metrics(self) -> dict[str, CacheMetrics]:
        """Cache metrics keyed by memoized operation name."""
        return {call.name: call.get_metrics() for call in self.memoized_calls()}

    def invalidate_all(self) -> int:
        """Drop every memoized result, asset metadata included."""
        removed = sum(call.invalidate_all() for call in self.memoized_calls())
        logger.info(f"Invalidated {removed} memoized results")
        return removed


def build_assets_service(
    config: Config,
    session: SessionGate | None = None,
    events: BalanceEventSource | None = None,
) -> AssetsService:
    """Wire an ``AssetsService`` to the HTTP adapters described by ``config``.

    Args:
        config: Loaded configuration
        session: Login session; defaults to an already open session for the
            configured wallet address
        events: Pending balance events; defaults to an empty in-memory source

    Returns:
        Ready to use service
    """
    node_config = config.node
    retry_config = RetryConfig(
        max_attempts=node_config.max_retries,
        backoff_factor=node_config.backoff_factor,
        initial_delay_seconds=node_config.initial_delay_seconds,
    )

    def http(base_url: str, name: str) -> JsonHttpClient:
        return JsonHttpClient(
            base_url,
            name=name,
            timeout_seconds=node_config.timeout_seconds,
            retry_config=retry_config,
        )

    session = session or StaticSession(config.wallet.address, logged_in=True)
    node = NodeClient(http(node_config.node_url, "node"))
    registry = AssetRegistry(session, node)

    return AssetsService(
        session=session,
        node=node,
        matcher=MatcherClient(http(node_config.matcher_url, "matcher"), registry.get_asset_info),
        pairs=PriorityPairResolver(node_config.price_assets),
        market_data=MarketDataClient(http(node_config.market_data_url, "market_data")),
        events=events or InMemoryBalanceEventSource(),
        cache_config=config.cache,
        registry=registry,
    )
