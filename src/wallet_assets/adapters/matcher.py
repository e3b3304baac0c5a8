"""Matcher adapter: orderbooks and canonical trading-pair order."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from wallet_assets.adapters.http import JsonHttpClient
from wallet_assets.constants import DEFAULT_PRICE_ASSETS
from wallet_assets.models import AssetInfo, OrderbookSnapshot, OrderLevel, TradingPair

logger = logging.getLogger(__name__)

# Matcher prices carry 8 extra decimals on top of the pair's decimal difference
MATCHER_PRICE_DECIMALS = 8


class LevelSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: int = 0
    price: int


class OrderbookSchema(BaseModel):
    """Payload of ``/matcher/orderbook/{amountAsset}/{priceAsset}``."""

    model_config = ConfigDict(extra="ignore")

    bids: list[LevelSchema] = Field(default_factory=list)
    asks: list[LevelSchema] = Field(default_factory=list)


class PriorityPairResolver:
    """Orders two assets the way the matcher does.

    The price asset is the one listed earlier in ``price_assets``; a listed asset
    beats an unlisted one; two unlisted assets are ordered by id, the smaller id
    being the price asset.
    """

    def __init__(self, price_assets: Sequence[str] = DEFAULT_PRICE_ASSETS):
        self._priority = {asset_id: index for index, asset_id in enumerate(price_assets)}

    async def resolve_trading_pair(self, asset_a: str, asset_b: str) -> TradingPair:
        if asset_a == asset_b:
            raise ValueError(f"Cannot build a trading pair from a single asset: {asset_a}")

        rank_a = self._priority.get(asset_a)
        rank_b = self._priority.get(asset_b)

        if rank_a is not None and rank_b is not None:
            a_is_price = rank_a < rank_b
        elif rank_a is not None or rank_b is not None:
            a_is_price = rank_a is not None
        else:
            a_is_price = asset_a < asset_b

        if a_is_price:
            return TradingPair(amount_asset_id=asset_b, price_asset_id=asset_a)
        return TradingPair(amount_asset_id=asset_a, price_asset_id=asset_b)


class MatcherClient:
    """Implements the matcher port on top of the matcher REST API."""

    def __init__(
        self,
        http: JsonHttpClient,
        asset_info: Callable[[str], Awaitable[AssetInfo]],
    ):
        """Initialize matcher client.

        Args:
            http: JSON client bound to the matcher URL
            asset_info: Resolves asset metadata, used to scale raw prices
        """
        self.http = http
        self.asset_info = asset_info

    async def fetch_orderbook(self, asset_id_1: str, asset_id_2: str) -> OrderbookSnapshot:
        payload, amount_asset, price_asset = await asyncio.gather(
            self.http.get_json(f"/matcher/orderbook/{asset_id_1}/{asset_id_2}"),
            self.asset_info(asset_id_1),
            self.asset_info(asset_id_2),
        )
        book = OrderbookSchema.model_validate(payload)

        price_scale = Decimal(10) ** (
            MATCHER_PRICE_DECIMALS + price_asset.precision - amount_asset.precision
        )
        amount_scale = Decimal(10) ** amount_asset.precision

        def convert(levels: list[LevelSchema]) -> list[OrderLevel]:
            return [
                OrderLevel(
                    price=Decimal(level.price) / price_scale,
                    amount=Decimal(level.amount) / amount_scale,
                )
                for level in levels
            ]

        logger.debug(
            f"Orderbook {asset_id_1}/{asset_id_2}: {len(book.bids)} bids, {len(book.asks)} asks"
        )
        return OrderbookSnapshot(bids=convert(book.bids), asks=convert(book.asks))
