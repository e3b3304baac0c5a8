"""Exchange rates between arbitrary assets, derived through the base asset.

Most assets only trade against the base asset, so a rate between two other assets
is composed from both assets' rates against the base:

    rate(A, B) = rate(A, WAVES) / rate(B, WAVES)

All rates are expressed as units of ``to`` per unit of ``from``. Division by a
zero leg yields 0 rather than an error.
"""

import asyncio
import logging
from datetime import UTC, datetime
from decimal import Context, Decimal

from wallet_assets.asset_registry import AssetRegistry
from wallet_assets.config import CacheConfig
from wallet_assets.constants import DAILY_CANDLE_MINUTES, TRADES_WINDOW_MINUTES, WAVES
from wallet_assets.memoize import memoize
from wallet_assets.models import BidAsk, Candle, OrderLevel, RateHistoryPoint, Trade
from wallet_assets.ports import MarketDataApi, MatcherApi, PairResolver, SessionGate

logger = logging.getLogger(__name__)


class NoMarketDataError(ValueError):
    """Raised when a market returns no candles for a requested history."""

    def __init__(self, pair_key: str):
        super().__init__(f"No candles available for pair {pair_key}")
        self.pair_key = pair_key


def average_trade_price(trades: list[Trade]) -> float:
    """Arithmetic mean of trade prices, 0 without trades."""
    if not trades:
        return 0.0
    return sum(float(trade.price) for trade in trades) / len(trades)


def candle_change(candle: Candle) -> float:
    """Signed ratio between close and open.

    Growth is reported as ``close / open``; a decline as ``-open / close`` so the
    magnitude stays a ratio above 1 and the sign carries the direction.
    """
    open_ = float(candle.open)
    close = float(candle.close)
    if open_ > close:
        return 0.0 if close == 0 else -open_ / close
    return 0.0 if open_ == 0 else close / open_


def safe_divide(numerator: float, denominator: float) -> float:
    return 0.0 if denominator == 0 else numerator / denominator


def join_histories(
    from_leg: list[RateHistoryPoint], to_leg: list[RateHistoryPoint]
) -> tuple[RateHistoryPoint, ...]:
    """Divide two series point-wise, keeping only timestamps present in both."""
    to_rates = {point.timestamp: point.rate for point in to_leg}
    return tuple(
        RateHistoryPoint(timestamp=point.timestamp, rate=point.rate / to_rates[point.timestamp])
        for point in from_leg
        if point.timestamp in to_rates
    )


def quantize_price(price: Decimal, precision: int) -> Decimal:
    """Round ``price`` to ``precision`` decimals however many integer digits it has."""
    digits = max(price.adjusted() + 1, 1) + precision
    return price.quantize(Decimal(1).scaleb(-precision), context=Context(prec=max(digits, 28)))


def _best_price(levels: list[OrderLevel]) -> Decimal:
    if not levels:
        return Decimal(0)
    return Decimal(str(levels[0].price or 0))


class CrossRateCalculator:
    """Spot rates, daily change, rate history and best prices between two assets."""

    def __init__(
        self,
        session: SessionGate,
        registry: AssetRegistry,
        pairs: PairResolver,
        market_data: MarketDataApi,
        matcher: MatcherApi,
        cache_config: CacheConfig | None = None,
    ):
        """Initialize cross-rate calculator.

        Args:
            session: Login session gating every market request
            registry: Asset registry, used to quantize orderbook prices
            pairs: Resolves the canonical order of a trading pair
            market_data: Candle and trade history client
            matcher: Orderbook client
            cache_config: TTLs for memoized results
        """
        cache_config = cache_config or CacheConfig()
        self.session = session
        self.registry = registry
        self.pairs = pairs
        self.market_data = market_data
        self.matcher = matcher

        self.get_rate = memoize(
            self._compute_rate, cache_config.rate_ttl_seconds, name="get_rate"
        )
        self.get_change = memoize(
            self._compute_change, cache_config.change_ttl_seconds, name="get_change"
        )
        self.get_rate_history = memoize(
            self._compute_rate_history,
            cache_config.rate_history_ttl_seconds,
            name="get_rate_history",
        )
        self.get_bid_ask = memoize(
            self._compute_bid_ask, cache_config.bid_ask_ttl_seconds, name="get_bid_ask"
        )

    @property
    def memoized_calls(self):
        return [self.get_rate, self.get_change, self.get_rate_history, self.get_bid_ask]

    async def _compute_rate(self, id_from: str, id_to: str) -> float:
        await self.session.wait_for_login()

        if id_from == id_to:
            return 1.0

        if id_from != WAVES and id_to != WAVES:
            from_rate, to_rate = await asyncio.gather(
                self._direct_rate(id_from, WAVES),
                self._direct_rate(id_to, WAVES),
            )
            return safe_divide(from_rate, to_rate)

        return await self._direct_rate(id_from, id_to)

    async def _direct_rate(self, id_from: str, id_to: str) -> float:
        pair = await self.pairs.resolve_trading_pair(id_from, id_to)
        trades = await self.market_data.fetch_trades(str(pair), TRADES_WINDOW_MINUTES)
        rate = average_trade_price(trades)
        logger.debug(f"Average price of {pair} over {len(trades)} trades: {rate}")

        # Pair prices are quoted in the price asset per amount asset
        if id_from != pair.price_asset_id:
            return rate
        return safe_divide(1.0, rate)

    async def _compute_change(self, id_from: str, id_to: str) -> float:
        await self.session.wait_for_login()

        if id_from == id_to:
            return 1.0

        if id_from != WAVES and id_to != WAVES:
            from_change, to_change = await asyncio.gather(
                self._direct_change(id_from, WAVES),
                self._direct_change(id_to, WAVES),
            )
            return safe_divide(from_change, to_change)

        return await self._direct_change(id_from, id_to)

    async def _direct_change(self, id_from: str, id_to: str) -> float:
        pair = await self.pairs.resolve_trading_pair(id_from, id_to)
        candles = await self.market_data.fetch_candles(str(pair), DAILY_CANDLE_MINUTES, 1)
        if not candles:
            logger.debug(f"No daily candle for {pair}")
            return 0.0
        return candle_change(candles[0])

    async def _compute_rate_history(
        self, from_id: str, to_id: str, interval_minutes: int, count: int
    ) -> tuple[RateHistoryPoint, ...]:
        await self.session.wait_for_login()

        if from_id == to_id:
            # A constant series carries no information; callers handle equal ids
            return ()

        if from_id != WAVES and to_id != WAVES:
            from_leg, to_leg = await asyncio.gather(
                self._direct_history(from_id, WAVES, interval_minutes, count),
                self._direct_history(to_id, WAVES, interval_minutes, count),
            )
            joined = join_histories(from_leg, to_leg)
            logger.debug(
                f"Joined history {from_id}/{to_id}: {len(from_leg)} x {len(to_leg)} "
                f"-> {len(joined)} points"
            )
            return joined

        return tuple(await self._direct_history(from_id, to_id, interval_minutes, count))

    async def _direct_history(
        self, id_from: str, id_to: str, interval_minutes: int, count: int
    ) -> list[RateHistoryPoint]:
        pair = await self.pairs.resolve_trading_pair(id_from, id_to)
        pair_key = str(pair)
        candles = await self.market_data.fetch_candles(pair_key, interval_minutes, count)
        if not candles:
            raise NoMarketDataError(pair_key)

        inverted = id_from == pair.price_asset_id
        points = []
        for candle in candles:
            close = float(candle.close)
            if close == 0:
                continue
            points.append(
                RateHistoryPoint(
                    timestamp=_as_utc(candle.timestamp),
                    rate=1 / close if inverted else close,
                )
            )
        return points

    async def _compute_bid_ask(self, asset_id_1: str, asset_id_2: str) -> BidAsk:
        await self.session.wait_for_login()

        orderbook, price_asset = await asyncio.gather(
            self.matcher.fetch_orderbook(asset_id_1, asset_id_2),
            self.registry.get_asset_info(asset_id_2),
        )
        return BidAsk(
            bid=quantize_price(_best_price(orderbook.bids), price_asset.precision),
            ask=quantize_price(_best_price(orderbook.asks), price_asset.precision),
        )


def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=UTC)
    return timestamp
