"""Market-data service adapter for candles and trades."""

import logging
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict

from wallet_assets.adapters.http import JsonHttpClient
from wallet_assets.models import Candle, Trade

logger = logging.getLogger(__name__)


class CandleSchema(BaseModel):
    """One bucket of ``/candles/{pair}/{interval}/{count}``. Prices arrive as strings."""

    model_config = ConfigDict(extra="ignore")

    timestamp: int
    open: float = 0.0
    close: float = 0.0


class TradeSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    price: float = 0.0


class MarketDataClient:
    """Implements the market-data port; an empty or null payload means no data."""

    def __init__(self, http: JsonHttpClient):
        self.http = http

    async def fetch_candles(self, pair_key: str, interval_minutes: int, count: int) -> list[Candle]:
        payload = await self.http.get_json(f"/candles/{pair_key}/{interval_minutes}/{count}")
        candles = [CandleSchema.model_validate(item) for item in payload or []]
        return [
            Candle(
                timestamp=datetime.fromtimestamp(item.timestamp / 1000, tz=UTC),
                open=item.open,
                close=item.close,
            )
            for item in candles
        ]

    async def fetch_trades(self, pair_key: str, window_minutes: int) -> list[Trade]:
        payload = await self.http.get_json(f"/trades/{pair_key}/{window_minutes}")
        return [Trade(price=TradeSchema.model_validate(item).price) for item in payload or []]
