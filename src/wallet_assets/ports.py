"""Interfaces of the collaborators the pricing core depends on.

The core never talks to the network directly: the ledger node, the matcher, the
market-data service, the login session and the local pending-operation feed are
all reached through these protocols. Reference implementations live in
``wallet_assets.adapters``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from wallet_assets.models import (
    AssetMetadata,
    BalanceEntry,
    Candle,
    OrderbookSnapshot,
    Trade,
    TradingPair,
)


class SessionGate(Protocol):
    """Login session that gates every network call."""

    @property
    def address(self) -> str: ...

    async def wait_for_login(self) -> None: ...


class NodeApi(Protocol):
    """Ledger node queries."""

    async def fetch_asset_metadata(self, asset_id: str) -> AssetMetadata: ...

    async def fetch_address_balances(
        self,
        address: str,
        *,
        asset_ids: Sequence[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[BalanceEntry]: ...

    async def fetch_asset_balance(self, address: str, asset_id: str) -> int: ...


class MatcherApi(Protocol):
    """Matcher orderbook queries."""

    async def fetch_orderbook(self, asset_id_1: str, asset_id_2: str) -> OrderbookSnapshot: ...


class PairResolver(Protocol):
    """Resolves two assets into the matcher's canonical pair order."""

    async def resolve_trading_pair(self, asset_a: str, asset_b: str) -> TradingPair: ...


class MarketDataApi(Protocol):
    """Candle and trade history of a trading pair."""

    async def fetch_candles(
        self, pair_key: str, interval_minutes: int, count: int
    ) -> list[Candle]: ...

    async def fetch_trades(self, pair_key: str, window_minutes: int) -> list[Trade]: ...


class BalanceEvent(Protocol):
    """Locally known operation not yet reflected by the ledger."""

    def get_balance_difference(self, asset_id: str) -> float: ...


class BalanceEventSource(Protocol):
    """Feed of pending balance events."""

    async def pending_balance_events(self) -> Sequence[BalanceEvent]: ...
