"""Domain and wire-level data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class AssetInfo:
    """Immutable asset metadata as shown to the wallet.

    Attributes:
        id: Asset identifier (``WAVES`` for the base asset)
        name: Display name, after well-known overrides
        precision: Number of decimals of one token
        reissuable: Whether the issuer may mint more
        quantity: Issued quantity in raw units
        timestamp: Issue time
        sender: Issuer address
        description: Free-form issuer description
    """

    id: str
    name: str
    precision: int
    reissuable: bool
    quantity: int
    timestamp: datetime
    sender: str
    description: str | None = None


@dataclass(frozen=True)
class AssetWithBalance(AssetInfo):
    """Asset metadata together with a display-unit balance."""

    balance: float = 0.0


@dataclass(frozen=True)
class RateHistoryPoint:
    """Exchange rate at the start of one candle bucket."""

    timestamp: datetime
    rate: float


@dataclass(frozen=True)
class BidAsk:
    """Best bid and ask of an orderbook, 0 for an empty side."""

    bid: Decimal
    ask: Decimal


@dataclass(frozen=True)
class FeeData:
    """Fee charged for a transfer."""

    asset_id: str
    fee: Decimal


@dataclass(frozen=True)
class AssetMetadata:
    """Asset description as reported by the ledger node."""

    id: str
    name: str
    decimals: int
    reissuable: bool
    quantity: int
    timestamp: datetime
    sender: str
    description: str | None = None


@dataclass(frozen=True)
class BalanceEntry:
    """Balance of one asset of an address, already in tokens."""

    asset_id: str
    amount: float


@dataclass(frozen=True)
class OrderLevel:
    """Aggregated orderbook level, price in tokens."""

    price: Decimal
    amount: Decimal = Decimal(0)


@dataclass(frozen=True)
class OrderbookSnapshot:
    """Orderbook sides sorted best-first."""

    bids: list[OrderLevel] = field(default_factory=list)
    asks: list[OrderLevel] = field(default_factory=list)


@dataclass(frozen=True)
class TradingPair:
    """Canonically ordered market: prices are quoted in ``price_asset_id``."""

    amount_asset_id: str
    price_asset_id: str

    def __str__(self) -> str:
        return f"{self.amount_asset_id}/{self.price_asset_id}"


@dataclass(frozen=True)
class Candle:
    """Open/close prices of one market-data bucket."""

    timestamp: datetime
    open: float
    close: float


@dataclass(frozen=True)
class Trade:
    """Executed trade price in tokens."""

    price: float
