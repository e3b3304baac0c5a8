"""Well-known asset identifiers and market-data constants."""

from datetime import UTC, datetime
from decimal import Decimal

from wallet_assets.models import AssetInfo, FeeData

WAVES = "WAVES"

# Gateway tokens pegged to external currencies
ETH = "474jTeYx2r2Va35794tCScAXWJG9hU2HcgxzMowaZUnu"
EUR = "Gtb1WRznfchDnTh37ezoDTJ4wcoKaRsKqKjJjy7nm2zU"
USD = "Ft8X1v1LTa1ABafufpaCWyVj8KkaxUWE6xBhW6sNFJck"
BTC = "8LQW8f7P5d5PZM7GtZEBgaqRPGSzS3DfPuiXrURJ4AJS"

ASSET_NAME_MAP: dict[str, str] = {
    ETH: "Ethereum",
    EUR: "Euro",
    USD: "Usd",
    BTC: "Bitcoin",
}

BASE_ASSET_INFO = AssetInfo(
    id=WAVES,
    name="Waves",
    precision=8,
    reissuable=False,
    quantity=100000000,
    timestamp=datetime.fromtimestamp(1460408400, tz=UTC),
    sender=WAVES,
)

SEND_FEE = FeeData(asset_id=WAVES, fee=Decimal("0.001"))

# Price-asset priority used by the matcher when ordering a trading pair
DEFAULT_PRICE_ASSETS: tuple[str, ...] = (USD, EUR, BTC, WAVES, ETH)

TRADES_WINDOW_MINUTES = 5
DAILY_CANDLE_MINUTES = 1440
RATE_API_DECIMALS = 8
