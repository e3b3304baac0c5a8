"""Currency conversion helpers bound to a computed rate."""

from dataclasses import dataclass
from decimal import Decimal

from wallet_assets.constants import RATE_API_DECIMALS

Amount = Decimal | int | float | str


def _to_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


@dataclass(frozen=True)
class RateApi:
    """Converts amounts of the ``from`` asset into the ``to`` asset and back."""

    rate: float

    def exchange(self, amount: Amount) -> Decimal:
        """Convert ``amount`` of ``from`` into ``to`` using the rate fixed to 8 decimals."""
        return _to_decimal(amount) * Decimal(f"{self.rate:.{RATE_API_DECIMALS}f}")

    def exchange_reverse(self, amount: Amount) -> Decimal:
        """Convert ``amount`` of ``to`` back into ``from``; 0 when the rate is 0."""
        if not self.rate:
            return Decimal(0)
        return _to_decimal(amount) / _to_decimal(self.rate)


def generate_rate_api(rate: float) -> RateApi:
    return RateApi(rate=rate)
