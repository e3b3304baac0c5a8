"""In-memory feed of pending balance events."""

import logging
from dataclasses import dataclass
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingTransfer:
    """Outgoing transfer broadcast but not yet confirmed by the ledger.

    Attributes:
        asset_id: Transferred asset
        amount: Transferred amount in tokens
        fee_asset_id: Asset the fee is paid in
        fee: Fee in tokens
        id: Local identifier, usually the transaction id
    """

    asset_id: str
    amount: float
    fee_asset_id: str
    fee: float = 0.0
    id: str = ""

    def get_balance_difference(self, asset_id: str) -> float:
        difference = 0.0
        if asset_id == self.asset_id:
            difference += self.amount
        if asset_id == self.fee_asset_id:
            difference += self.fee
        return difference


class InMemoryBalanceEventSource:
    """Keeps pending transfers until the caller confirms them."""

    def __init__(self):
        self._events: dict[str, PendingTransfer] = {}

    def add(self, event: PendingTransfer) -> str:
        event_id = event.id or uuid4().hex
        self._events[event_id] = event
        logger.debug(f"Pending balance event {event_id} added")
        return event_id

    def confirm(self, event_id: str) -> bool:
        """Forget an event once the ledger reflects it.

        Returns:
            True if the event was pending
        """
        removed = self._events.pop(event_id, None) is not None
        if removed:
            logger.debug(f"Pending balance event {event_id} confirmed")
        return removed

    async def pending_balance_events(self) -> list[PendingTransfer]:
        return list(self._events.values())
