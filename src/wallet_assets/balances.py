"""Balances adjusted for pending local operations."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import fields, replace

from wallet_assets.asset_registry import AssetRegistry
from wallet_assets.config import CacheConfig
from wallet_assets.constants import WAVES
from wallet_assets.memoize import memoize
from wallet_assets.models import AssetInfo, AssetWithBalance, BalanceEntry
from wallet_assets.ports import BalanceEvent, BalanceEventSource, NodeApi, SessionGate

logger = logging.getLogger(__name__)


def with_balance(info: AssetInfo, balance: float) -> AssetWithBalance:
    """Copy asset metadata into a new record carrying ``balance``."""
    if isinstance(info, AssetWithBalance):
        return replace(info, balance=balance)
    values = {f.name: getattr(info, f.name) for f in fields(AssetInfo)}
    return AssetWithBalance(**values, balance=balance)


def adjust_balance(asset_id: str, balance: float, events: Sequence[BalanceEvent]) -> float:
    """Subtract every pending event's effect on ``asset_id`` from ``balance``."""
    for event in events:
        balance -= event.get_balance_difference(asset_id)
    return balance


class BalancePipeline:
    """Combines ledger balances, asset metadata and pending balance events."""

    def __init__(
        self,
        session: SessionGate,
        node: NodeApi,
        registry: AssetRegistry,
        events: BalanceEventSource,
        cache_config: CacheConfig | None = None,
    ):
        """Initialize balance pipeline.

        Args:
            session: Login session providing the wallet address
            node: Ledger node client
            registry: Asset metadata registry
            events: Source of pending balance events
            cache_config: TTLs for raw balance lookups
        """
        cache_config = cache_config or CacheConfig()
        self.session = session
        self.node = node
        self.registry = registry
        self.events = events
        self._get_asset_balance = memoize(
            self._fetch_asset_balance,
            cache_config.asset_balance_ttl_seconds,
            name="get_asset_balance",
        )
        self._get_balance_list = memoize(
            self._fetch_balance_list,
            cache_config.balance_list_ttl_seconds,
            name="get_balance_list",
        )

    @property
    def memoized_calls(self):
        return [self._get_asset_balance, self._get_balance_list]

    async def get_balance(self, asset_id: str) -> AssetWithBalance:
        """Return the asset with its balance minus pending operations."""
        asset, events = await asyncio.gather(
            self._get_asset_balance(asset_id),
            self.events.pending_balance_events(),
        )
        return with_balance(asset, adjust_balance(asset.id, asset.balance, events))

    async def get_balance_list(
        self,
        asset_ids: Sequence[str] | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[AssetWithBalance]:
        """Return balances for ``asset_ids``, or for every asset the wallet holds.

        With explicit ids every requested asset is returned, zero-filled when the
        node reports nothing for it. Without ids the node's list is used and
        empty non-base entries are dropped; the base asset is always kept.
        """
        await self.session.wait_for_login()

        if asset_ids is not None:
            ids = list(asset_ids)
            assets, events, entries = await asyncio.gather(
                asyncio.gather(*(self.registry.get_asset_info(asset_id) for asset_id in ids)),
                self.events.pending_balance_events(),
                self._get_balance_list(ids, limit, offset),
            )
            amounts = {entry.asset_id: entry.amount for entry in entries}
            return [
                with_balance(asset, adjust_balance(asset.id, amounts.get(asset.id, 0.0), events))
                for asset in assets
            ]

        entries, events = await asyncio.gather(
            self._get_balance_list(None, limit, offset),
            self.events.pending_balance_events(),
        )
        assets = await asyncio.gather(
            *(self.registry.get_asset_info(entry.asset_id) for entry in entries)
        )

        result = []
        for asset, entry in zip(assets, entries, strict=True):
            balance = adjust_balance(asset.id, entry.amount or 0.0, events)
            # The node reports emptied assets with a zero amount
            if asset.id != WAVES and balance == 0:
                logger.debug(f"Skipping empty balance for {asset.id}")
                continue
            result.append(with_balance(asset, balance))
        return result

    async def _fetch_asset_balance(self, asset_id: str) -> AssetWithBalance:
        info = await self.registry.get_asset_info(asset_id)
        raw = await self.node.fetch_asset_balance(self.session.address, info.id)
        return with_balance(info, raw / 10**info.precision)

    async def _fetch_balance_list(
        self,
        asset_ids: Sequence[str] | None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[BalanceEntry]:
        return await self.node.fetch_address_balances(
            self.session.address, asset_ids=asset_ids, limit=limit, offset=offset
        )
