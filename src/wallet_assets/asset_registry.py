"""Asset metadata resolution with permanent caching."""

from __future__ import annotations

import logging

from wallet_assets.constants import ASSET_NAME_MAP, BASE_ASSET_INFO, WAVES
from wallet_assets.memoize import memoize
from wallet_assets.models import AssetInfo
from wallet_assets.ports import NodeApi, SessionGate

logger = logging.getLogger(__name__)


class AssetRegistry:
    """Resolves asset ids into display metadata.

    Issued assets never change, so lookups are memoized for the lifetime of the
    registry. The base asset is answered locally.
    """

    def __init__(self, session: SessionGate, node: NodeApi):
        self.session = session
        self.node = node
        self.get_asset_info = memoize(self._fetch_asset_info, name="get_asset_info")

    async def _fetch_asset_info(self, asset_id: str) -> AssetInfo:
        await self.session.wait_for_login()

        if asset_id == WAVES:
            return BASE_ASSET_INFO

        asset = await self.node.fetch_asset_metadata(asset_id)
        logger.debug(f"Resolved asset {asset.id} ({asset.name}, {asset.decimals} decimals)")

        return AssetInfo(
            id=asset.id,
            name=ASSET_NAME_MAP.get(asset.id) or asset.name,
            description=asset.description,
            precision=asset.decimals,
            reissuable=asset.reissuable,
            quantity=asset.quantity,
            timestamp=asset.timestamp,
            sender=asset.sender,
        )
