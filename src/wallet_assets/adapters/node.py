"""Ledger node REST adapter."""

import asyncio
import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from wallet_assets.adapters.http import JsonHttpClient
from wallet_assets.constants import BASE_ASSET_INFO, WAVES
from wallet_assets.models import AssetMetadata, BalanceEntry

logger = logging.getLogger(__name__)


class AssetDetailsSchema(BaseModel):
    """Payload of ``/assets/details/{assetId}``."""

    model_config = ConfigDict(extra="ignore")

    asset_id: str = Field(alias="assetId")
    name: str
    description: str | None = None
    decimals: int
    reissuable: bool
    quantity: int
    issue_timestamp: int = Field(alias="issueTimestamp")
    issuer: str


class IssueTransactionSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    decimals: int | None = None


class AssetBalanceSchema(BaseModel):
    """One entry of ``/assets/balance/{address}``."""

    model_config = ConfigDict(extra="ignore")

    asset_id: str = Field(alias="assetId")
    balance: int
    issue_transaction: IssueTransactionSchema | None = Field(
        default=None, alias="issueTransaction"
    )


class AddressBalancesSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    balances: list[AssetBalanceSchema] = Field(default_factory=list)


class BalanceSchema(BaseModel):
    """Payload of the single-asset balance endpoints."""

    model_config = ConfigDict(extra="ignore")

    balance: int


class NodeClient:
    """Implements the node port on top of the public node REST API."""

    def __init__(self, http: JsonHttpClient):
        self.http = http

    async def fetch_asset_metadata(self, asset_id: str) -> AssetMetadata:
        payload = await self.http.get_json(f"/assets/details/{asset_id}")
        details = AssetDetailsSchema.model_validate(payload)
        return AssetMetadata(
            id=details.asset_id,
            name=details.name,
            description=details.description,
            decimals=details.decimals,
            reissuable=details.reissuable,
            quantity=details.quantity,
            timestamp=datetime.fromtimestamp(details.issue_timestamp / 1000, tz=UTC),
            sender=details.issuer,
        )

    async def fetch_asset_balance(self, address: str, asset_id: str) -> int:
        if asset_id == WAVES:
            payload = await self.http.get_json(f"/addresses/balance/{address}")
        else:
            payload = await self.http.get_json(f"/assets/balance/{address}/{asset_id}")
        return BalanceSchema.model_validate(payload).balance

    async def fetch_address_balances(
        self,
        address: str,
        *,
        asset_ids: Sequence[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[BalanceEntry]:
        """Balances of ``address`` in tokens, the base asset first.

        The node has no paging for this endpoint, so ``limit``/``offset`` are
        applied to the combined list.
        """
        ids = list(asset_ids) if asset_ids is not None else None
        include_base = ids is None or WAVES in ids
        token_ids = [asset_id for asset_id in ids if asset_id != WAVES] if ids is not None else None

        entries: list[BalanceEntry] = []
        if include_base:
            raw = await self.fetch_asset_balance(address, WAVES)
            entries.append(
                BalanceEntry(asset_id=WAVES, amount=raw / 10**BASE_ASSET_INFO.precision)
            )

        if token_ids is None or token_ids:
            payload = await self.http.get_json(f"/assets/balance/{address}", {"id": token_ids})
            balances = AddressBalancesSchema.model_validate(payload).balances
            decimals = await asyncio.gather(*(self._decimals_of(item) for item in balances))
            entries.extend(
                BalanceEntry(asset_id=item.asset_id, amount=item.balance / 10**precision)
                for item, precision in zip(balances, decimals, strict=True)
            )

        start = offset or 0
        end = start + limit if limit is not None else None
        return entries[start:end]

    async def _decimals_of(self, item: AssetBalanceSchema) -> int:
        if item.issue_transaction and item.issue_transaction.decimals is not None:
            return item.issue_transaction.decimals
        logger.debug(f"Balance entry for {item.asset_id} has no decimals, querying details")
        return (await self.fetch_asset_metadata(item.asset_id)).decimals
