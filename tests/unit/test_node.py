"""Unit tests for the ledger node adapter."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fakes import ADDRESS, ASSET_X, ASSET_Y

from wallet_assets.adapters.node import NodeClient
from wallet_assets.constants import WAVES
from wallet_assets.models import BalanceEntry


def make_http(responses):
    """HTTP client stub answering by request path."""
    http = MagicMock()

    async def get_json(path, params=None):
        return responses[path]

    http.get_json = AsyncMock(side_effect=get_json)
    return http


@pytest.fixture
def details_payload():
    return {
        "assetId": ASSET_X,
        "issueHeight": 100,
        "issueTimestamp": 1500000000000,
        "issuer": "3PIssuer",
        "name": "Xcoin",
        "description": "",
        "decimals": 6,
        "reissuable": False,
        "quantity": 1000000000,
        "scripted": False,
    }


@pytest.mark.anyio
async def test_fetch_asset_metadata(details_payload):
    http = make_http({f"/assets/details/{ASSET_X}": details_payload})
    client = NodeClient(http)

    metadata = await client.fetch_asset_metadata(ASSET_X)

    assert metadata.id == ASSET_X
    assert metadata.decimals == 6
    assert metadata.sender == "3PIssuer"
    assert metadata.reissuable is False
    assert metadata.timestamp == datetime(2017, 7, 14, 2, 40, tzinfo=UTC)


@pytest.mark.anyio
async def test_fetch_asset_balance_routes_base_asset():
    """Test the base asset balance comes from the address endpoint."""
    http = make_http(
        {
            f"/addresses/balance/{ADDRESS}": {"address": ADDRESS, "balance": 500},
            f"/assets/balance/{ADDRESS}/{ASSET_X}": {"assetId": ASSET_X, "balance": 7},
        }
    )
    client = NodeClient(http)

    assert await client.fetch_asset_balance(ADDRESS, WAVES) == 500
    assert await client.fetch_asset_balance(ADDRESS, ASSET_X) == 7


@pytest.mark.anyio
async def test_fetch_address_balances_all(details_payload):
    """Test the full list starts with the base asset and scales token balances."""
    http = make_http(
        {
            f"/addresses/balance/{ADDRESS}": {"balance": 150000000},
            f"/assets/balance/{ADDRESS}": {
                "address": ADDRESS,
                "balances": [
                    {
                        "assetId": ASSET_Y,
                        "balance": 1234,
                        "issueTransaction": {"decimals": 2},
                    },
                    {"assetId": ASSET_X, "balance": 3000000, "issueTransaction": None},
                ],
            },
            f"/assets/details/{ASSET_X}": details_payload,
        }
    )
    client = NodeClient(http)

    entries = await client.fetch_address_balances(ADDRESS)

    assert entries == [
        BalanceEntry(asset_id=WAVES, amount=1.5),
        BalanceEntry(asset_id=ASSET_Y, amount=12.34),
        BalanceEntry(asset_id=ASSET_X, amount=3.0),
    ]
    list_call = http.get_json.call_args_list[1]
    assert list_call.args == (f"/assets/balance/{ADDRESS}", {"id": None})


@pytest.mark.anyio
async def test_fetch_address_balances_selected_ids():
    http = make_http(
        {
            f"/assets/balance/{ADDRESS}": {
                "balances": [
                    {"assetId": ASSET_X, "balance": 100, "issueTransaction": {"decimals": 2}}
                ]
            },
        }
    )
    client = NodeClient(http)

    entries = await client.fetch_address_balances(ADDRESS, asset_ids=[ASSET_X])

    assert entries == [BalanceEntry(asset_id=ASSET_X, amount=1.0)]
    http.get_json.assert_awaited_once_with(f"/assets/balance/{ADDRESS}", {"id": [ASSET_X]})


@pytest.mark.anyio
async def test_fetch_address_balances_only_base_skips_token_request():
    http = make_http({f"/addresses/balance/{ADDRESS}": {"balance": 100000000}})
    client = NodeClient(http)

    entries = await client.fetch_address_balances(ADDRESS, asset_ids=[WAVES])

    assert entries == [BalanceEntry(asset_id=WAVES, amount=1.0)]
    assert http.get_json.await_count == 1


@pytest.mark.anyio
async def test_fetch_address_balances_paging():
    """Test limit and offset slice the combined list."""
    http = make_http(
        {
            f"/addresses/balance/{ADDRESS}": {"balance": 0},
            f"/assets/balance/{ADDRESS}": {
                "balances": [
                    {"assetId": asset_id, "balance": 1, "issueTransaction": {"decimals": 0}}
                    for asset_id in ("A", "B", "C")
                ]
            },
        }
    )
    client = NodeClient(http)

    entries = await client.fetch_address_balances(ADDRESS, limit=2, offset=1)

    assert [entry.asset_id for entry in entries] == ["A", "B"]
