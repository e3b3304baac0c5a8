"""Unit tests for the session gate and the in-memory balance event source."""

import asyncio

import pytest
from fakes import ADDRESS

from wallet_assets.adapters.events import InMemoryBalanceEventSource, PendingTransfer
from wallet_assets.adapters.session import StaticSession
from wallet_assets.balances import adjust_balance
from wallet_assets.constants import WAVES


@pytest.mark.anyio
async def test_session_blocks_until_login():
    session = StaticSession(ADDRESS)
    waiter = asyncio.create_task(session.wait_for_login())

    await asyncio.sleep(0)
    assert not waiter.done()
    assert session.is_logged_in is False

    session.login()
    await asyncio.wait_for(waiter, timeout=1)
    assert session.is_logged_in is True


@pytest.mark.anyio
async def test_session_logout_blocks_again():
    session = StaticSession(ADDRESS, logged_in=True)
    await session.wait_for_login()

    session.logout()

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(session.wait_for_login(), timeout=0.01)


def test_pending_transfer_difference_includes_fee():
    """Test a transfer paying its fee in the same asset counts both."""
    transfer = PendingTransfer(asset_id=WAVES, amount=1.0, fee_asset_id=WAVES, fee=0.001)

    assert transfer.get_balance_difference(WAVES) == pytest.approx(1.001)
    assert transfer.get_balance_difference("OTHER") == 0.0


def test_pending_transfer_fee_in_other_asset():
    transfer = PendingTransfer(asset_id="TOKEN", amount=5.0, fee_asset_id=WAVES, fee=0.001)

    assert transfer.get_balance_difference("TOKEN") == 5.0
    assert transfer.get_balance_difference(WAVES) == 0.001


@pytest.mark.anyio
async def test_event_source_add_and_confirm():
    source = InMemoryBalanceEventSource()
    transfer_id = source.add(
        PendingTransfer(asset_id="TOKEN", amount=2.0, fee_asset_id=WAVES, id="tx1")
    )
    generated_id = source.add(PendingTransfer(asset_id="TOKEN", amount=1.0, fee_asset_id=WAVES))

    assert transfer_id == "tx1"
    assert generated_id

    events = await source.pending_balance_events()
    assert adjust_balance("TOKEN", 10.0, events) == 7.0

    assert source.confirm("tx1") is True
    assert source.confirm("tx1") is False
    assert len(await source.pending_balance_events()) == 1
