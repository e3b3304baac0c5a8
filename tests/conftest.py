"""Pytest configuration and fixtures."""

import gc

import pytest
from fakes import (
    ADDRESS,
    ASSET_X,
    ASSET_Y,
    FakeEvents,
    FakeMarketData,
    FakeMatcher,
    FakeNode,
    make_metadata,
)

from wallet_assets.adapters.matcher import PriorityPairResolver
from wallet_assets.adapters.session import StaticSession
from wallet_assets.constants import WAVES


@pytest.fixture(scope="module", autouse=True)
def cleanup_after_module():
    """Ensure proper cleanup after each test module."""
    yield
    # Force garbage collection to clean up any lingering resources
    gc.collect()
    gc.collect()  # Run twice to catch circular references


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def session():
    return StaticSession(ADDRESS, logged_in=True)


@pytest.fixture
def node():
    fake = FakeNode()
    fake.metadata[ASSET_X] = make_metadata(ASSET_X, "Xcoin", decimals=8)
    fake.metadata[ASSET_Y] = make_metadata(ASSET_Y, "Ycoin", decimals=2)
    return fake


@pytest.fixture
def market_data():
    return FakeMarketData()


@pytest.fixture
def matcher():
    return FakeMatcher()


@pytest.fixture
def pairs():
    """Resolver that makes the base asset the price asset of every base pair."""
    return PriorityPairResolver((WAVES,))


@pytest.fixture
def events():
    return FakeEvents()
