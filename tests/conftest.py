"""Shared fixtures: a manual clock, a platform, and a seeded market."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from fairplay_markets.config import UNIT, PlatformConfig
from fairplay_markets.ledger.clock import ManualClock
from fairplay_markets.ledger.transfers import InMemoryTransfer
from fairplay_markets.platform import FairplayPlatform

START = 1_000_000
MARKET_LENGTH = 3600


@pytest.fixture
def clock():
    return ManualClock(current=START)


@pytest.fixture
def transfer():
    return InMemoryTransfer()


@pytest.fixture
def config():
    return PlatformConfig(owner="owner")


@pytest.fixture
def platform(clock, transfer, config):
    return FairplayPlatform(config=config, clock=clock, transfer=transfer)


@pytest.fixture
def market(platform, clock):
    """A market seeded with 2 UNIT by 'creator', ending in one hour."""
    return platform.create_market(
        "creator", "Will it rain tomorrow?", "Weather", clock.now() + MARKET_LENGTH, 2 * UNIT
    )
