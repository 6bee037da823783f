"""Tests for read-only queries and the event sink."""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fairplay_markets.config import DAY, UNIT, PlatformConfig
from fairplay_markets.errors import InvalidOutcome, MarketNotFound
from fairplay_markets.ledger.clock import ManualClock
from fairplay_markets.ledger.events import EventLog
from fairplay_markets.markets.contracts import Outcome
from fairplay_markets.platform import FairplayPlatform


class TestQueries:
    """Test market lookups."""

    def test_get_market(self, platform, market):
        core, state = platform.get_market(market)
        assert core.creator == "creator"
        assert state.total_stake == 2 * UNIT

    def test_unknown_market(self, platform):
        with pytest.raises(MarketNotFound):
            platform.get_market(0)
        with pytest.raises(MarketNotFound):
            platform.get_stakes(-1, Outcome.YES)

    def test_open_markets_by_stake(self, platform, clock, market):
        bigger = platform.create_market("carol", "Q2", "Sports", clock.now() + 7200, 10 * UNIT)
        short = platform.create_market("dave", "Q3", "Sports", clock.now() + 60, 4 * UNIT)

        assert platform.open_markets() == [bigger, short, market]
        clock.advance(120)
        assert platform.open_markets() == [bigger, market]

    def test_markets_by_category(self, platform, clock, market):
        sports = platform.create_market("carol", "Q2", "Sports", clock.now() + 7200, 2 * UNIT)
        assert platform.markets_by_category("weather") == [market]
        assert platform.markets_by_category(" Sports ") == [sports]
        assert platform.markets_by_category("politics") == []

    def test_stakes_in_placement_order(self, platform, market):
        platform.place_stake("bob", market, Outcome.YES, UNIT)
        platform.place_stake("carol", market, "yes", UNIT)
        assert [s.staker for s in platform.get_stakes(market, Outcome.YES)] == ["creator", "bob", "carol"]

    def test_repr(self, platform, market):
        assert "markets=1" in repr(platform)


class TestEvents:
    """Test event emission."""

    def test_operations_emit_events(self, platform, market):
        platform.place_stake("bob", market, Outcome.NO, UNIT)
        names = [e.name for e in platform.events.events]
        assert names == ["MarketCreated", "StakePlaced"]

        placed = platform.events.named("StakePlaced")[0]
        assert placed.fields["staker"] == "bob"
        assert placed.fields["outcome"] == Outcome.NO
        assert placed.fields["amount"] == UNIT - UNIT // 100

    def test_failed_operation_emits_nothing(self, platform, market):
        with pytest.raises(InvalidOutcome):
            platform.place_stake("bob", market, "maybe", UNIT)
        assert platform.events.named("StakePlaced") == []

    def test_subscribers_receive_events(self, platform, market):
        seen = []
        platform.events.subscribe(seen.append)
        platform.place_stake("bob", market, Outcome.YES, UNIT)
        assert [e.name for e in seen] == ["StakePlaced"]

    def test_failing_subscriber_does_not_fail_operation(self, platform, market):
        def broken(event):
            raise RuntimeError("indexer offline")

        platform.events.subscribe(broken)
        index = platform.place_stake("bob", market, Outcome.YES, UNIT)
        assert platform.get_stake(market, Outcome.YES, index).staker == "bob"
        assert len(platform.events.named("StakePlaced")) == 1

    def test_standalone_log(self):
        log = EventLog()
        event = log.emit("Ping", 5, value=1)
        assert event.timestamp == 5
        assert log.named("Ping") == [event]


class TestConfiguration:
    """Test platform configuration and the manual clock."""

    def test_defaults(self):
        config = PlatformConfig()
        assert config.protocol_account == "owner"
        assert config.staker_share_percent == 80
        assert config.challenge_period == 3 * DAY

    @pytest.mark.parametrize("kwargs", [
        {"platform_fee_percent": 101},
        {"creator_share_percent": 60, "protocol_share_percent": 50},
        {"min_proposal_bond": 0},
        {"min_seed": 1},
        {"liveness_period": 0},
    ])
    def test_rejects_bad_values(self, kwargs):
        with pytest.raises(ValueError):
            PlatformConfig(**kwargs)

    def test_custom_shares_flow_into_distribution(self, clock):
        config = PlatformConfig(owner="judge", protocol_account="treasury", creator_share_percent=0)
        platform = FairplayPlatform(config=config, clock=clock)
        market = platform.create_market("creator", "Q", "x", clock.now() + 10, 2 * UNIT)
        platform.place_stake("bob", market, Outcome.YES, 100 * UNIT)
        clock.advance(10)
        platform.propose_outcome("proposer", market, Outcome.YES, UNIT // 10)
        clock.advance(4 * DAY)
        platform.finalize_proposal("proposer", market)

        assert platform.get_state(market).resolved
        assert platform.balance_of("treasury") == UNIT * 10 // 100
        assert platform.balance_of("creator") == 0

    def test_manual_clock_is_monotonic(self):
        clock = ManualClock(current=10)
        assert clock.advance(5) == 15
        with pytest.raises(ValueError):
            clock.set(14)
        with pytest.raises(ValueError):
            clock.advance(-1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
