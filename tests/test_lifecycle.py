"""Tests for market creation, staking, and the dispute protocol."""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fairplay_markets.config import DAY, UNIT
from fairplay_markets.errors import (
    AlreadyChallenged,
    AlreadyResolved,
    InsufficientValue,
    InvalidOutcome,
    InvalidTiming,
    MarketNotFound,
    NotOwner,
    ProposalPending,
)
from fairplay_markets.markets.contracts import MarketPhase, Outcome

BOND = UNIT // 10


def end_market(platform, clock, market_id):
    clock.set(platform.get_core(market_id).end_time)


class TestMarketCreation:
    """Test creating and seeding markets."""

    def test_create_market(self, platform, clock):
        end_time = clock.now() + 3600
        market_id = platform.create_market(
            "creator", "Will it rain tomorrow?", "Weather", end_time, 2 * UNIT
        )

        core = platform.get_core(market_id)
        assert market_id == 0
        assert core.question == "Will it rain tomorrow?"
        assert core.category == "Weather"
        assert core.end_time == end_time
        assert core.creator == "creator"
        assert core.resolution_time == end_time

    def test_ids_increase(self, platform, clock):
        first = platform.create_market("a", "Q1", "x", clock.now() + 10, 2 * UNIT)
        second = platform.create_market("b", "Q2", "x", clock.now() + 10, 2 * UNIT)
        assert (first, second) == (0, 1)
        assert platform.market_count == 2

    def test_end_time_must_be_in_future(self, platform, clock):
        with pytest.raises(InvalidTiming, match="End time must be in the future"):
            platform.create_market("creator", "Q", "x", clock.now() - 3600, 2 * UNIT)
        with pytest.raises(InvalidTiming):
            platform.create_market("creator", "Q", "x", clock.now(), 2 * UNIT)
        assert platform.market_count == 0

    def test_resolution_time_cannot_precede_end(self, platform, clock):
        with pytest.raises(InvalidTiming):
            platform.create_market(
                "creator", "Q", "x", clock.now() + 100, 2 * UNIT, resolution_time=clock.now() + 50
            )

    def test_seed_too_small(self, platform, clock):
        with pytest.raises(InsufficientValue):
            platform.create_market("creator", "Q", "x", clock.now() + 100, 1)

    def test_seed_split_evenly(self, platform, market):
        state = platform.get_state(market)
        assert state.yes_stake == UNIT
        assert state.no_stake == UNIT
        assert state.total_stake == 2 * UNIT
        assert state.total_yes_units == UNIT
        assert state.total_no_units == UNIT
        assert state.reward_pool == 0
        assert list(platform.get_prices(market)) == [0.5, 0.5]

    def test_seed_stakes_owned_by_creator(self, platform, market):
        for outcome in (Outcome.YES, Outcome.NO):
            stake = platform.get_stake(market, outcome, 0)
            assert stake.staker == "creator"
            assert stake.amount == UNIT
            assert not stake.claimed

    def test_odd_seed_remainder_goes_to_no(self, platform, clock):
        market_id = platform.create_market("creator", "Q", "x", clock.now() + 100, 5)
        state = platform.get_state(market_id)
        assert (state.yes_stake, state.no_stake) == (2, 3)

    def test_emits_event(self, platform, market):
        events = platform.events.named("MarketCreated")
        assert len(events) == 1
        assert events[0].fields["market_id"] == market

    def test_unknown_market(self, platform):
        with pytest.raises(MarketNotFound):
            platform.get_state(0)


class TestStaking:
    """Test placing stakes."""

    def test_place_stake(self, platform, market):
        index = platform.place_stake("bob", market, Outcome.YES, UNIT)
        state = platform.get_state(market)
        stake = platform.get_stake(market, Outcome.YES, index)

        assert index == 1  # Seed stake is index 0
        assert stake.amount == UNIT - UNIT // 100
        assert stake.units == 2 * stake.amount  # 50/50 pool
        assert state.reward_pool == UNIT // 100
        assert state.total_stake == state.yes_stake + state.no_stake

    def test_prices_move_toward_staked_side(self, platform, market):
        platform.place_stake("bob", market, Outcome.YES, 2 * UNIT)
        prices = platform.get_prices(market)
        assert prices[0] > 0.5
        assert prices[0] + prices[1] == pytest.approx(1.0)

    def test_quote_matches_stake(self, platform, market):
        quoted = platform.quote_units(market, Outcome.NO, UNIT)
        index = platform.place_stake("bob", market, Outcome.NO, UNIT)
        assert platform.get_stake(market, Outcome.NO, index).units == quoted

    def test_stake_against_heavily_skewed_pool(self, platform, clock):
        market_id = platform.create_market("creator", "Q", "x", clock.now() + 3600, 2)
        platform.place_stake("whale", market_id, Outcome.NO, 10 * UNIT)

        quoted = platform.quote_units(market_id, Outcome.YES, UNIT)
        index = platform.place_stake("alice", market_id, Outcome.YES, UNIT)
        stake = platform.get_stake(market_id, Outcome.YES, index)

        assert stake.units == quoted
        assert stake.units > stake.amount * 10**18
        assert platform.get_prices(market_id)[0] < 0.5

    def test_stake_after_end(self, platform, clock, market):
        end_market(platform, clock, market)
        with pytest.raises(InvalidTiming):
            platform.place_stake("bob", market, Outcome.YES, UNIT)

    def test_zero_stake(self, platform, market):
        with pytest.raises(InsufficientValue):
            platform.place_stake("bob", market, Outcome.YES, 0)

    def test_invalid_outcome(self, platform, market):
        with pytest.raises(InvalidOutcome):
            platform.place_stake("bob", market, Outcome.UNRESOLVED, UNIT)
        assert platform.get_state(market).total_stake == 2 * UNIT

    def test_failed_stake_changes_nothing(self, platform, clock, market):
        before = platform.get_state(market).to_dict()
        end_market(platform, clock, market)
        with pytest.raises(InvalidTiming):
            platform.place_stake("bob", market, Outcome.NO, UNIT)
        assert platform.get_state(market).to_dict() == before
        assert len(platform.get_stakes(market, Outcome.NO)) == 1


class TestProposals:
    """Test proposing and challenging outcomes."""

    def test_propose_before_end(self, platform, market):
        with pytest.raises(InvalidTiming):
            platform.propose_outcome("alice", market, Outcome.YES, BOND)

    def test_propose(self, platform, clock, market):
        end_market(platform, clock, market)
        proposal = platform.propose_outcome("alice", market, Outcome.YES, BOND)

        assert proposal.proposer == "alice"
        assert proposal.proposed_outcome == Outcome.YES
        assert proposal.bond == BOND
        assert proposal.liveness_deadline == clock.now() + DAY
        assert platform.phase(market) == MarketPhase.PROPOSAL_PENDING

    def test_proposal_bond_too_small(self, platform, clock, market):
        end_market(platform, clock, market)
        with pytest.raises(InsufficientValue):
            platform.propose_outcome("alice", market, Outcome.YES, BOND - 1)
        assert platform.get_proposal(market) is None

    def test_second_proposal_rejected(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        with pytest.raises(ProposalPending):
            platform.propose_outcome("bob", market, Outcome.NO, BOND)
        assert platform.get_proposal(market).proposer == "alice"

    def test_challenge(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        platform.challenge_proposal("bob", market, BOND)

        state = platform.get_state(market)
        assert state.challenged
        assert state.challenger == "bob"
        assert state.challenge_stake == BOND
        assert platform.phase(market) == MarketPhase.CHALLENGED

    def test_challenge_without_proposal(self, platform, clock, market):
        end_market(platform, clock, market)
        with pytest.raises(InvalidTiming):
            platform.challenge_proposal("bob", market, BOND)

    def test_challenge_after_liveness(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        clock.advance(DAY)
        with pytest.raises(InvalidTiming):
            platform.challenge_proposal("bob", market, BOND)

    def test_challenge_bond_too_small(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        with pytest.raises(InsufficientValue):
            platform.challenge_proposal("bob", market, BOND - 1)
        assert not platform.get_state(market).challenged

    def test_second_challenge_rejected(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        platform.challenge_proposal("bob", market, BOND)
        with pytest.raises(AlreadyChallenged):
            platform.challenge_proposal("carol", market, BOND)
        assert platform.get_state(market).challenger == "bob"


class TestFinalization:
    """Test settling unchallenged proposals."""

    def test_finalize_before_liveness(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        clock.advance(DAY - 1)
        with pytest.raises(InvalidTiming):
            platform.finalize_proposal("anyone", market)

    def test_finalize_returns_bond(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        clock.advance(DAY)

        outcome = platform.finalize_proposal("anyone", market)

        assert outcome == Outcome.YES
        assert platform.balance_of("alice") == BOND
        assert platform.get_proposal(market).resolved

    def test_finalize_challenged(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        platform.challenge_proposal("bob", market, BOND)
        clock.advance(DAY)
        with pytest.raises(AlreadyChallenged):
            platform.finalize_proposal("anyone", market)
        assert not platform.get_proposal(market).resolved

    def test_finalize_twice(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        clock.advance(DAY)
        platform.finalize_proposal("anyone", market)
        with pytest.raises(AlreadyResolved):
            platform.finalize_proposal("anyone", market)
        assert platform.balance_of("alice") == BOND

    def test_propose_after_settlement(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        clock.advance(DAY)
        platform.finalize_proposal("anyone", market)
        with pytest.raises(AlreadyResolved):
            platform.propose_outcome("bob", market, Outcome.NO, BOND)

    def test_settlement_defers_distribution(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        clock.advance(DAY)
        platform.finalize_proposal("anyone", market)

        state = platform.get_state(market)
        assert not state.resolved
        assert state.outcome == Outcome.UNRESOLVED
        assert platform.phase(market) == MarketPhase.SETTLED


class TestResolverJudgement:
    """Test the privileged resolver settling challenged proposals."""

    def _challenged(self, platform, clock, market):
        end_market(platform, clock, market)
        platform.propose_outcome("alice", market, Outcome.YES, BOND)
        platform.challenge_proposal("bob", market, BOND)

    def test_only_owner_resolves(self, platform, clock, market):
        self._challenged(platform, clock, market)
        with pytest.raises(NotOwner):
            platform.resolve_proposal("alice", market, True)
        assert not platform.get_proposal(market).resolved

    def test_correct_proposal_takes_both_bonds(self, platform, clock, market):
        self._challenged(platform, clock, market)
        outcome = platform.resolve_proposal("owner", market, True)

        assert outcome == Outcome.YES
        assert platform.balance_of("alice") == 2 * BOND
        assert platform.balance_of("bob") == 0
        assert platform.get_state(market).reward_pool == 0

    def test_incorrect_proposal_forfeits_bond_to_pool(self, platform, clock, market):
        self._challenged(platform, clock, market)
        outcome = platform.resolve_proposal("owner", market, False)

        assert outcome == Outcome.NO
        assert platform.balance_of("alice") == 0
        assert platform.balance_of("bob") == BOND
        assert platform.get_state(market).reward_pool == BOND

    def test_resolve_twice(self, platform, clock, market):
        self._challenged(platform, clock, market)
        platform.resolve_proposal("owner", market, True)
        with pytest.raises(AlreadyResolved):
            platform.resolve_proposal("owner", market, False)

    def test_phases(self, platform, clock, market):
        assert platform.phase(market) == MarketPhase.OPEN
        end_market(platform, clock, market)
        assert platform.phase(market) == MarketPhase.ENDED
        self._challenged(platform, clock, market)
        assert platform.phase(market) == MarketPhase.CHALLENGED
        platform.resolve_proposal("owner", market, True)
        assert platform.phase(market) == MarketPhase.SETTLED
        clock.advance(3 * DAY)
        platform.distribute_rewards("anyone", market)
        assert platform.phase(market) == MarketPhase.RESOLVED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
