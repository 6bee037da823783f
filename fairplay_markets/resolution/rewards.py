"""
Reward distribution and per-stake claims.

Distribution marks a settled market resolved and pays the creator and
protocol shares of the reward pool straight into the balance ledger. The
staker share is never pushed: each winning stake pulls its part when it is
claimed,

    reward = units * staker_pool // total_units_on_winning_side

so no single call iterates over an unbounded set of stakes. Every claim
returns the stake's principal whatever the outcome.
"""

import logging
from dataclasses import dataclass
from typing import Any

from ..config import PlatformConfig
from ..errors import AlreadyClaimed, AlreadyResolved, InvalidTiming, NotOwner
from ..ledger.balances import BalanceLedger
from ..markets.amm import StakeLedger
from ..markets.contracts import MarketCore, MarketState, Outcome, Proposal, Stake
from ..markets.registry import MarketRegistry

logger = logging.getLogger(__name__)


@dataclass
class RewardDistributor:
    registry: MarketRegistry
    stakes: StakeLedger
    balances: BalanceLedger
    config: PlatformConfig

    def distribution_opens_at(self, core: MarketCore) -> int:
        return core.resolution_time + self.config.challenge_period

    def window_open(self, market_id: int, now: int) -> bool:
        """Check if enough time has passed since resolution_time to distribute."""
        return now >= self.distribution_opens_at(self.registry.core(market_id))

    def staker_pool(self, state: MarketState) -> int:
        """Part of the reward pool shared among winning stakes."""
        return state.reward_pool * self.config.staker_share_percent // 100

    def reward_for(self, state: MarketState, outcome: Outcome, stake: Stake) -> int:
        """
        Reward owed to a stake if outcome is the winning side.

        Zero for the losing side and for a side with no units.
        """
        if outcome != state.outcome:
            return 0
        winning_units = state.side_units(outcome)
        if winning_units == 0:
            return 0
        return stake.units * self.staker_pool(state) // winning_units

    def distribute(self, market_id: int, proposal: Proposal | None, now: int) -> dict[str, Any]:
        """
        Resolve a settled market and pay the creator and protocol shares.

        Raises:
            AlreadyResolved: rewards were already distributed
            InvalidTiming: no settled proposal, or the challenge period since
                resolution_time has not elapsed
        """
        core, state = self.registry.require(market_id)
        if state.resolved:
            raise AlreadyResolved(f"Market {market_id} rewards already distributed")
        if proposal is None or not proposal.resolved:
            raise InvalidTiming(f"Market {market_id} has no settled outcome")
        opens_at = self.distribution_opens_at(core)
        if now < opens_at:
            raise InvalidTiming(
                f"Rewards for market {market_id} cannot be distributed before {opens_at}"
            )

        state.resolved = True
        state.outcome = proposal.settled_outcome

        creator_share = state.reward_pool * self.config.creator_share_percent // 100
        protocol_share = state.reward_pool * self.config.protocol_share_percent // 100
        self.balances.credit(core.creator, creator_share)
        self.balances.credit(self.config.protocol_account, protocol_share)

        logger.info(
            f"Market {market_id}: resolved {state.outcome.name}, pool {state.reward_pool} "
            f"(creator {creator_share}, protocol {protocol_share}, "
            f"stakers {self.staker_pool(state)})"
        )
        return {
            "market_id": market_id,
            "outcome": state.outcome,
            "reward_pool": state.reward_pool,
            "creator_share": creator_share,
            "protocol_share": protocol_share,
            "staker_pool": self.staker_pool(state),
        }

    def claim(
        self,
        market_id: int,
        outcome: Outcome,
        stake_index: int,
        caller: str
    ) -> tuple[int, int]:
        """
        Claim a stake's principal, plus its reward if it backed the winner.

        Returns:
            Tuple of (principal, reward) credited to the caller

        Raises:
            StakeNotFound: no stake at that index
            InvalidTiming: market not yet resolved
            NotOwner: caller does not own the stake
            AlreadyClaimed: stake already claimed or restaked
        """
        state = self.registry.state(market_id)
        stake = self.stakes.get(market_id, outcome, stake_index)
        if not state.resolved:
            raise InvalidTiming(f"Market {market_id} is not resolved")
        if stake.staker != caller:
            raise NotOwner(f"{caller} does not own {outcome.name} stake #{stake_index}")
        if stake.claimed:
            raise AlreadyClaimed(f"{outcome.name} stake #{stake_index} already claimed")

        reward = self.reward_for(state, outcome, stake)
        stake.claimed = True
        state.rewards_paid += reward
        self.balances.credit(caller, stake.amount + reward)
        logger.debug(
            f"Market {market_id}: {caller} claimed {outcome.name} #{stake_index} "
            f"(principal {stake.amount}, reward {reward})"
        )
        return stake.amount, reward
