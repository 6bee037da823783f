"""
Roll a winning position's principal into another market.

Restaking consumes the old stake (it counts as claimed) and enters its
principal into an open market unchanged. No platform fee is taken: the fee
is charged once, when value first enters through place_stake. Only principal
moves: the old position's reward share is forfeited.
"""

import logging
from dataclasses import dataclass

from ..errors import AlreadyClaimed, InvalidOutcome, InvalidTiming, NotOwner
from ..markets.amm import StakeLedger
from ..markets.contracts import Outcome, Stake
from ..markets.registry import MarketRegistry
from .rewards import RewardDistributor

logger = logging.getLogger(__name__)


@dataclass
class RestakeBridge:
    registry: MarketRegistry
    stakes: StakeLedger
    rewards: RewardDistributor

    def restake(
        self,
        old_market_id: int,
        new_market_id: int,
        outcome: Outcome,
        stake_index: int,
        caller: str,
        now: int,
        new_outcome: Outcome | None = None
    ) -> tuple[int, Stake, int]:
        """
        Move an unclaimed winning stake's principal into a new market.

        Args:
            old_market_id: Resolved market holding the stake
            new_market_id: Open market to stake into
            outcome: Side of the old stake; must be the old market's outcome
            stake_index: Handle of the old stake
            caller: Account restaking; must own the old stake
            now: Current clock reading
            new_outcome: Side to back in the new market (default: outcome)

        Returns:
            Tuple of (new stake index, new stake, forfeited reward)

        Raises:
            InvalidTiming: new market closed, or old market not resolved
            InvalidOutcome: old stake is not on the winning side
            NotOwner: caller does not own the old stake
            AlreadyClaimed: old stake already claimed or restaked
        """
        new_core, new_state = self.registry.require(new_market_id)
        old_state = self.registry.state(old_market_id)
        target = outcome if new_outcome is None else new_outcome
        stake = self.stakes.get(old_market_id, outcome, stake_index)

        if now >= new_core.end_time:
            raise InvalidTiming(f"Market {new_market_id} has ended")
        if not old_state.resolved:
            raise InvalidTiming(f"Market {old_market_id} is not resolved")
        if outcome != old_state.outcome:
            raise InvalidOutcome(
                f"Only {old_state.outcome.name} stakes in market {old_market_id} can be restaked"
            )
        if stake.staker != caller:
            raise NotOwner(f"{caller} does not own {outcome.name} stake #{stake_index}")
        if stake.claimed:
            raise AlreadyClaimed(f"{outcome.name} stake #{stake_index} already claimed")

        forfeited = self.rewards.reward_for(old_state, outcome, stake)
        stake.claimed = True
        index, new_stake = self.stakes.record(
            new_market_id, new_state, target, caller, stake.amount
        )
        logger.info(
            f"{caller} restaked {stake.amount} from market {old_market_id} into "
            f"market {new_market_id} {target.name} #{index} (reward forfeited: {forfeited})"
        )
        return index, new_stake, forfeited
