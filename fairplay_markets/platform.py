"""
No-loss prediction market platform.

FairplayPlatform is the entry point for every operation. It wires together
the market registry, the AMM stake ledger, the dispute resolver, the reward
distributor, the restake bridge, and the balance ledger, and it enforces the
execution model shared by all of them:

- Each mutating call holds the platform's reentrancy guard for its whole
  duration, so operations are serialized and cannot be re-entered from an
  outbound transfer.
- Each call validates every precondition before changing state. The single
  external interaction (the transfer in withdraw) happens after the ledger
  debit and rolls it back on failure.
- Timing guards read the injected clock once per call.

Caller identity and attached value are explicit arguments.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .config import PlatformConfig
from .errors import InsufficientValue, InvalidTiming, TransferFailed
from .ledger.balances import BalanceLedger
from .ledger.clock import Clock, SystemClock
from .ledger.events import EventLog
from .ledger.guard import ReentrancyGuard
from .ledger.transfers import InMemoryTransfer, ValueTransfer
from .markets.amm import StakeLedger, market_prices
from .markets.contracts import (
    MarketCore,
    MarketPhase,
    MarketState,
    Outcome,
    Proposal,
    Stake,
)
from .markets.registry import MarketRegistry
from .resolution.disputes import DisputeResolver
from .resolution.restake import RestakeBridge
from .resolution.rewards import RewardDistributor

logger = logging.getLogger(__name__)


@dataclass
class FairplayPlatform:
    """
    A set of independent binary no-loss markets sharing one balance ledger.

    Attributes:
        config: Fees, bonds, windows, and the resolver identity
        clock: Time source for every lifecycle guard
        transfer: Outbound value transfer used by withdraw
        events: Best-effort notification sink
    """
    config: PlatformConfig = field(default_factory=PlatformConfig)
    clock: Clock = field(default_factory=SystemClock)
    transfer: ValueTransfer = field(default_factory=InMemoryTransfer)
    events: EventLog = field(default_factory=EventLog)

    registry: MarketRegistry = field(default_factory=MarketRegistry, repr=False)
    stakes: StakeLedger = field(default_factory=StakeLedger, repr=False)
    balances: BalanceLedger = field(default_factory=BalanceLedger, repr=False)
    guard: ReentrancyGuard = field(default_factory=ReentrancyGuard, repr=False)

    def __post_init__(self):
        self.disputes = DisputeResolver(self.registry, self.balances, self.config)
        self.rewards = RewardDistributor(self.registry, self.stakes, self.balances, self.config)
        self.bridge = RestakeBridge(self.registry, self.stakes, self.rewards)

    # ==================== MARKETS ====================

    def create_market(
        self,
        caller: str,
        question: str,
        category: str,
        end_time: int,
        value: int,
        resolution_time: int | None = None
    ) -> int:
        """
        Create a market, seeding both sides from the creator's deposit.

        Each side receives half the deposit (NO takes the odd base unit) at
        1:1 units, opening the market at 50/50. The two seed stakes are
        ordinary claimable stakes owned by the creator.

        Returns:
            The new market id
        """
        with self.guard.hold("create_market"):
            now = self.clock.now()
            if end_time <= now:
                raise InvalidTiming("End time must be in the future")
            if resolution_time is None:
                resolution_time = end_time
            if resolution_time < end_time:
                raise InvalidTiming("Resolution time cannot precede end time")
            if value < self.config.min_seed:
                raise InsufficientValue(
                    f"Seed deposit {value} below minimum {self.config.min_seed}"
                )

            market_id = self.registry.add(MarketCore(
                question=question,
                category=category,
                end_time=end_time,
                creator=caller,
                resolution_time=resolution_time,
            ))
            state = self.registry.state(market_id)
            yes_seed = value // 2
            no_seed = value - yes_seed
            self.stakes.record(market_id, state, Outcome.YES, caller, yes_seed, units=yes_seed)
            self.stakes.record(market_id, state, Outcome.NO, caller, no_seed, units=no_seed)

            logger.info(f"Market {market_id} created by {caller}: {question!r} (seed {value})")
            self.events.emit(
                "MarketCreated", now,
                market_id=market_id, question=question, category=category,
                end_time=end_time, creator=caller, seed=value,
            )
            return market_id

    def place_stake(self, caller: str, market_id: int, outcome: Any, value: int) -> int:
        """
        Stake value on a side of an open market.

        One percent of value (platform_fee_percent) goes to the reward pool;
        the rest buys units and is returned as principal on claim.

        Returns:
            Index of the new stake in the (market, outcome) arena
        """
        with self.guard.hold("place_stake"):
            now = self.clock.now()
            core, state = self.registry.require(market_id)
            side = Outcome.coerce(outcome)
            if now >= core.end_time:
                raise InvalidTiming(f"Market {market_id} has ended")
            if value <= 0:
                raise InsufficientValue("Stake must be positive")

            index, stake, fee = self.stakes.place(
                market_id, state, side, caller, value, self.config.platform_fee_percent
            )
            logger.debug(
                f"Market {market_id}: {caller} staked {stake.amount} on {side.name} "
                f"for {stake.units} units (fee {fee})"
            )
            self.events.emit(
                "StakePlaced", now,
                market_id=market_id, staker=caller, outcome=side,
                amount=stake.amount, units=stake.units, index=index,
            )
            return index

    # ==================== DISPUTES ====================

    def propose_outcome(self, caller: str, market_id: int, outcome: Any, value: int) -> Proposal:
        """Propose the outcome of an ended market, bonding value."""
        with self.guard.hold("propose_outcome"):
            now = self.clock.now()
            self.registry.require(market_id)
            side = Outcome.coerce(outcome)
            proposal = self.disputes.propose(market_id, caller, side, value, now)
            self.events.emit(
                "OutcomeProposed", now,
                market_id=market_id, outcome=side, proposer=caller,
            )
            return proposal

    def challenge_proposal(self, caller: str, market_id: int, value: int) -> Proposal:
        """Challenge a live proposal within its liveness window, bonding value."""
        with self.guard.hold("challenge_proposal"):
            now = self.clock.now()
            proposal = self.disputes.challenge(market_id, caller, value, now)
            self.events.emit("ProposalChallenged", now, market_id=market_id, challenger=caller)
            return proposal

    def finalize_proposal(self, caller: str, market_id: int) -> Outcome:
        """
        Settle an unchallenged proposal once liveness has expired.

        Distributes rewards in the same call if the challenge period since
        resolution_time has already elapsed.
        """
        with self.guard.hold("finalize_proposal"):
            now = self.clock.now()
            outcome = self.disputes.finalize(market_id, now)
            self.events.emit(
                "ProposalResolved", now,
                market_id=market_id, outcome=outcome, finalized_by=caller,
            )
            self._distribute_if_due(market_id, now)
            return outcome

    def resolve_proposal(self, caller: str, market_id: int, is_proposal_correct: bool) -> Outcome:
        """
        Settle a proposal by the resolver's judgement.

        Distributes rewards in the same call if the challenge period since
        resolution_time has already elapsed.
        """
        with self.guard.hold("resolve_proposal"):
            now = self.clock.now()
            outcome = self.disputes.resolve(market_id, caller, is_proposal_correct)
            self.events.emit(
                "ProposalResolved", now,
                market_id=market_id, outcome=outcome,
                proposal_correct=is_proposal_correct,
            )
            self._distribute_if_due(market_id, now)
            return outcome

    def distribute_rewards(self, caller: str, market_id: int) -> dict[str, Any]:
        """Run a distribution that settlement deferred because its window was not open."""
        with self.guard.hold("distribute_rewards"):
            now = self.clock.now()
            summary = self.rewards.distribute(market_id, self.disputes.get(market_id), now)
            self.events.emit("RewardsDistributed", now, triggered_by=caller, **summary)
            return summary

    def _distribute_if_due(self, market_id: int, now: int) -> None:
        if not self.rewards.window_open(market_id, now):
            logger.info(
                f"Market {market_id}: distribution deferred until "
                f"{self.rewards.distribution_opens_at(self.registry.core(market_id))}"
            )
            return
        summary = self.rewards.distribute(market_id, self.disputes.get(market_id), now)
        self.events.emit("RewardsDistributed", now, **summary)

    # ==================== CLAIMS ====================

    def unstake(self, caller: str, market_id: int, outcome: Any, stake_index: int) -> int:
        """
        Claim a stake in a resolved market.

        Principal is always returned; winning stakes also receive their share
        of the staker pool. Both are credited to the caller's balance.

        Returns:
            Total amount credited
        """
        with self.guard.hold("unstake"):
            now = self.clock.now()
            self.registry.require(market_id)
            side = Outcome.coerce(outcome)
            principal, reward = self.rewards.claim(market_id, side, stake_index, caller)
            self.events.emit(
                "Unstaked", now,
                market_id=market_id, staker=caller, outcome=side, index=stake_index,
                principal=principal, reward=reward,
            )
            return principal + reward

    def restake(
        self,
        caller: str,
        old_market_id: int,
        new_market_id: int,
        outcome: Any,
        stake_index: int,
        new_outcome: Any = None
    ) -> int:
        """
        Move an unclaimed winning stake's principal into an open market.

        The full principal is staked with no platform fee. The old stake's
        reward share is forfeited; claim it with unstake
        instead if the reward matters.

        Returns:
            Index of the new stake in the new market
        """
        with self.guard.hold("restake"):
            now = self.clock.now()
            self.registry.require(old_market_id)
            side = Outcome.coerce(outcome)
            target = side if new_outcome is None else Outcome.coerce(new_outcome)
            index, stake, forfeited = self.bridge.restake(
                old_market_id, new_market_id, side, stake_index, caller, now, target
            )
            self.events.emit(
                "Restaked", now,
                old_market_id=old_market_id, new_market_id=new_market_id,
                staker=caller, outcome=target, amount=stake.amount, units=stake.units,
                index=index, reward_forfeited=forfeited,
            )
            return index

    def withdraw(self, caller: str, amount: int) -> int:
        """
        Withdraw credited balance through the transfer primitive.

        The balance is debited before the transfer. If the transfer reports
        failure or raises, the debit is restored and TransferFailed is raised.

        Returns:
            The caller's remaining balance
        """
        with self.guard.hold("withdraw"):
            now = self.clock.now()
            remaining = self.balances.debit(caller, amount)
            try:
                sent = self.transfer.send(caller, amount)
            except Exception as e:
                self.balances.credit(caller, amount)
                raise TransferFailed(f"Transfer of {amount} to {caller} raised: {e}") from e
            if not sent:
                self.balances.credit(caller, amount)
                raise TransferFailed(f"Transfer of {amount} to {caller} failed")

            logger.info(f"{caller} withdrew {amount}")
            self.events.emit("Withdrawal", now, account=caller, amount=amount)
            return remaining

    # ==================== QUERIES ====================

    @property
    def market_count(self) -> int:
        return self.registry.count

    def get_market(self, market_id: int) -> tuple[MarketCore, MarketState]:
        return self.registry.require(market_id)

    def get_core(self, market_id: int) -> MarketCore:
        return self.registry.core(market_id)

    def get_state(self, market_id: int) -> MarketState:
        return self.registry.state(market_id)

    def get_proposal(self, market_id: int) -> Proposal | None:
        return self.disputes.get(market_id)

    def get_stake(self, market_id: int, outcome: Any, stake_index: int) -> Stake:
        self.registry.require(market_id)
        return self.stakes.get(market_id, Outcome.coerce(outcome), stake_index)

    def get_stakes(self, market_id: int, outcome: Any) -> list[Stake]:
        self.registry.require(market_id)
        return self.stakes.stakes(market_id, Outcome.coerce(outcome))

    def balance_of(self, account: str) -> int:
        return self.balances.balance_of(account)

    def phase(self, market_id: int) -> MarketPhase:
        return self.registry.phase(market_id, self.clock.now(), self.disputes.get(market_id))

    def get_prices(self, market_id: int) -> np.ndarray:
        """Implied probabilities [p_yes, p_no] from the pool composition."""
        return market_prices(self.registry.state(market_id))

    def quote_units(self, market_id: int, outcome: Any, value: int) -> int:
        """Units a stake of value would buy right now, after the fee."""
        state = self.registry.state(market_id)
        net = value - value * self.config.platform_fee_percent // 100
        return self.stakes.quote(state, Outcome.coerce(outcome), net)

    def preview_claim(self, market_id: int, outcome: Any, stake_index: int) -> dict[str, Any]:
        """
        What claiming a stake would credit.

        Before resolution the reward is projected as if the stake's side won,
        using the current reward pool.
        """
        state = self.registry.state(market_id)
        side = Outcome.coerce(outcome)
        stake = self.stakes.get(market_id, side, stake_index)
        if state.resolved:
            reward = self.rewards.reward_for(state, side, stake)
        else:
            units = state.side_units(side)
            reward = stake.units * self.rewards.staker_pool(state) // units if units else 0
        return {
            "principal": stake.amount,
            "reward": 0 if stake.claimed else reward,
            "claimed": stake.claimed,
            "projected": not state.resolved,
        }

    def open_markets(self) -> list[int]:
        """Ids of markets still accepting stakes, ordered by total stake."""
        ids = self.registry.open_market_ids(self.clock.now())
        return sorted(ids, key=lambda i: self.registry.state(i).total_stake, reverse=True)

    def markets_by_category(self, category: str) -> list[int]:
        return self.registry.ids_by_category(category)

    def __repr__(self) -> str:
        return (
            f"FairplayPlatform(markets={self.market_count}, "
            f"owed={self.balances.total_owed()}, owner={self.config.owner})"
        )
