"""
Base staker class for no-loss market participants.

Stakers observe a market's implied prices and decide whether to stake. Since
principal is never at risk, a staker's decision is about where its units earn
the most of the fee-funded reward pool, not about avoiding loss. Different
staker types (noise, informed) differ in how they form that view.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np

from ..markets.contracts import Outcome, SIDES
from ..platform import FairplayPlatform


@dataclass
class Position:
    """
    Handle to one stake held by an agent.
    """
    agent_id: str
    market_id: int
    outcome: Outcome
    index: int
    value: int  # Gross value staked, before the fee


@dataclass
class Staker(ABC):
    """
    Abstract base class for market participants.

    A staker has:
    - Wealth (integer base units available to stake)
    - Positions (handles of stakes it placed)
    - Beliefs (subjective probabilities [p_yes, p_no])
    """
    agent_id: str
    initial_wealth: int = 1000

    # State tracking
    wealth: int = field(default=None)
    beliefs: np.ndarray = field(default=None)
    positions: list[Position] = field(default_factory=list)
    principal_returned: int = 0
    rewards_earned: int = 0

    def __post_init__(self):
        if self.wealth is None:
            self.wealth = self.initial_wealth
        if self.beliefs is None:
            self.beliefs = np.array([0.5, 0.5])

    @abstractmethod
    def decide_stake(self, platform: FairplayPlatform, market_id: int) -> tuple[Outcome | None, int]:
        """
        Decide whether and how much to stake.

        Returns:
            Tuple of (outcome, value) or (None, 0) if no stake
        """
        pass

    def receive_signal(self, signal: dict) -> None:
        """
        Receive and process information about the outcome.

        Override in subclasses that use signals.
        """
        pass

    def execute_stake(
        self,
        platform: FairplayPlatform,
        market_id: int,
        outcome: Outcome,
        value: int
    ) -> Position | None:
        """
        Place a stake and record the position.

        Returns:
            The new position, or None if the agent cannot afford it
        """
        value = min(value, self.wealth)
        if value <= 0:
            return None
        index = platform.place_stake(self.agent_id, market_id, outcome, value)
        self.wealth -= value
        position = Position(
            agent_id=self.agent_id, market_id=market_id,
            outcome=outcome, index=index, value=value,
        )
        self.positions.append(position)
        return position

    def step(self, platform: FairplayPlatform, market_id: int) -> Position | None:
        """
        Perform one round of decision-making and staking.
        """
        outcome, value = self.decide_stake(platform, market_id)
        if outcome is not None and value > 0:
            return self.execute_stake(platform, market_id, outcome, value)
        return None

    def claim_all(self, platform: FairplayPlatform, market_id: int) -> int:
        """
        Unstake every unclaimed position in a resolved market.

        Returns:
            Total credited to the agent's platform balance
        """
        total = 0
        for position in self.positions:
            if position.market_id != market_id:
                continue
            stake = platform.get_stake(market_id, position.outcome, position.index)
            if stake.claimed:
                continue
            credited = platform.unstake(self.agent_id, market_id, position.outcome, position.index)
            self.principal_returned += stake.amount
            self.rewards_earned += credited - stake.amount
            total += credited
        return total

    def withdraw_all(self, platform: FairplayPlatform) -> int:
        """Withdraw the agent's whole platform balance into its wealth."""
        balance = platform.balance_of(self.agent_id)
        if balance == 0:
            return 0
        platform.withdraw(self.agent_id, balance)
        self.wealth += balance
        return balance

    def get_pnl(self) -> int:
        """Net result against initial wealth (fees lost plus rewards won)."""
        return self.wealth - self.initial_wealth

    @staticmethod
    def side_index(outcome: Outcome) -> int:
        return SIDES.index(outcome)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.agent_id}, wealth={self.wealth})"
