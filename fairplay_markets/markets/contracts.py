"""
Record types for binary no-loss markets.

A market is split into an immutable core (the question and its timing) and a
mutable state (stake totals, reward pool, resolution). Stakes and proposals
are kept as separate records so that each can be addressed on its own:

- MarketCore: question, category, end time, creator, resolution time
- MarketState: pool composition, reward pool, dispute flags, outcome
- Proposal: a bonded claim about the outcome, open to challenge
- Stake: one position on one side, identified by its index in that side's arena
"""

from dataclasses import dataclass
from enum import Enum, auto
from numbers import Integral
from typing import Any

from ..errors import InvalidOutcome


class Outcome(Enum):
    """Outcome of a binary market."""
    UNRESOLVED = 0
    YES = 1
    NO = 2

    @classmethod
    def coerce(cls, value: Any) -> "Outcome":
        """
        Convert a caller-supplied outcome into YES or NO.

        Accepts an Outcome, its integer value (including numpy integers), or
        its name (any case).

        Raises:
            InvalidOutcome: if the value is not YES or NO
        """
        outcome = None
        if isinstance(value, Outcome):
            outcome = value
        elif isinstance(value, str):
            outcome = cls.__members__.get(value.strip().upper())
        elif isinstance(value, Integral) and not isinstance(value, bool):
            try:
                outcome = cls(int(value))
            except ValueError:
                outcome = None
        if outcome not in (cls.YES, cls.NO):
            raise InvalidOutcome(f"Outcome must be YES or NO, got {value!r}")
        return outcome

    @property
    def opposite(self) -> "Outcome":
        if self == Outcome.YES:
            return Outcome.NO
        if self == Outcome.NO:
            return Outcome.YES
        raise InvalidOutcome("UNRESOLVED has no opposite")


# Order used for price vectors and per-side iteration
SIDES = (Outcome.YES, Outcome.NO)


class MarketPhase(Enum):
    """Lifecycle phase, derived from state and the clock."""
    OPEN = auto()              # Accepting stakes
    ENDED = auto()             # Past end_time, awaiting a proposal
    PROPOSAL_PENDING = auto()  # Proposal live, unchallenged
    CHALLENGED = auto()        # Proposal live, awaiting the resolver
    SETTLED = auto()           # Outcome decided, distribution not yet run
    RESOLVED = auto()          # Rewards distributed, claims open


@dataclass(frozen=True)
class MarketCore:
    """
    Immutable description of a market.
    """
    question: str
    category: str
    end_time: int
    creator: str
    resolution_time: int


@dataclass
class MarketState:
    """
    Mutable accounting for a market.

    total_stake == yes_stake + no_stake holds after every operation.
    """
    total_stake: int = 0
    yes_stake: int = 0
    no_stake: int = 0
    reward_pool: int = 0
    resolved: bool = False
    outcome: Outcome = Outcome.UNRESOLVED
    challenged: bool = False
    challenge_stake: int = 0
    challenger: str | None = None
    total_yes_units: int = 0
    total_no_units: int = 0
    rewards_paid: int = 0

    def side_stake(self, outcome: Outcome) -> int:
        return self.yes_stake if outcome == Outcome.YES else self.no_stake

    def side_units(self, outcome: Outcome) -> int:
        return self.total_yes_units if outcome == Outcome.YES else self.total_no_units

    def add_position(self, outcome: Outcome, amount: int, units: int) -> None:
        """Add a stake's amount and units to one side."""
        if outcome == Outcome.YES:
            self.yes_stake += amount
            self.total_yes_units += units
        else:
            self.no_stake += amount
            self.total_no_units += units
        self.total_stake += amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_stake": self.total_stake,
            "yes_stake": self.yes_stake,
            "no_stake": self.no_stake,
            "reward_pool": self.reward_pool,
            "resolved": self.resolved,
            "outcome": self.outcome.name,
            "challenged": self.challenged,
            "challenge_stake": self.challenge_stake,
            "challenger": self.challenger,
            "total_yes_units": self.total_yes_units,
            "total_no_units": self.total_no_units,
            "rewards_paid": self.rewards_paid,
        }


@dataclass
class Proposal:
    """
    A bonded claim about a market's outcome.

    settled_outcome is set when the proposal is finalized or resolved; it is
    the outcome the market takes once rewards are distributed.
    """
    proposed_outcome: Outcome
    proposer: str
    bond: int
    liveness_deadline: int
    resolved: bool = False
    settled_outcome: Outcome = Outcome.UNRESOLVED

    def is_live(self) -> bool:
        return not self.resolved


@dataclass
class Stake:
    """
    One position on one side of a market.

    units is fixed when the stake is placed and never recomputed.
    """
    amount: int
    units: int
    staker: str
    claimed: bool = False
