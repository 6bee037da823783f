"""
Noise staker that stakes for reasons unrelated to information.

Noise stakers pay fees into the reward pool and move prices without knowing
anything about the outcome, which is what makes backing the right side worth
something to informed stakers. Noise staking can represent:
- Entertainment or expressive staking (backing a preferred outcome)
- Herding behind whichever side is rising
- Contrarian staking against the crowd
"""

from dataclasses import dataclass
from enum import Enum, auto

import numpy as np

from .base import Staker
from ..markets.contracts import Outcome, SIDES
from ..platform import FairplayPlatform


class NoiseStakerType(Enum):
    """Types of noise staking behavior."""
    RANDOM = auto()      # Pure random side
    MOMENTUM = auto()    # Back the side whose price has been rising
    CONTRARIAN = auto()  # Back the side whose price has been falling
    BIASED = auto()      # Systematically favor one side


@dataclass
class NoiseStaker(Staker):
    """
    A staker that picks sides for non-informational reasons.

    Attributes:
        staker_type: What kind of noise staking behavior
        stake_probability: Probability of staking each step
        stake_size_mean: Mean stake size (as fraction of wealth)
        stake_size_std: Std dev of stake size
        bias_outcome: For BIASED type, which side to favor
        bias_strength: How strongly to favor the biased side (0-1)
        momentum_lookback: For MOMENTUM/CONTRARIAN, how many steps to look back
    """
    staker_type: NoiseStakerType = NoiseStakerType.RANDOM
    stake_probability: float = 0.3
    stake_size_mean: float = 0.05
    stake_size_std: float = 0.02
    bias_outcome: Outcome = Outcome.YES
    bias_strength: float = 0.7
    momentum_lookback: int = 5

    _rng: np.random.Generator = None
    _price_history: list = None

    def __post_init__(self):
        super().__post_init__()
        self._rng = np.random.default_rng()
        self._price_history = []

    def set_seed(self, seed: int) -> None:
        """Set random seed for reproducibility."""
        self._rng = np.random.default_rng(seed)

    def decide_stake(self, platform: FairplayPlatform, market_id: int) -> tuple[Outcome | None, int]:
        """
        Decide whether to make a noise stake.
        """
        prices = platform.get_prices(market_id)
        self._price_history.append(prices)

        if not platform.registry.is_open(market_id, platform.clock.now()):
            return None, 0
        if self._rng.random() > self.stake_probability:
            return None, 0

        size = max(0.01, self._rng.normal(self.stake_size_mean, self.stake_size_std))
        value = int(size * self.wealth)

        if self.staker_type == NoiseStakerType.MOMENTUM:
            outcome = self._momentum_side()
        elif self.staker_type == NoiseStakerType.CONTRARIAN:
            outcome = self._momentum_side().opposite
        elif self.staker_type == NoiseStakerType.BIASED:
            outcome = self._biased_side()
        else:
            outcome = self._random_side()

        return outcome, value

    def _random_side(self) -> Outcome:
        return SIDES[int(self._rng.integers(0, 2))]

    def _momentum_side(self) -> Outcome:
        """The side whose price rose most over the lookback window."""
        if len(self._price_history) < 2:
            return self._random_side()
        lookback = min(self.momentum_lookback, len(self._price_history) - 1)
        change = self._price_history[-1] - self._price_history[-lookback - 1]
        if np.allclose(change, 0):
            return self._random_side()
        return SIDES[int(np.argmax(change))]

    def _biased_side(self) -> Outcome:
        if self._rng.random() < self.bias_strength:
            return self.bias_outcome
        return self._random_side()

    def __repr__(self) -> str:
        return (
            f"NoiseStaker(id={self.agent_id}, type={self.staker_type.name}, "
            f"wealth={self.wealth}, stake_prob={self.stake_probability})"
        )
