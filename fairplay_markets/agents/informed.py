"""
Informed staker that receives private signals about the true outcome.

In a no-loss market the only thing at stake is the reward share, so an
informed staker backs the side it believes is underpriced: if its belief in
a side exceeds the side's implied price, units there are cheap relative to
the side's chance of winning the pool.
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .base import Staker
from ..markets.contracts import Outcome, SIDES
from ..platform import FairplayPlatform


@dataclass
class InformedStaker(Staker):
    """
    A staker with private information about the true outcome.

    Attributes:
        signal_precision: How accurate the staker's signals are (0.5 to 1)
        stake_threshold: Minimum belief-price gap before staking
        kelly_fraction: Fraction of the edge-proportional size to stake
        max_stake_fraction: Cap on any single stake as a share of wealth
    """
    signal_precision: float = 0.8
    stake_threshold: float = 0.05
    kelly_fraction: float = 0.5
    max_stake_fraction: float = 0.25

    _signal_received: bool = field(default=False, repr=False)
    _signal_outcome: Outcome | None = field(default=None, repr=False)

    def receive_signal(self, signal: dict[str, Any]) -> None:
        """
        Receive a signal about the true outcome.

        Expected signal format:
        {
            "outcome": Outcome,       # The side the signal points to
            "precision": float,       # Override default precision (optional)
            "strength": float,        # How strong the signal is (0-1, optional)
        }
        """
        if "outcome" not in signal:
            return

        self._signal_received = True
        self._signal_outcome = Outcome.coerce(signal["outcome"])

        precision = signal.get("precision", self.signal_precision)
        strength = signal.get("strength", 1.0)

        # Binary Bayesian update: the signal is right with probability 'precision'
        likelihoods = np.full(2, 1 - precision)
        likelihoods[self.side_index(self._signal_outcome)] = precision
        effective_likelihood = strength * likelihoods + (1 - strength) * 0.5

        posterior = effective_likelihood * self.beliefs
        posterior /= posterior.sum()
        self.beliefs = posterior

    def get_edge(self, platform: FairplayPlatform, market_id: int) -> np.ndarray:
        """
        Belief minus implied price for [YES, NO]; positive means underpriced.
        """
        return self.beliefs - platform.get_prices(market_id)

    def decide_stake(self, platform: FairplayPlatform, market_id: int) -> tuple[Outcome | None, int]:
        """
        Stake on the most underpriced side, sized by the size of the edge.
        """
        if not platform.registry.is_open(market_id, platform.clock.now()):
            return None, 0

        edges = self.get_edge(platform, market_id)
        best = int(np.argmax(edges))
        edge = edges[best]
        if edge <= self.stake_threshold:
            return None, 0

        price = platform.get_prices(market_id)[best]
        fraction = edge / (1 - price) if price < 1 else 0.0
        fraction = min(fraction * self.kelly_fraction, self.max_stake_fraction)

        value = int(fraction * self.wealth)
        if value <= 0:
            return None, 0
        return SIDES[best], value

    def __repr__(self) -> str:
        signal_info = f", signal={self._signal_outcome.name}" if self._signal_received else ""
        return (
            f"InformedStaker(id={self.agent_id}, wealth={self.wealth}, "
            f"precision={self.signal_precision}{signal_info})"
        )
