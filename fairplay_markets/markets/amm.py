"""
Probability-weighted automated market maker.

A stake buys units on one side of a binary market. The price of a unit is
the side's current share of the pool:

    p = side_stake / (side_stake + opposite_stake)
    units = amount / p

so backing the lighter side buys more units per base unit staked, and per-unit
cost rises as a side accumulates stake. Units are computed as
amount * total // side_stake, with no rounded intermediate probability.
Reported probabilities are fixed point with PRECISION as the denominator; all
arithmetic is integer and rounds down.

An empty side prices at par (1 unit per base unit). That covers the fresh
market before its seed is absorbed and avoids a zero-probability division.

Stakes are stored in append-only arenas keyed by (market id, outcome). A
stake's index in its arena is its permanent handle.
"""

from dataclasses import dataclass, field

import numpy as np

from ..errors import StakeNotFound
from .contracts import MarketState, Outcome, SIDES, Stake

PRECISION = 10**18


def implied_probability(side_stake: int, opposite_stake: int) -> int:
    """
    Fixed-point probability of a side, scaled by PRECISION.

    Returns PRECISION // 2 for an empty pool.
    """
    total = side_stake + opposite_stake
    if total == 0:
        return PRECISION // 2
    return side_stake * PRECISION // total


def compute_units(amount: int, current_side_stake: int, opposite_side_stake: int) -> int:
    """
    Compute the units bought by staking amount on a side.

    Args:
        amount: Net amount being staked
        current_side_stake: Stake already on the chosen side
        opposite_side_stake: Stake on the other side

    Returns:
        Units bought (integer, rounded down)
    """
    if amount < 0 or current_side_stake < 0 or opposite_side_stake < 0:
        raise ValueError("amount and stakes must be non-negative")

    # Coin-flip pricing: nothing on this side to weigh against yet
    if current_side_stake == 0:
        return amount

    return amount * (current_side_stake + opposite_side_stake) // current_side_stake


def market_prices(state: MarketState) -> np.ndarray:
    """
    Implied probabilities [p_yes, p_no] for a market.

    Prices always sum to 1; an empty market is priced at [0.5, 0.5].
    """
    if state.total_stake == 0:
        return np.array([0.5, 0.5])
    return np.array([
        state.yes_stake / state.total_stake,
        state.no_stake / state.total_stake,
    ])


@dataclass
class StakeLedger:
    """
    Append-only stake arenas and AMM accounting.

    Recording a stake updates the market's side totals and unit totals in the
    same step, so yes_stake and total_yes_units always equal the sums over
    the YES arena (and likewise for NO).
    """
    arenas: dict[tuple[int, Outcome], list[Stake]] = field(default_factory=dict)

    def quote(self, state: MarketState, outcome: Outcome, amount: int) -> int:
        """Units a net amount would buy on a side right now."""
        return compute_units(
            amount,
            state.side_stake(outcome),
            state.side_stake(outcome.opposite),
        )

    def record(
        self,
        market_id: int,
        state: MarketState,
        outcome: Outcome,
        staker: str,
        amount: int,
        units: int | None = None
    ) -> tuple[int, Stake]:
        """
        Append a stake and fold it into the market's totals.

        Args:
            market_id: Market the stake belongs to
            state: That market's mutable state
            outcome: Side being staked
            staker: Owner of the new stake
            amount: Net amount (returned as principal on claim)
            units: Pre-computed units; quoted from the pool when omitted

        Returns:
            Tuple of (stake index, stake)
        """
        if units is None:
            units = self.quote(state, outcome, amount)

        stake = Stake(amount=amount, units=units, staker=staker)
        arena = self.arenas.setdefault((market_id, outcome), [])
        arena.append(stake)
        state.add_position(outcome, amount, units)
        return len(arena) - 1, stake

    def place(
        self,
        market_id: int,
        state: MarketState,
        outcome: Outcome,
        staker: str,
        value: int,
        fee_percent: int
    ) -> tuple[int, Stake, int]:
        """
        Take the platform fee from value and stake the remainder.

        The fee goes to the market's reward pool; the net amount buys units
        and is what the staker later recovers as principal.

        Returns:
            Tuple of (stake index, stake, fee)
        """
        fee = value * fee_percent // 100
        index, stake = self.record(market_id, state, outcome, staker, value - fee)
        state.reward_pool += fee
        return index, stake, fee

    def get(self, market_id: int, outcome: Outcome, index: int) -> Stake:
        """
        Look up a stake by its handle.

        Raises:
            StakeNotFound: if the index is outside the arena
        """
        arena = self.arenas.get((market_id, outcome), [])
        if index < 0 or index >= len(arena):
            raise StakeNotFound(
                f"No {outcome.name} stake #{index} in market {market_id}"
            )
        return arena[index]

    def stakes(self, market_id: int, outcome: Outcome) -> list[Stake]:
        """All stakes on one side, in placement order."""
        return list(self.arenas.get((market_id, outcome), []))

    def stakes_of(self, market_id: int, staker: str) -> list[tuple[Outcome, int, Stake]]:
        """Every stake an account holds in a market, as (outcome, index, stake)."""
        held = []
        for outcome in SIDES:
            for index, stake in enumerate(self.arenas.get((market_id, outcome), [])):
                if stake.staker == staker:
                    held.append((outcome, index, stake))
        return held

    def side_totals(self, market_id: int, outcome: Outcome) -> tuple[int, int]:
        """Recomputed (sum of amounts, sum of units) over one side's arena."""
        arena = self.arenas.get((market_id, outcome), [])
        return sum(s.amount for s in arena), sum(s.units for s in arena)
