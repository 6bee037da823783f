"""Market records, registry, and the stake AMM."""

from .contracts import (
    Outcome,
    MarketPhase,
    MarketCore,
    MarketState,
    Proposal,
    Stake,
    SIDES,
)
from .amm import PRECISION, StakeLedger, compute_units, implied_probability, market_prices
from .registry import MarketRegistry

__all__ = [
    # Records
    "Outcome",
    "MarketPhase",
    "MarketCore",
    "MarketState",
    "Proposal",
    "Stake",
    "SIDES",
    # AMM
    "PRECISION",
    "StakeLedger",
    "compute_units",
    "implied_probability",
    "market_prices",
    # Registry
    "MarketRegistry",
]
