"""Simulation infrastructure for running no-loss market experiments."""

from .runner import Simulation, SimulationConfig, SimulationResult, run_batch
from .metrics import (
    calculate_price_error,
    calculate_brier_score,
    calculate_reward_conservation,
    calculate_no_loss_violations,
    calculate_welfare_distribution,
    calculate_staking_activity,
    summarize_batch,
)

__all__ = [
    # Simulation runner
    "Simulation",
    "SimulationConfig",
    "SimulationResult",
    "run_batch",
    # Metrics
    "calculate_price_error",
    "calculate_brier_score",
    "calculate_reward_conservation",
    "calculate_no_loss_violations",
    "calculate_welfare_distribution",
    "calculate_staking_activity",
    "summarize_batch",
]
