"""
Metrics for evaluating no-loss market runs.

These metrics answer:
- How well do implied prices forecast the outcome?
- Does the ledger keep its promises (principal returned, rewards bounded)?
- How is the fee-funded reward pool distributed among participants?
"""

from typing import Any

import numpy as np

from ..markets.contracts import Outcome, SIDES
from .runner import SimulationResult


def _outcome_vector(outcome: Outcome) -> np.ndarray:
    vector = np.zeros(len(SIDES))
    vector[SIDES.index(outcome)] = 1.0
    return vector


def calculate_price_error(result: SimulationResult, at_step: int | None = None) -> float:
    """
    Distance between implied prices and the true outcome.

    L1 distance divided by 2, so 0 means the market priced the true outcome
    at certainty and 1 means it priced the wrong one at certainty.

    Args:
        result: Simulation result
        at_step: Step to evaluate (default: final)
    """
    prices = result.final_prices if at_step is None else result.price_history[at_step]
    return float(np.sum(np.abs(prices - _outcome_vector(result.true_outcome))) / 2)


def calculate_brier_score(results: list[SimulationResult], at_step: int | None = None) -> float:
    """
    Brier score of the YES price across runs.

    Brier = mean((p_yes - 1{outcome == YES})^2); lower is better.
    """
    if not results:
        return np.nan

    errors = []
    for result in results:
        prices = result.final_prices if at_step is None else result.price_history[at_step]
        target = 1.0 if result.true_outcome == Outcome.YES else 0.0
        errors.append((prices[0] - target) ** 2)
    return float(np.mean(errors))


def calculate_reward_conservation(result: SimulationResult) -> dict[str, Any]:
    """
    Check that rewards paid to stakers never exceed the staker pool.

    Dust is the part of the staker pool left behind by rounding down.
    """
    return {
        "staker_pool": result.staker_pool,
        "rewards_paid": result.rewards_paid,
        "dust": result.staker_pool - result.rewards_paid,
        "conserved": result.rewards_paid <= result.staker_pool,
    }


def calculate_no_loss_violations(result: SimulationResult) -> list[str]:
    """
    Agents whose returned principal differs from what they staked net of fees.

    An empty list means every claimed stake returned its principal.
    """
    return [
        agent_id for agent_id, staked in result.agent_net_staked.items()
        if result.agent_principal.get(agent_id, 0) != staked
    ]


def calculate_welfare_distribution(result: SimulationResult) -> dict[str, Any]:
    """
    Analyze how rewards and fees are distributed among participants.

    Returns:
        Dictionary with per-type reward totals, winner counts, and the Gini
        coefficient of rewards
    """
    rewards = np.array(list(result.agent_rewards.values()), dtype=float)
    if rewards.size == 0:
        return {"total_rewards": 0, "mean_reward": 0, "gini_coefficient": 0.0}

    by_type: dict[str, float] = {}
    for agent_id, reward in result.agent_rewards.items():
        agent_type = result.agent_types.get(agent_id, "unknown")
        by_type[agent_type] = by_type.get(agent_type, 0) + reward

    sorted_rewards = np.sort(rewards)
    n = len(sorted_rewards)
    if np.sum(sorted_rewards) == 0:
        gini = 0.0
    else:
        gini = (2 * np.sum(np.arange(1, n + 1) * sorted_rewards) / (n * np.sum(sorted_rewards))) - (n + 1) / n

    pnls = np.array(list(result.agent_pnl.values()), dtype=float)
    return {
        "total_rewards": float(np.sum(rewards)),
        "mean_reward": float(np.mean(rewards)),
        "rewards_by_type": by_type,
        "n_rewarded": int(np.sum(rewards > 0)),
        "n_net_positive": int(np.sum(pnls > 0)),
        "worst_pnl": float(np.min(pnls)),
        "gini_coefficient": float(gini),
        "creator_payout": result.creator_payout,
    }


def calculate_staking_activity(result: SimulationResult) -> dict[str, Any]:
    """
    Analyze staking activity patterns.
    """
    positions = result.positions
    if not positions:
        return {"n_stakes": 0}

    values = np.array([p.value for p in positions], dtype=float)
    per_side = {side.name: sum(1 for p in positions if p.outcome == side) for side in SIDES}

    stakes_per_agent = {agent_id: 0 for agent_id in result.agent_types}
    for position in positions:
        stakes_per_agent[position.agent_id] = stakes_per_agent.get(position.agent_id, 0) + 1

    return {
        "n_stakes": len(positions),
        "total_staked": int(np.sum(values)),
        "mean_stake": float(np.mean(values)),
        "stakes_per_side": per_side,
        "stakes_per_agent": stakes_per_agent,
        "most_active_agent": max(stakes_per_agent, key=stakes_per_agent.get),
    }


def summarize_batch(results: list[SimulationResult]) -> dict[str, Any]:
    """
    Summarize results across multiple simulation runs.
    """
    if not results:
        return {}

    price_errors = [calculate_price_error(r) for r in results]
    conservation = [calculate_reward_conservation(r) for r in results]

    return {
        "n_runs": len(results),
        "mean_price_error": float(np.mean(price_errors)),
        "std_price_error": float(np.std(price_errors)),
        "brier_score": calculate_brier_score(results),
        "all_conserved": all(c["conserved"] for c in conservation),
        "mean_dust": float(np.mean([c["dust"] for c in conservation])),
        "no_loss_violations": sum(len(calculate_no_loss_violations(r)) for r in results),
        "challenged_runs": sum(1 for r in results if r.challenged),
        "correct_settlements": sum(1 for r in results if r.settled_outcome == r.true_outcome),
        "all_price_errors": price_errors,
    }
