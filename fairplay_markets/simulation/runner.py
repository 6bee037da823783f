"""
Simulation runner for no-loss market experiments.

Drives one market on a FairplayPlatform through its whole lifecycle: seeding,
staking rounds, the dispute protocol, reward distribution, claims, and
withdrawals. Collects price and payout data for analysis.
"""

from dataclasses import dataclass, field
from typing import Callable

import numpy as np

from ..agents.base import Position, Staker
from ..config import UNIT, PlatformConfig
from ..ledger.clock import ManualClock
from ..ledger.transfers import InMemoryTransfer
from ..markets.contracts import Outcome, SIDES
from ..platform import FairplayPlatform

CREATOR = "creator"
PROPOSER = "proposer"
WATCHER = "watcher"


@dataclass
class SimulationConfig:
    """
    Configuration for a simulation run.

    Attributes:
        n_steps: Number of staking rounds before the market ends
        step_seconds: Clock time between rounds
        true_probability: Chance the market resolves YES (ignored if true_outcome set)
        true_outcome: Fixed outcome, or None to draw one
        seed_deposit: Creator's initial deposit, split across both sides
        proposal_bond: Bond the proposer attaches
        challenge_bond: Bond the watcher attaches when challenging
        dishonest_proposal_rate: Chance the proposer reports the wrong outcome
        agents_per_step: How many agents act per round (None = all)
        agent_order: Order of agent actions ('sequential' or 'random')
        random_seed: Random seed for reproducibility
        platform: Fees, bonds, and windows for the platform
    """
    n_steps: int = 50
    step_seconds: int = 3600
    true_probability: float = 0.5
    true_outcome: Outcome | None = None
    seed_deposit: int = 2 * UNIT
    proposal_bond: int = UNIT // 10
    challenge_bond: int = UNIT // 10
    dishonest_proposal_rate: float = 0.0
    agents_per_step: int | None = None
    agent_order: str = "random"
    random_seed: int | None = None
    platform: PlatformConfig = field(default_factory=PlatformConfig)

    def __post_init__(self):
        if not 0 <= self.true_probability <= 1:
            raise ValueError(f"true_probability must be in [0, 1], got {self.true_probability}")
        if not 0 <= self.dishonest_proposal_rate <= 1:
            raise ValueError(
                f"dishonest_proposal_rate must be in [0, 1], got {self.dishonest_proposal_rate}"
            )
        if self.n_steps <= 0 or self.step_seconds <= 0:
            raise ValueError("n_steps and step_seconds must be positive")


@dataclass
class SimulationResult:
    """
    Results from a simulation run.

    Amounts are integer base units.
    """
    config: SimulationConfig
    n_steps: int
    true_outcome: Outcome
    proposed_outcome: Outcome
    settled_outcome: Outcome
    challenged: bool

    # Market data
    price_history: np.ndarray  # Shape: (n_steps + 1, 2), columns [p_yes, p_no]
    final_prices: np.ndarray
    positions: list[Position]

    # Agent data
    agent_types: dict[str, str]
    agent_final_wealth: dict[str, int]
    agent_pnl: dict[str, int]
    agent_net_staked: dict[str, int]
    agent_principal: dict[str, int]
    agent_rewards: dict[str, int]

    # Pool accounting
    reward_pool: int
    staker_pool: int
    rewards_paid: int
    creator_payout: int
    total_withdrawn: int


@dataclass
class Simulation:
    """
    Runs one no-loss market with a population of stakers.
    """
    agents: list[Staker]
    config: SimulationConfig = field(default_factory=SimulationConfig)
    question: str = "Will the event occur?"
    category: str = "simulation"

    rng: np.random.Generator = field(default=None, repr=False)
    platform: FairplayPlatform = field(default=None, repr=False)
    clock: ManualClock = field(default=None, repr=False)
    market_id: int | None = None
    true_outcome: Outcome | None = None
    _step: int = 0
    _prices: list[np.ndarray] = field(default_factory=list, repr=False)

    def __post_init__(self):
        self.rng = np.random.default_rng(self.config.random_seed)

    def setup(self) -> None:
        """
        Create the platform and market, draw the true outcome, and hand out
        signals.
        """
        self.clock = ManualClock()
        self.platform = FairplayPlatform(
            config=self.config.platform,
            clock=self.clock,
            transfer=InMemoryTransfer(),
        )
        end_time = self.config.n_steps * self.config.step_seconds
        self.market_id = self.platform.create_market(
            CREATOR, self.question, self.category, end_time, self.config.seed_deposit
        )

        if self.config.true_outcome is not None:
            self.true_outcome = Outcome.coerce(self.config.true_outcome)
        elif self.rng.random() < self.config.true_probability:
            self.true_outcome = Outcome.YES
        else:
            self.true_outcome = Outcome.NO

        for agent in self.agents:
            precision = getattr(agent, "signal_precision", None)
            if precision is None:
                continue
            correct = self.rng.random() < precision
            pointed = self.true_outcome if correct else self.true_outcome.opposite
            agent.receive_signal({"outcome": pointed, "precision": precision})

        self._prices = [self.platform.get_prices(self.market_id)]

    def step(self) -> list[Position]:
        """
        Execute one staking round and advance the clock.
        """
        placed = []
        for agent in self._select_acting_agents():
            position = agent.step(self.platform, self.market_id)
            if position is not None:
                placed.append(position)

        self.clock.advance(self.config.step_seconds)
        self._prices.append(self.platform.get_prices(self.market_id))
        self._step += 1
        return placed

    def _select_acting_agents(self) -> list[Staker]:
        if self.config.agent_order == "sequential":
            return self.agents
        agents = self.agents.copy()
        self.rng.shuffle(agents)
        if self.config.agents_per_step is not None:
            agents = agents[:self.config.agents_per_step]
        return agents

    def resolve(self) -> tuple[Outcome, bool]:
        """
        Run the dispute protocol and distribute rewards.

        A dishonest proposal is always challenged by the watcher and
        overturned by the resolver.

        Returns:
            Tuple of (proposed outcome, whether it was challenged)
        """
        platform = self.platform
        dishonest = self.rng.random() < self.config.dishonest_proposal_rate
        proposed = self.true_outcome.opposite if dishonest else self.true_outcome

        platform.propose_outcome(PROPOSER, self.market_id, proposed, self.config.proposal_bond)
        if dishonest:
            platform.challenge_proposal(WATCHER, self.market_id, self.config.challenge_bond)
            platform.resolve_proposal(self.config.platform.owner, self.market_id, False)
        else:
            self.clock.advance(self.config.platform.liveness_period)
            platform.finalize_proposal(PROPOSER, self.market_id)

        if not platform.get_state(self.market_id).resolved:
            core = platform.get_core(self.market_id)
            self.clock.set(max(
                self.clock.now(),
                core.resolution_time + self.config.platform.challenge_period,
            ))
            platform.distribute_rewards(PROPOSER, self.market_id)
        return proposed, dishonest

    def settle_accounts(self) -> int:
        """
        Claim every stake and withdraw every balance.

        Returns:
            Total value withdrawn through the transfer primitive
        """
        platform = self.platform
        for agent in self.agents:
            agent.claim_all(platform, self.market_id)
            agent.withdraw_all(platform)

        for outcome in SIDES:
            platform.unstake(CREATOR, self.market_id, outcome, 0)
        for account in (CREATOR, PROPOSER, WATCHER, self.config.platform.protocol_account):
            balance = platform.balance_of(account)
            if balance:
                platform.withdraw(account, balance)
        return platform.transfer.total_sent()

    def run(self, progress_callback: Callable[[int, int], None] | None = None) -> SimulationResult:
        """
        Run the full simulation.

        Args:
            progress_callback: Optional callback(current_step, total_steps)
        """
        self.setup()
        for step in range(self.config.n_steps):
            self.step()
            if progress_callback is not None:
                progress_callback(step + 1, self.config.n_steps)

        proposed, challenged = self.resolve()
        state = self.platform.get_state(self.market_id)
        creator_before = self.platform.transfer.sent.get(CREATOR, 0)
        total_withdrawn = self.settle_accounts()
        creator_payout = self.platform.transfer.sent.get(CREATOR, 0) - creator_before

        return self._collect_results(proposed, challenged, state.outcome, creator_payout, total_withdrawn)

    def _collect_results(
        self,
        proposed: Outcome,
        challenged: bool,
        settled: Outcome,
        creator_payout: int,
        total_withdrawn: int
    ) -> SimulationResult:
        state = self.platform.get_state(self.market_id)

        net_staked = {}
        for agent in self.agents:
            net_staked[agent.agent_id] = sum(
                self.platform.get_stake(p.market_id, p.outcome, p.index).amount
                for p in agent.positions
            )

        return SimulationResult(
            config=self.config,
            n_steps=self._step,
            true_outcome=self.true_outcome,
            proposed_outcome=proposed,
            settled_outcome=settled,
            challenged=challenged,
            price_history=np.array(self._prices),
            final_prices=self._prices[-1],
            positions=[p for a in self.agents for p in a.positions],
            agent_types={a.agent_id: type(a).__name__ for a in self.agents},
            agent_final_wealth={a.agent_id: a.wealth for a in self.agents},
            agent_pnl={a.agent_id: a.get_pnl() for a in self.agents},
            agent_net_staked=net_staked,
            agent_principal={a.agent_id: a.principal_returned for a in self.agents},
            agent_rewards={a.agent_id: a.rewards_earned for a in self.agents},
            reward_pool=state.reward_pool,
            staker_pool=self.platform.rewards.staker_pool(state),
            rewards_paid=state.rewards_paid,
            creator_payout=creator_payout,
            total_withdrawn=total_withdrawn,
        )

    def __repr__(self) -> str:
        return f"Simulation(n_agents={len(self.agents)}, steps={self.config.n_steps})"


def run_batch(
    create_simulation: Callable[[], Simulation],
    n_runs: int,
    seeds: list[int] | None = None,
    progress_callback: Callable[[int, int], None] | None = None
) -> list[SimulationResult]:
    """
    Run multiple simulations with different random seeds.

    Args:
        create_simulation: Factory function to create a fresh simulation
        n_runs: Number of runs
        seeds: Optional list of seeds (one per run)
        progress_callback: Optional callback(current_run, total_runs)
    """
    if seeds is None:
        seeds = list(range(n_runs))

    results = []
    for i, seed in enumerate(seeds):
        sim = create_simulation()
        sim.config.random_seed = seed
        sim.rng = np.random.default_rng(seed)
        results.append(sim.run())
        if progress_callback is not None:
            progress_callback(i + 1, n_runs)
    return results
