"""
Fairplay no-loss prediction markets.

Binary markets where stakers never risk their principal: a small fee on every
stake funds a reward pool paid to the side that turns out correct, and the
outcome is settled by a bonded propose/challenge protocol rather than a
trusted oracle.

Quick Start:
    from fairplay_markets import FairplayPlatform, ManualClock, Outcome, UNIT

    clock = ManualClock()
    platform = FairplayPlatform(clock=clock)
    market_id = platform.create_market("alice", "Will it rain?", "weather", 3600, 2 * UNIT)
    index = platform.place_stake("bob", market_id, Outcome.YES, UNIT)
"""

__version__ = "0.1.0"

from .config import UNIT, DAY, PlatformConfig
from .errors import (
    LedgerError,
    InvalidTiming,
    ProposalPending,
    AlreadyChallenged,
    InvalidOutcome,
    InsufficientValue,
    MarketNotFound,
    StakeNotFound,
    AlreadyResolved,
    NotOwner,
    AlreadyClaimed,
    InsufficientBalance,
    TransferFailed,
    ReentrancyError,
)
from .markets import (
    Outcome,
    MarketPhase,
    MarketCore,
    MarketState,
    Proposal,
    Stake,
    PRECISION,
    compute_units,
)
from .ledger import (
    BalanceLedger,
    ManualClock,
    SystemClock,
    EventLog,
    InMemoryTransfer,
)
from .platform import FairplayPlatform
from .agents import (
    Staker,
    InformedStaker,
    NoiseStaker,
    NoiseStakerType,
)
from .simulation import (
    Simulation,
    SimulationConfig,
    SimulationResult,
    run_batch,
    summarize_batch,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "UNIT",
    "DAY",
    "PlatformConfig",
    # Errors
    "LedgerError",
    "InvalidTiming",
    "ProposalPending",
    "AlreadyChallenged",
    "InvalidOutcome",
    "InsufficientValue",
    "MarketNotFound",
    "StakeNotFound",
    "AlreadyResolved",
    "NotOwner",
    "AlreadyClaimed",
    "InsufficientBalance",
    "TransferFailed",
    "ReentrancyError",
    # Markets
    "Outcome",
    "MarketPhase",
    "MarketCore",
    "MarketState",
    "Proposal",
    "Stake",
    "PRECISION",
    "compute_units",
    # Ledger
    "BalanceLedger",
    "ManualClock",
    "SystemClock",
    "EventLog",
    "InMemoryTransfer",
    # Platform
    "FairplayPlatform",
    # Agents
    "Staker",
    "InformedStaker",
    "NoiseStaker",
    "NoiseStakerType",
    # Simulation
    "Simulation",
    "SimulationConfig",
    "SimulationResult",
    "run_batch",
    "summarize_batch",
]
