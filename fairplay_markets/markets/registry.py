"""
Market registry.

Owns the core and state of every market, indexed by a monotonically
increasing integer id, and answers lifecycle queries against a clock reading.
"""

from dataclasses import dataclass, field

from ..errors import MarketNotFound
from .contracts import MarketCore, MarketPhase, MarketState, Proposal


@dataclass
class MarketRegistry:
    """
    Keyed storage for market cores and states.

    Ids are assigned in creation order starting at 0 and never reused.
    """
    cores: list[MarketCore] = field(default_factory=list)
    states: list[MarketState] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.cores)

    def add(self, core: MarketCore) -> int:
        """Register a market and return its id."""
        self.cores.append(core)
        self.states.append(MarketState())
        return len(self.cores) - 1

    def require(self, market_id: int) -> tuple[MarketCore, MarketState]:
        """
        Fetch a market's core and state.

        Raises:
            MarketNotFound: if market_id >= count
        """
        if not isinstance(market_id, int) or market_id < 0 or market_id >= self.count:
            raise MarketNotFound(f"Market {market_id} does not exist")
        return self.cores[market_id], self.states[market_id]

    def core(self, market_id: int) -> MarketCore:
        return self.require(market_id)[0]

    def state(self, market_id: int) -> MarketState:
        return self.require(market_id)[1]

    def is_open(self, market_id: int, now: int) -> bool:
        """Check if the market still accepts stakes."""
        return now < self.core(market_id).end_time

    def phase(self, market_id: int, now: int, proposal: Proposal | None = None) -> MarketPhase:
        """
        Derive the lifecycle phase of a market.

        Args:
            market_id: Market to inspect
            now: Current clock reading
            proposal: The market's current proposal, if any
        """
        core, state = self.require(market_id)
        if state.resolved:
            return MarketPhase.RESOLVED
        if proposal is not None:
            if proposal.resolved:
                return MarketPhase.SETTLED
            return MarketPhase.CHALLENGED if state.challenged else MarketPhase.PROPOSAL_PENDING
        if now < core.end_time:
            return MarketPhase.OPEN
        return MarketPhase.ENDED

    def open_market_ids(self, now: int) -> list[int]:
        return [i for i, core in enumerate(self.cores) if now < core.end_time]

    def ids_by_category(self, category: str) -> list[int]:
        wanted = category.strip().lower()
        return [i for i, core in enumerate(self.cores) if core.category.strip().lower() == wanted]
