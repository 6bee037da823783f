"""
Bonded propose / challenge / settle protocol.

The outcome of an ended market is not reported by a trusted oracle. Anyone
may propose it by posting a bond; during the liveness window anyone may
challenge by posting a counter-bond. Lifecycle:

    Open -> Ended -> ProposalPending -> {Unchallenged | Challenged} -> Settled

- Unchallenged proposals are finalized by anyone once liveness expires; the
  proposer's bond is returned.
- Challenged proposals are resolved by the privileged resolver. A correct
  proposal earns the proposer both bonds; an incorrect one returns the
  challenger's bond and forfeits the proposer's bond into the reward pool.

Settling a proposal fixes the outcome the market will take. Marking the
market resolved is left to the reward distributor.
"""

import logging
from dataclasses import dataclass, field

from ..config import PlatformConfig
from ..errors import (
    AlreadyChallenged,
    AlreadyResolved,
    InsufficientValue,
    InvalidTiming,
    NotOwner,
    ProposalPending,
)
from ..ledger.balances import BalanceLedger
from ..markets.contracts import Outcome, Proposal
from ..markets.registry import MarketRegistry

logger = logging.getLogger(__name__)


@dataclass
class DisputeResolver:
    """
    Holds at most one proposal per market and drives it to settlement.

    A second proposal while one is live is rejected with ProposalPending;
    once a proposal has settled, further proposals raise AlreadyResolved.
    """
    registry: MarketRegistry
    balances: BalanceLedger
    config: PlatformConfig
    proposals: dict[int, Proposal] = field(default_factory=dict)

    def get(self, market_id: int) -> Proposal | None:
        self.registry.require(market_id)
        return self.proposals.get(market_id)

    def _require_live(self, market_id: int) -> Proposal:
        proposal = self.get(market_id)
        if proposal is None:
            raise InvalidTiming(f"Market {market_id} has no proposal")
        if proposal.resolved:
            raise AlreadyResolved(f"Proposal for market {market_id} already settled")
        return proposal

    def propose(
        self,
        market_id: int,
        proposer: str,
        outcome: Outcome,
        bond: int,
        now: int
    ) -> Proposal:
        """
        Propose the outcome of an ended market.

        Raises:
            AlreadyResolved: market resolved, or a proposal already settled
            InvalidTiming: market has not ended
            ProposalPending: a proposal is already live
            InsufficientValue: bond below min_proposal_bond
        """
        core, state = self.registry.require(market_id)
        if state.resolved:
            raise AlreadyResolved(f"Market {market_id} is already resolved")
        if now < core.end_time:
            raise InvalidTiming(f"Market {market_id} has not ended")

        existing = self.proposals.get(market_id)
        if existing is not None:
            if existing.is_live():
                raise ProposalPending(f"Market {market_id} already has a live proposal")
            raise AlreadyResolved(f"Proposal for market {market_id} already settled")

        if bond < self.config.min_proposal_bond:
            raise InsufficientValue(
                f"Proposal bond {bond} below minimum {self.config.min_proposal_bond}"
            )

        proposal = Proposal(
            proposed_outcome=outcome,
            proposer=proposer,
            bond=bond,
            liveness_deadline=now + self.config.liveness_period,
        )
        self.proposals[market_id] = proposal
        logger.info(
            f"Market {market_id}: {proposer} proposed {outcome.name} "
            f"(bond {bond}, live until {proposal.liveness_deadline})"
        )
        return proposal

    def challenge(self, market_id: int, challenger: str, bond: int, now: int) -> Proposal:
        """
        Challenge the live proposal before its liveness deadline.

        Raises:
            InvalidTiming: no proposal, or liveness has expired
            AlreadyResolved: proposal already settled
            AlreadyChallenged: proposal already has a challenger
            InsufficientValue: bond below min_challenge_bond
        """
        proposal = self._require_live(market_id)
        state = self.registry.state(market_id)
        if now >= proposal.liveness_deadline:
            raise InvalidTiming(f"Liveness window for market {market_id} has expired")
        if state.challenged:
            raise AlreadyChallenged(f"Proposal for market {market_id} is already challenged")
        if bond < self.config.min_challenge_bond:
            raise InsufficientValue(
                f"Challenge bond {bond} below minimum {self.config.min_challenge_bond}"
            )

        state.challenged = True
        state.challenger = challenger
        state.challenge_stake += bond
        logger.info(f"Market {market_id}: {challenger} challenged the proposal (bond {bond})")
        return proposal

    def finalize(self, market_id: int, now: int) -> Outcome:
        """
        Settle an unchallenged proposal after liveness expires.

        The proposed outcome stands and the proposer's bond is credited back.

        Raises:
            InvalidTiming: no proposal, or liveness not yet expired
            AlreadyResolved: proposal already settled
            AlreadyChallenged: proposal was challenged; only the resolver can settle it
        """
        proposal = self._require_live(market_id)
        state = self.registry.state(market_id)
        if now < proposal.liveness_deadline:
            raise InvalidTiming(f"Liveness window for market {market_id} has not expired")
        if state.challenged:
            raise AlreadyChallenged(
                f"Proposal for market {market_id} was challenged and needs the resolver"
            )

        proposal.resolved = True
        proposal.settled_outcome = proposal.proposed_outcome
        self.balances.credit(proposal.proposer, proposal.bond)
        logger.info(f"Market {market_id}: finalized as {proposal.settled_outcome.name}")
        return proposal.settled_outcome

    def resolve(self, market_id: int, caller: str, is_proposal_correct: bool) -> Outcome:
        """
        Settle a proposal by the privileged resolver's judgement.

        Correct: the proposed outcome stands; the proposer recovers their bond
        plus the challenge stake. Incorrect: the opposite outcome stands; the
        challenger recovers their bond and the proposer's bond goes to the
        reward pool.

        Raises:
            NotOwner: caller is not the configured resolver
            InvalidTiming: no proposal
            AlreadyResolved: proposal already settled
        """
        if caller != self.config.owner:
            raise NotOwner(f"{caller} is not the resolver")
        proposal = self._require_live(market_id)
        state = self.registry.state(market_id)

        proposal.resolved = True
        if is_proposal_correct:
            proposal.settled_outcome = proposal.proposed_outcome
            self.balances.credit(proposal.proposer, proposal.bond + state.challenge_stake)
        else:
            proposal.settled_outcome = proposal.proposed_outcome.opposite
            if state.challenger is not None:
                self.balances.credit(state.challenger, state.challenge_stake)
            state.reward_pool += proposal.bond

        logger.info(
            f"Market {market_id}: resolver judged proposal "
            f"{'correct' if is_proposal_correct else 'incorrect'}, "
            f"outcome {proposal.settled_outcome.name}"
        )
        return proposal.settled_outcome
