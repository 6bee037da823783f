"""
Error kinds raised by the ledger.

Every failure is synchronous and leaves persisted state exactly as it was
before the call. Callers re-issue an operation after fixing the violated
precondition; nothing is retried internally.
"""


class LedgerError(Exception):
    """Base class for all ledger failures."""


class InvalidTiming(LedgerError):
    """Market not ended, already ended, liveness not expired, or window not open."""


class ProposalPending(InvalidTiming):
    """A proposal is already live for this market."""


class AlreadyChallenged(InvalidTiming):
    """The live proposal already has a challenger."""


class InvalidOutcome(LedgerError, ValueError):
    """Outcome is not YES or NO."""


class InsufficientValue(LedgerError, ValueError):
    """Attached value is below the required minimum."""


class MarketNotFound(LedgerError):
    """No market with this id."""


class StakeNotFound(LedgerError):
    """No stake at this index for the market side."""


class AlreadyResolved(LedgerError):
    """The market or proposal has already been settled."""


class NotOwner(LedgerError):
    """Caller is not the recorded owner, or not the privileged resolver."""


class AlreadyClaimed(LedgerError):
    """The stake was already claimed or restaked."""


class InsufficientBalance(LedgerError):
    """Withdrawal exceeds the credited balance."""


class TransferFailed(LedgerError):
    """Outbound value movement failed; the associated debit was restored."""


class ReentrancyError(LedgerError):
    """A guarded operation was entered while another was still running."""
