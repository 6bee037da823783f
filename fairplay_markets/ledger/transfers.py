"""
Outbound value transfer.

A transfer reports success or failure explicitly. The platform treats a
raised exception the same as a reported failure.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class ValueTransfer(Protocol):
    def send(self, recipient: str, amount: int) -> bool:
        ...


@dataclass
class InMemoryTransfer:
    """
    Transfer primitive that records payouts instead of moving real value.

    Attributes:
        sent: Total sent to each recipient
        rejected: Recipients whose transfers fail
        on_send: Hook called before each transfer (e.g. to model a recipient
            that calls back into the platform)
    """
    sent: dict[str, int] = field(default_factory=dict)
    rejected: set[str] = field(default_factory=set)
    on_send: Callable[[str, int], None] | None = None
    history: list[tuple[str, int]] = field(default_factory=list)

    def send(self, recipient: str, amount: int) -> bool:
        if self.on_send is not None:
            self.on_send(recipient, amount)
        if recipient in self.rejected:
            logger.warning(f"Transfer of {amount} to {recipient} rejected")
            return False
        self.sent[recipient] = self.sent.get(recipient, 0) + amount
        self.history.append((recipient, amount))
        return True

    def total_sent(self) -> int:
        return sum(self.sent.values())
