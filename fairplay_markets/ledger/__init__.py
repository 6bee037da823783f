"""Balances and the collaborators every operation runs against."""

from .balances import BalanceLedger
from .clock import Clock, SystemClock, ManualClock
from .events import Event, EventLog
from .guard import ReentrancyGuard
from .transfers import ValueTransfer, InMemoryTransfer

__all__ = [
    "BalanceLedger",
    "Clock",
    "SystemClock",
    "ManualClock",
    "Event",
    "EventLog",
    "ReentrancyGuard",
    "ValueTransfer",
    "InMemoryTransfer",
]
