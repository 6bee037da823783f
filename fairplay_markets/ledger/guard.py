"""
Non-reentrancy guard for state-mutating entry points.

One guard serializes every mutating operation on a platform. Threads queue
on the lock; a nested entry from the thread that already holds it (for
example a transfer recipient calling back in) is refused with
ReentrancyError instead of deadlocking.
"""

import threading
from contextlib import contextmanager
from typing import Iterator

from ..errors import ReentrancyError


class ReentrancyGuard:

    def __init__(self):
        self._lock = threading.Lock()
        self._holder: int | None = None
        self._operation: str | None = None

    @property
    def locked(self) -> bool:
        return self._holder is not None

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        if self._holder == threading.get_ident():
            raise ReentrancyError(
                f"{operation} called while {self._operation} is in progress"
            )
        with self._lock:
            self._holder = threading.get_ident()
            self._operation = operation
            try:
                yield
            finally:
                self._holder = None
                self._operation = None
