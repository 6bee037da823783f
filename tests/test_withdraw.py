"""Tests for withdrawals, transfer failure, and reentrancy."""

import threading

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fairplay_markets.config import DAY, UNIT
from fairplay_markets.errors import (
    InsufficientBalance,
    InsufficientValue,
    ReentrancyError,
    TransferFailed,
)
from fairplay_markets.ledger.guard import ReentrancyGuard
from fairplay_markets.markets.contracts import Outcome

BOND = UNIT // 10


@pytest.fixture
def funded(platform, clock, market):
    """Settle the market uncontested so the proposer's bond is credited back."""
    clock.set(platform.get_core(market).end_time)
    platform.propose_outcome("proposer", market, Outcome.YES, BOND)
    clock.advance(DAY)
    platform.finalize_proposal("proposer", market)
    return "proposer"


class TestWithdraw:
    """Test paying out credited balances."""

    def test_withdraw(self, platform, transfer, funded):
        remaining = platform.withdraw(funded, BOND // 4)

        assert remaining == BOND - BOND // 4
        assert platform.balance_of(funded) == remaining
        assert transfer.sent[funded] == BOND // 4
        assert platform.events.named("Withdrawal")[-1].fields["amount"] == BOND // 4

    def test_withdraw_everything(self, platform, transfer, funded):
        assert platform.withdraw(funded, BOND) == 0
        assert transfer.total_sent() == BOND

    def test_insufficient_balance(self, platform, transfer, funded):
        with pytest.raises(InsufficientBalance):
            platform.withdraw(funded, BOND + 1)
        assert platform.balance_of(funded) == BOND
        assert transfer.history == []

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount(self, platform, funded, amount):
        with pytest.raises(InsufficientValue):
            platform.withdraw(funded, amount)

    def test_rejected_transfer_rolls_back(self, platform, transfer, funded):
        transfer.rejected.add(funded)

        with pytest.raises(TransferFailed):
            platform.withdraw(funded, BOND)
        assert platform.balance_of(funded) == BOND
        assert platform.events.named("Withdrawal") == []

    def test_raising_transfer_rolls_back(self, platform, transfer, funded):
        def explode(recipient, amount):
            raise ConnectionError("recipient unreachable")

        transfer.on_send = explode
        with pytest.raises(TransferFailed):
            platform.withdraw(funded, BOND)
        assert platform.balance_of(funded) == BOND

    def test_recipient_cannot_reenter(self, platform, transfer, funded):
        attempts = []

        def reenter(recipient, amount):
            try:
                platform.withdraw(recipient, amount)
            except ReentrancyError as e:
                attempts.append(e)

        transfer.on_send = reenter
        platform.withdraw(funded, BOND // 2)

        assert len(attempts) == 1
        assert platform.balance_of(funded) == BOND - BOND // 2
        assert transfer.sent[funded] == BOND // 2

    def test_reentry_into_other_operation(self, platform, transfer, funded, market):
        def reenter(recipient, amount):
            platform.place_stake(recipient, market, Outcome.YES, amount)

        transfer.on_send = reenter
        with pytest.raises(TransferFailed):
            platform.withdraw(funded, BOND)
        assert platform.balance_of(funded) == BOND
        assert not platform.guard.locked


class TestReentrancyGuard:
    """Test the guard on its own."""

    def test_nested_entry_refused(self):
        guard = ReentrancyGuard()
        with guard.hold("outer"):
            assert guard.locked
            with pytest.raises(ReentrancyError):
                with guard.hold("inner"):
                    pass
        assert not guard.locked

    def test_released_after_error(self):
        guard = ReentrancyGuard()
        with pytest.raises(RuntimeError):
            with guard.hold("failing"):
                raise RuntimeError("boom")
        with guard.hold("next"):
            pass

    def test_other_threads_wait(self):
        guard = ReentrancyGuard()
        order = []
        entered = threading.Event()

        def worker():
            with guard.hold("worker"):
                order.append("worker")

        with guard.hold("main"):
            thread = threading.Thread(target=worker)
            thread.start()
            entered.wait(0.05)
            order.append("main")
        thread.join(timeout=5)

        assert order == ["main", "worker"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
