"""
Per-account credit ledger.

The only path by which value reaches an account: claims and bond refunds
credit it, and an explicit withdrawal debits it.
"""

import logging
from dataclasses import dataclass, field

from ..errors import InsufficientBalance, InsufficientValue

logger = logging.getLogger(__name__)


@dataclass
class BalanceLedger:
    """
    Mapping of account id to the amount owed to it.
    """
    balances: dict[str, int] = field(default_factory=dict)

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def credit(self, account: str, amount: int) -> int:
        """
        Add amount to an account's balance.

        Returns:
            The new balance
        """
        if amount < 0:
            raise InsufficientValue(f"Cannot credit a negative amount ({amount})")
        new_balance = self.balance_of(account) + amount
        self.balances[account] = new_balance
        logger.debug(f"Credited {amount} to {account} (balance {new_balance})")
        return new_balance

    def debit(self, account: str, amount: int) -> int:
        """
        Remove amount from an account's balance.

        Raises:
            InsufficientValue: if amount is not positive
            InsufficientBalance: if the balance does not cover amount
        """
        if amount <= 0:
            raise InsufficientValue(f"Debit amount must be positive, got {amount}")
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientBalance(
                f"{account} has {balance}, cannot debit {amount}"
            )
        self.balances[account] = balance - amount
        logger.debug(f"Debited {amount} from {account} (balance {balance - amount})")
        return balance - amount

    def total_owed(self) -> int:
        """Sum of all outstanding balances."""
        return sum(self.balances.values())
