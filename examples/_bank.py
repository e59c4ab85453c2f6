"""A small balance-tracking domain used by the runnable examples."""

from __future__ import annotations

import typing as t


class Log(t.Protocol):
    """Audit log written to by :class:`BankAccount`."""

    def write(self, message: str) -> bool: ...


class BankAccount:
    """Account whose deposits only count once the audit log accepted them."""

    def __init__(self, log: Log, balance: int = 0) -> None:
        self.log = log
        self.balance = balance

    def deposit(self, amount: int) -> None:
        """Add *amount* when the log records the deposit."""
        if amount <= 0:
            msg = "Deposit amount must be positive"
            raise ValueError(msg)
        if self.log.write(f"User has deposited {amount}"):
            self.balance += amount

    def withdraw(self, amount: int) -> bool:
        """Take *amount* out if the balance covers it."""
        if self.balance < amount:
            return False
        self.balance -= amount
        self.log.write(f"User has withdrawn {amount}")
        return True
