"""Owner-account capability and an in-memory implementation."""
from __future__ import annotations

from signless.account.interface import ExecutionResult, OwnerAccount
from signless.account.memory import InMemoryOwnerAccount, Ledger

__all__ = [
    "ExecutionResult",
    "InMemoryOwnerAccount",
    "Ledger",
    "OwnerAccount",
]
