"""In-memory owner accounts backed by a shared balance ledger.

Used by tests, examples and the relay server to stand in for an on-chain
smart account. Only native-asset transfers are modelled: a call moves
``value`` from the account to ``to`` and ignores ``data``.
"""
from __future__ import annotations

import logging
import threading

from signless.account.interface import ExecutionResult, OwnerAccount
from signless.addresses import normalize_address

logger = logging.getLogger(__name__)


class Ledger:
    """Thread-safe map of address to native-asset balance."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._lock = threading.Lock()

    def balance_of(self, address: str) -> int:
        address = normalize_address(address)
        with self._lock:
            return self._balances.get(address, 0)

    def credit(self, address: str, amount: int) -> None:
        """Add *amount* to *address* (e.g. funding an account)."""
        if amount < 0:
            raise ValueError(f"amount must be non-negative (got {amount}).")
        address = normalize_address(address)
        with self._lock:
            self._balances[address] = self._balances.get(address, 0) + amount

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move *amount* from *sender* to *recipient*.

        Returns False, leaving both balances untouched, if *sender* cannot
        cover the amount.
        """
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        with self._lock:
            available = self._balances.get(sender, 0)
            if amount < 0 or available < amount:
                return False
            self._balances[sender] = available - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
            return True


class InMemoryOwnerAccount(OwnerAccount):
    """Owner account with a mutable owner set and ledger-backed transfers.

    Parameters
    ----------
    address:
        Address of the account.
    owners:
        Initial owner addresses.
    ledger:
        Balance ledger shared with other accounts. A private ledger is
        created if omitted.

    Example
    -------
    ::

        ledger = Ledger()
        account = InMemoryOwnerAccount(safe_address, owners=[alice], ledger=ledger)
        ledger.credit(safe_address, 10 * 10**18)
    """

    def __init__(
        self,
        address: str,
        owners: list[str] | None = None,
        ledger: Ledger | None = None,
    ) -> None:
        self._address = normalize_address(address)
        self._owners: set[str] = {normalize_address(o) for o in owners or []}
        self.ledger = ledger if ledger is not None else Ledger()
        self.calls: list[tuple[str, int, bytes]] = []
        self._lock = threading.Lock()

    @property
    def address(self) -> str:
        return self._address

    # ------------------------------------------------------------------
    # Owner management
    # ------------------------------------------------------------------

    def add_owner(self, owner: str) -> None:
        with self._lock:
            self._owners.add(normalize_address(owner))

    def remove_owner(self, owner: str) -> None:
        with self._lock:
            self._owners.discard(normalize_address(owner))

    def owners(self) -> list[str]:
        """Return the current owners, sorted."""
        with self._lock:
            return sorted(self._owners)

    # ------------------------------------------------------------------
    # OwnerAccount
    # ------------------------------------------------------------------

    def is_owner(self, candidate: str) -> bool:
        with self._lock:
            return normalize_address(candidate) in self._owners

    def execute_from_module(self, to: str, value: int, data: bytes) -> ExecutionResult:
        if not self.ledger.transfer(self._address, to, value):
            logger.debug("Account %s cannot cover transfer of %d to %s", self._address, value, to)
            return ExecutionResult(success=False, return_data=b"insufficient balance")
        with self._lock:
            self.calls.append((normalize_address(to), value, bytes(data)))
        return ExecutionResult(success=True)
