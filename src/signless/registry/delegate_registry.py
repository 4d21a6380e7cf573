"""DelegateRegistry: durable store of delegate records and per-address nonces.

Records are keyed globally by delegate address: one delegate key serves at
most one owner at a time. Each owner additionally has an insertion-ordered
list of its delegates that supports offset/limit pagination and
index-addressed removal. Removal swaps the last entry into the vacated slot,
so list order is only guaranteed between mutations.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass

from signless.addresses import normalize_address
from signless.errors import IndexOutOfBoundsError, InvalidAddressError


@dataclass(frozen=True)
class DelegateRecord:
    """A delegate key registered on behalf of an owner.

    Parameters
    ----------
    owner:
        Checksummed address of the delegating principal.
    delegate:
        Checksummed address of the ephemeral signing key.
    expiry:
        Unix timestamp (seconds) after which the record no longer
        authorizes anything. The record stays stored until revoked.
    """

    owner: str
    delegate: str
    expiry: int

    def is_active(self, now: int) -> bool:
        """Return True while ``now`` is strictly before the expiry."""
        return now < self.expiry

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {
            "owner": self.owner,
            "delegate": self.delegate,
            "expiry": self.expiry,
        }


class DelegateRegistry:
    """Owner-scoped delegate lists, a global delegate index and nonces.

    Thread-safe. All mutations acquire a lock before modifying the
    internal store. No operation walks more than a single owner's page.

    Example
    -------
    ::

        registry = DelegateRegistry()
        registry.insert_or_update(owner, delegate, expiry=1_700_000_000)
        registry.bump_nonce(owner)
        print(registry.list_paginated(owner, 0, 10))
    """

    def __init__(self) -> None:
        self._records: dict[str, DelegateRecord] = {}
        self._lists: dict[str, list[str]] = {}
        self._positions: dict[str, int] = {}
        self._nonces: dict[str, int] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def insert_or_update(self, owner: str, delegate: str, expiry: int) -> DelegateRecord:
        """Register *delegate* for *owner*, or refresh its expiry.

        A delegate already registered for the same owner keeps its list
        position and only has its expiry replaced. A delegate registered for
        a different owner is moved: it leaves the previous owner's list and
        is appended to the new owner's list.

        Parameters
        ----------
        owner:
            The delegating principal.
        delegate:
            The delegate key address.
        expiry:
            Absolute Unix timestamp of expiry.

        Returns
        -------
        DelegateRecord
            The record now stored for *delegate*.
        """
        owner = normalize_address(owner)
        delegate = normalize_address(delegate)
        with self._lock:
            existing = self._records.get(delegate)
            if existing is not None and existing.owner != owner:
                self._remove_at(existing.owner, self._positions[delegate])
                existing = None

            if existing is None:
                entries = self._lists.setdefault(owner, [])
                entries.append(delegate)
                self._positions[delegate] = len(entries) - 1

            record = DelegateRecord(owner=owner, delegate=delegate, expiry=expiry)
            self._records[delegate] = record
            return record

    def get(self, delegate: str) -> DelegateRecord | None:
        """Return the record for *delegate*, or None if it is not registered."""
        delegate = normalize_address(delegate)
        with self._lock:
            return self._records.get(delegate)

    def revoke_at(self, owner: str, index: int) -> DelegateRecord:
        """Remove the delegate at *index* of *owner*'s list.

        The last entry of the list is moved into the vacated slot.

        Parameters
        ----------
        owner:
            Owner whose list is mutated.
        index:
            Zero-based position in the owner's list.

        Returns
        -------
        DelegateRecord
            The record that was removed.

        Raises
        ------
        IndexOutOfBoundsError
            If *index* is negative or not less than the list length.
        """
        owner = normalize_address(owner)
        with self._lock:
            length = len(self._lists.get(owner, ()))
            if index < 0 or index >= length:
                raise IndexOutOfBoundsError(owner, index, length)
            delegate = self._remove_at(owner, index)
            return self._records.pop(delegate)

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def list_paginated(self, owner: str, offset: int, limit: int) -> list[str]:
        """Return up to *limit* delegates of *owner* starting at *offset*.

        An *offset* at or past the end of the list yields an empty list.

        Raises
        ------
        ValueError
            If *offset* or *limit* is negative.
        """
        if offset < 0 or limit < 0:
            raise ValueError(
                f"offset and limit must be non-negative (got {offset}, {limit})."
            )
        owner = normalize_address(owner)
        with self._lock:
            entries = self._lists.get(owner, [])
            return list(entries[offset : offset + limit])

    def count(self, owner: str) -> int:
        """Return the number of delegates currently listed for *owner*."""
        owner = normalize_address(owner)
        with self._lock:
            return len(self._lists.get(owner, ()))

    # ------------------------------------------------------------------
    # Nonces
    # ------------------------------------------------------------------

    def nonce_of(self, address: str) -> int:
        """Return the next unused nonce for *address* (starts at 0)."""
        address = normalize_address(address)
        with self._lock:
            return self._nonces.get(address, 0)

    def bump_nonce(self, address: str) -> int:
        """Consume the current nonce of *address* and return the new value."""
        address = normalize_address(address)
        with self._lock:
            value = self._nonces.get(address, 0) + 1
            self._nonces[address] = value
            return value

    def release_nonce(self, address: str, consumed: int) -> bool:
        """Hand back nonce *consumed* of *address* if nothing was consumed since.

        Returns True when the counter was moved back to *consumed*. If a later
        nonce has already been used the counter is left alone and False is
        returned.
        """
        address = normalize_address(address)
        with self._lock:
            if self._nonces.get(address, 0) != consumed + 1:
                return False
            self._nonces[address] = consumed
            return True

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        """Serialize the full registry state to a plain dictionary."""
        with self._lock:
            return {
                "delegates": {
                    owner: [self._records[d].to_dict() for d in entries]
                    for owner, entries in self._lists.items()
                },
                "nonces": dict(self._nonces),
            }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "DelegateRegistry":
        """Rebuild a registry from the output of :meth:`to_dict`.

        List order is preserved exactly.
        """
        registry = cls()
        delegates = data.get("delegates") or {}
        for owner, entries in delegates.items():  # type: ignore[union-attr]
            for entry in entries:
                registry.insert_or_update(
                    owner=str(owner),
                    delegate=str(entry["delegate"]),
                    expiry=int(entry["expiry"]),
                )
        nonces = data.get("nonces") or {}
        for address, value in nonces.items():  # type: ignore[union-attr]
            registry._nonces[normalize_address(address)] = int(value)
        return registry

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _remove_at(self, owner: str, index: int) -> str:
        """Swap-remove ``owner``'s entry at *index*. Caller holds the lock."""
        entries = self._lists[owner]
        removed = entries[index]
        last = entries.pop()
        if index < len(entries):
            entries[index] = last
            self._positions[last] = index
        del self._positions[removed]
        if not entries:
            del self._lists[owner]
        return removed

    def __len__(self) -> int:
        """Return the number of registered delegates across all owners."""
        with self._lock:
            return len(self._records)

    def __contains__(self, delegate: object) -> bool:
        """Support ``delegate in registry`` membership test."""
        try:
            key = normalize_address(delegate)
        except InvalidAddressError:
            return False
        with self._lock:
            return key in self._records
