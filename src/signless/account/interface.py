"""OwnerAccount: the capability an authorized call is forwarded to.

The engine only ever asks an account two things: whether an address is one
of its owners, and to execute a call on its behalf. Account internals
(quorum, custody, module management) stay behind this interface.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of :meth:`OwnerAccount.execute_from_module`.

    Parameters
    ----------
    success:
        Whether the account carried out the call.
    return_data:
        Raw bytes returned by the call (or a revert payload on failure).
    """

    success: bool
    return_data: bytes = b""

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {"success": self.success, "return_data": "0x" + self.return_data.hex()}


class OwnerAccount(ABC):
    """Abstract owner account that delegated calls execute against."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed address of the account."""

    @abstractmethod
    def is_owner(self, candidate: str) -> bool:
        """Return True if *candidate* is currently an owner of this account.

        Parameters
        ----------
        candidate:
            Checksummed address to test.
        """

    @abstractmethod
    def execute_from_module(self, to: str, value: int, data: bytes) -> ExecutionResult:
        """Execute a call on behalf of the account.

        Parameters
        ----------
        to:
            Call target.
        value:
            Amount of the native asset to send, in the smallest unit.
        data:
            Call payload.

        Returns
        -------
        ExecutionResult
            The account's own report of the call outcome.
        """
