"""Failure taxonomy for delegate registration, execution and revocation.

Every failure carries a stable ``reason`` string so that relayers and client
UIs can tell "expired, please re-register" apart from "revoked" or
"not authorized" without parsing messages.
"""
from __future__ import annotations


class DelegationError(Exception):
    """Base class for all delegation failures.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    """

    reason: str = "DelegationError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, str]:
        """Serialize to a plain dictionary."""
        return {"reason": self.reason, "detail": self.message}


class InvalidSignatureError(DelegationError):
    """Raised when a recovered signer does not match the expected principal."""

    reason = "InvalidSignature"

    def __init__(self, expected: str, recovered: str | None = None) -> None:
        if recovered is None:
            detail = f"Signature could not be recovered for {expected}."
        else:
            detail = f"Signature was produced by {recovered}, expected {expected}."
        super().__init__(detail)
        self.expected = expected
        self.recovered = recovered


class DelegateExpiredError(DelegationError):
    """Raised when a delegate key is used at or after its expiry."""

    reason = "DelegateExpired"

    def __init__(self, delegate: str, expiry: int, now: int) -> None:
        super().__init__(
            f"Delegate key {delegate} expired at {expiry} (now {now})."
        )
        self.delegate = delegate
        self.expiry = expiry
        self.now = now


class DelegatorNotOwnerError(DelegationError):
    """Raised when a delegate's owner no longer owns the target account."""

    reason = "DelegatorNotOwner"

    def __init__(self, owner: str, account: str) -> None:
        super().__init__(f"Delegator {owner} is not an owner of account {account}.")
        self.owner = owner
        self.account = account


class UnknownDelegateError(DelegationError, KeyError):
    """Raised when no record exists for a delegate address."""

    reason = "UnknownDelegate"

    def __init__(self, delegate: str) -> None:
        super().__init__(f"Delegate {delegate} is not registered.")
        self.delegate = delegate


class IndexOutOfBoundsError(DelegationError, IndexError):
    """Raised when revoking an index past the end of an owner's list."""

    reason = "IndexOutOfBounds"

    def __init__(self, owner: str, index: int, length: int) -> None:
        super().__init__(
            f"Index {index} is out of bounds for {owner} ({length} delegates)."
        )
        self.owner = owner
        self.index = index
        self.length = length


class InvalidExpiryError(DelegationError, ValueError):
    """Raised when registering a delegate with a non-future expiry."""

    reason = "InvalidExpiry"

    def __init__(self, expiry: int, now: int) -> None:
        super().__init__(f"Expiry {expiry} must be later than the current time {now}.")
        self.expiry = expiry
        self.now = now


class UnauthorizedError(DelegationError, PermissionError):
    """Raised when a caller tries to mutate another principal's delegate list."""

    reason = "Unauthorized"

    def __init__(self, caller: str, owner: str) -> None:
        super().__init__(f"Caller {caller} may not revoke delegates of {owner}.")
        self.caller = caller
        self.owner = owner


class InvalidAddressError(DelegationError, ValueError):
    """Raised when an address is not a well-formed 20-byte hex address."""

    reason = "InvalidAddress"

    def __init__(self, value: object) -> None:
        super().__init__(f"{value!r} is not a valid address.")
        self.value = value


__all__ = [
    "DelegationError",
    "DelegateExpiredError",
    "DelegatorNotOwnerError",
    "IndexOutOfBoundsError",
    "InvalidAddressError",
    "InvalidExpiryError",
    "InvalidSignatureError",
    "UnauthorizedError",
    "UnknownDelegateError",
]
