"""AuthorizationEngine: register, execute as, and revoke delegate keys.

The engine owns no state of its own beyond the registry it is given. It
verifies typed-claim signatures, enforces expiry, revocation and ownership,
and forwards authorized calls to an :class:`~signless.account.OwnerAccount`.

Nonces
------
A single counter per address is kept in the registry. Registering a
delegate consumes the *owner's* counter; executing a call consumes the
*delegate's* counter. Counters only stay moved when the operation
succeeds.

Atomicity
---------
Every mutating operation runs under one engine lock and checks all of its
preconditions before touching the registry, so a failed call leaves no
trace. Reads take the same lock and never observe a half-applied change.
"""
from __future__ import annotations

import logging
import threading
from typing import Protocol

from signless.account.interface import ExecutionResult, OwnerAccount
from signless.addresses import is_zero_address, normalize_address
from signless.audit import DelegationAuditLogger
from signless.claims.typed_data import (
    MAX_UINT256,
    ClaimDomain,
    ExecutionClaim,
    RegistrationClaim,
    Signature,
    encode_claim,
    recover_signer,
)
from signless.clock import SystemClock
from signless.config import NetworkConfig
from signless.errors import (
    DelegateExpiredError,
    DelegationError,
    DelegatorNotOwnerError,
    InvalidAddressError,
    InvalidExpiryError,
    InvalidSignatureError,
    UnauthorizedError,
    UnknownDelegateError,
)
from signless.registry.delegate_registry import DelegateRecord, DelegateRegistry

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> int: ...


class AuthorizationEngine:
    """Verifies delegation claims and forwards authorized calls.

    Parameters
    ----------
    domain:
        Claim domain; its ``verifying_contract`` is this engine's address.
    registry:
        Backing store. A fresh :class:`DelegateRegistry` is created if omitted.
    clock:
        Source of chain time. Defaults to :class:`SystemClock`.
    audit_logger:
        Optional sink for audit events.

    Example
    -------
    ::

        engine = AuthorizationEngine(ClaimDomain(chain_id=100, verifying_contract=module))
        nonce = engine.nonce_of(owner)
        sig = sign_registration(owner_key, engine.domain, delegate, nonce)
        engine.register(owner, delegate, expiry=now + 3600, signature=sig)
    """

    def __init__(
        self,
        domain: ClaimDomain,
        registry: DelegateRegistry | None = None,
        clock: Clock | None = None,
        audit_logger: DelegationAuditLogger | None = None,
    ) -> None:
        self._domain = domain
        self._registry = registry if registry is not None else DelegateRegistry()
        self._clock = clock if clock is not None else SystemClock()
        self._audit = audit_logger
        self._lock = threading.RLock()

    @classmethod
    def from_network(cls, network: NetworkConfig, **kwargs: object) -> "AuthorizationEngine":
        """Build an engine bound to the domain of *network*."""
        return cls(network.domain(), **kwargs)  # type: ignore[arg-type]

    @property
    def address(self) -> str:
        return self._domain.verifying_contract

    @property
    def domain(self) -> ClaimDomain:
        return self._domain

    @property
    def registry(self) -> DelegateRegistry:
        return self._registry

    def now(self) -> int:
        """Current chain time as seen by the engine."""
        return self._clock.now()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def register(
        self, owner: str, delegate: str, expiry: int, signature: Signature
    ) -> DelegateRecord:
        """Register *delegate* for *owner* on the strength of the owner's signature.

        The signature must be a ``ClaimPubKey`` over *delegate* and the
        owner's current nonce. It may be submitted by anyone.

        Parameters
        ----------
        owner:
            The delegating principal; must be the recovered signer.
        delegate:
            The delegate key address. Must not be the zero address.
        expiry:
            Absolute Unix timestamp; must be later than the current time.
        signature:
            65-byte owner signature, as bytes or hex.

        Returns
        -------
        DelegateRecord
            The stored record.

        Raises
        ------
        InvalidAddressError
            If an address is malformed or *delegate* is the zero address.
        InvalidExpiryError
            If *expiry* is not in the future.
        InvalidSignatureError
            If the signature was not produced by *owner* over the current nonce.
        """
        with self._lock:
            try:
                owner = normalize_address(owner)
                delegate = normalize_address(delegate)
                if is_zero_address(delegate):
                    raise InvalidAddressError(delegate)

                now = self._clock.now()
                if expiry <= now:
                    raise InvalidExpiryError(expiry, now)

                nonce = self._registry.nonce_of(owner)
                claim = RegistrationClaim(delegate=delegate, nonce=nonce)
                recovered = recover_signer(encode_claim(self._domain, claim), signature)
                if recovered != owner:
                    raise InvalidSignatureError(owner, recovered)
            except DelegationError as exc:
                raise self._denied(exc, "register", subject=str(delegate), owner=str(owner))

            record = self._registry.insert_or_update(owner, delegate, expiry)
            self._registry.bump_nonce(owner)

        logger.info(
            "Registered delegate %s for %s (expiry=%d, nonce=%d)",
            delegate, owner, expiry, nonce,
        )
        if self._audit is not None:
            self._audit.log_registration(owner, delegate, expiry, nonce)
        return record

    def execute(
        self,
        delegate: str,
        account: OwnerAccount,
        to: str,
        value: int,
        data: bytes,
        signature: Signature,
    ) -> ExecutionResult:
        """Forward a call to *account* on the authority of *delegate*.

        Checks run in order and the first failure is raised: the delegate
        must be registered, the signature must be an ``ExecSafeTx`` claim
        by the delegate over the call and the delegate's current nonce, the
        record must not have expired, and the record's owner must still own
        *account*.

        The account's result is returned unchanged. The delegate's nonce is
        consumed before the call is forwarded, so the same signature cannot be
        replayed from inside the call. It is handed back if the account
        reports failure or raises, unless a later nonce was used meanwhile.

        Raises
        ------
        UnknownDelegateError
            If no record exists for *delegate*.
        InvalidSignatureError
            If the signature was not produced by *delegate* over this call.
        DelegateExpiredError
            If the current time is at or past the record's expiry.
        DelegatorNotOwnerError
            If the record's owner is not an owner of *account*.
        ValueError
            If *value* does not fit in a uint256.
        """
        if value < 0 or value > MAX_UINT256:
            raise ValueError(f"value must be between 0 and 2**256 - 1 (got {value}).")

        with self._lock:
            try:
                delegate = normalize_address(delegate)
                to = normalize_address(to)
                account_address = normalize_address(account.address)

                record = self._registry.get(delegate)
                if record is None:
                    raise UnknownDelegateError(delegate)

                nonce = self._registry.nonce_of(delegate)
                claim = ExecutionClaim.for_call(
                    account=account_address, to=to, value=value, data=data, nonce=nonce
                )
                recovered = recover_signer(encode_claim(self._domain, claim), signature)
                if recovered != delegate:
                    raise InvalidSignatureError(delegate, recovered)

                now = self._clock.now()
                if not record.is_active(now):
                    raise DelegateExpiredError(delegate, record.expiry, now)

                if not account.is_owner(record.owner):
                    raise DelegatorNotOwnerError(record.owner, account_address)
            except DelegationError as exc:
                raise self._denied(
                    exc, "execute", subject=str(delegate), account=str(account.address)
                )

            # Consumed before forwarding so a nested call cannot reuse it.
            self._registry.bump_nonce(delegate)
            try:
                result = account.execute_from_module(to, value, data)
            except Exception:
                self._registry.release_nonce(delegate, nonce)
                raise
            if not result.success:
                self._registry.release_nonce(delegate, nonce)

        logger.info(
            "Delegate %s executed call on %s to %s (value=%d, success=%s)",
            delegate, account_address, to, value, result.success,
        )
        if self._audit is not None:
            self._audit.log_execution(delegate, account_address, to, value, result.success)
        return result

    def revoke(self, caller: str, index: int, owner: str | None = None) -> DelegateRecord:
        """Remove the delegate at *index* of the caller's own list.

        Parameters
        ----------
        caller:
            Authenticated identity of the party making the call.
        index:
            Position in the caller's delegate list.
        owner:
            Optional explicit list owner. It must equal *caller*.

        Returns
        -------
        DelegateRecord
            The revoked record. The delegate is immediately unknown to
            :meth:`execute`.

        Raises
        ------
        UnauthorizedError
            If *owner* is given and differs from *caller*.
        IndexOutOfBoundsError
            If *index* is not a valid position in the caller's list.
        """
        with self._lock:
            try:
                caller = normalize_address(caller)
                if owner is not None and normalize_address(owner) != caller:
                    raise UnauthorizedError(caller, normalize_address(owner))
                record = self._registry.revoke_at(caller, index)
            except DelegationError as exc:
                raise self._denied(exc, "revoke", subject=str(caller), index=index)

        logger.info("Revoked delegate %s of %s at index %d", record.delegate, caller, index)
        if self._audit is not None:
            self._audit.log_revocation(caller, record.delegate, index)
        return record

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def list_delegates(self, owner: str, offset: int, limit: int) -> list[str]:
        """Return a page of *owner*'s delegate addresses."""
        logger.debug("Listing delegates of %s (offset=%d, limit=%d)", owner, offset, limit)
        with self._lock:
            return self._registry.list_paginated(owner, offset, limit)

    def delegate_count(self, owner: str) -> int:
        with self._lock:
            return self._registry.count(owner)

    def nonce_of(self, address: str) -> int:
        """Return the next nonce *address* must sign over."""
        with self._lock:
            return self._registry.nonce_of(address)

    def delegate_info(self, delegate: str) -> DelegateRecord | None:
        """Return the record for *delegate*, or None if it is unknown."""
        with self._lock:
            record = self._registry.get(delegate)
        if record is None:
            logger.debug("No record for delegate %s", delegate)
        return record

    def is_valid_delegate(self, owner: str, delegate: str) -> bool:
        """Return True if *delegate* is registered to *owner* and unexpired."""
        owner = normalize_address(owner)
        with self._lock:
            record = self._registry.get(delegate)
            return (
                record is not None
                and record.owner == owner
                and record.is_active(self._clock.now())
            )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _denied(
        self, exc: DelegationError, operation: str, subject: str, **context: object
    ) -> DelegationError:
        logger.warning("%s denied for %s: %s (%s)", operation, subject, exc.reason, exc)
        if self._audit is not None:
            self._audit.log_denial(subject, exc.reason, operation, **context)
        return exc


__all__ = ["AuthorizationEngine", "Clock"]
