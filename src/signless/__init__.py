"""signless: delegate transaction signing to short-lived keys.

An owner signs a typed ``ClaimPubKey`` to register an ephemeral delegate key
with an expiry. Any party can relay that claim. Later the delegate signs
``ExecSafeTx`` claims that the engine verifies before forwarding the call to
the owner's account. Owners revoke delegates by index at any time.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Quick start
-----------
::

    from signless import AuthorizationEngine, ClaimDomain, sign_registration

    engine = AuthorizationEngine(ClaimDomain(chain_id=100, verifying_contract=module))
    signature = sign_registration(owner_key, engine.domain, delegate, engine.nonce_of(owner))
    engine.register(owner, delegate, expiry, signature)
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from signless.errors import (
    DelegateExpiredError,
    DelegationError,
    DelegatorNotOwnerError,
    IndexOutOfBoundsError,
    InvalidAddressError,
    InvalidExpiryError,
    InvalidSignatureError,
    UnauthorizedError,
    UnknownDelegateError,
)

# ------------------------------------------------------------------
# Registry and claims
# ------------------------------------------------------------------
from signless.registry.delegate_registry import DelegateRecord, DelegateRegistry
from signless.claims.typed_data import (
    ClaimDomain,
    ExecutionClaim,
    RegistrationClaim,
    claim_digest,
    encode_claim,
    recover_signer,
)
from signless.claims.signing import sign_execution, sign_registration

# ------------------------------------------------------------------
# Accounts, engine and ambient pieces
# ------------------------------------------------------------------
from signless.account import ExecutionResult, InMemoryOwnerAccount, Ledger, OwnerAccount
from signless.audit import AuditEvent, DelegationAuditLogger
from signless.clock import ManualClock, SystemClock
from signless.config import NetworkConfig, load_network
from signless.engine.authorization import AuthorizationEngine

__all__ = [
    "__version__",
    # errors
    "DelegateExpiredError",
    "DelegationError",
    "DelegatorNotOwnerError",
    "IndexOutOfBoundsError",
    "InvalidAddressError",
    "InvalidExpiryError",
    "InvalidSignatureError",
    "UnauthorizedError",
    "UnknownDelegateError",
    # registry and claims
    "ClaimDomain",
    "DelegateRecord",
    "DelegateRegistry",
    "ExecutionClaim",
    "RegistrationClaim",
    "claim_digest",
    "encode_claim",
    "recover_signer",
    "sign_execution",
    "sign_registration",
    # accounts and engine
    "AuditEvent",
    "AuthorizationEngine",
    "DelegationAuditLogger",
    "ExecutionResult",
    "InMemoryOwnerAccount",
    "Ledger",
    "ManualClock",
    "NetworkConfig",
    "OwnerAccount",
    "SystemClock",
    "load_network",
]
