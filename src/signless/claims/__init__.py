"""Domain-separated typed claims, signer recovery and signing helpers.

Quick start
-----------
::

    from signless.claims import ClaimDomain, RegistrationClaim, encode_claim, recover_signer
    from signless.claims import sign_registration

    domain = ClaimDomain(chain_id=100, verifying_contract=module_address)
    signature = sign_registration(owner_key, domain, delegate, nonce=0)
    signable = encode_claim(domain, RegistrationClaim(delegate=delegate, nonce=0))
    assert recover_signer(signable, signature) == owner
"""
from __future__ import annotations

from signless.claims.signing import sign_claim, sign_execution, sign_registration
from signless.claims.typed_data import (
    DOMAIN_NAME,
    DOMAIN_VERSION,
    MAX_UINT256,
    Claim,
    ClaimDomain,
    ExecutionClaim,
    RegistrationClaim,
    Signature,
    claim_digest,
    encode_claim,
    recover_signer,
    signature_bytes,
    typed_data,
)

__all__ = [
    "DOMAIN_NAME",
    "DOMAIN_VERSION",
    "MAX_UINT256",
    "Claim",
    "ClaimDomain",
    "ExecutionClaim",
    "RegistrationClaim",
    "Signature",
    "claim_digest",
    "encode_claim",
    "recover_signer",
    "sign_claim",
    "sign_execution",
    "sign_registration",
    "signature_bytes",
    "typed_data",
]
