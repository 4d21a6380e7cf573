"""Client-side helpers that sign registration and execution claims.

These mirror what a wallet does with ``eth_signTypedData_v4``. Keys are
taken as arguments and never stored.
"""
from __future__ import annotations

from eth_account import Account

from signless.claims.typed_data import (
    Claim,
    ClaimDomain,
    ExecutionClaim,
    RegistrationClaim,
    encode_claim,
)


def sign_claim(private_key: bytes | str, domain: ClaimDomain, claim: Claim) -> bytes:
    """Sign *claim* under *domain* and return the 65-byte signature."""
    signed = Account.sign_message(encode_claim(domain, claim), private_key=private_key)
    return bytes(signed.signature)


def sign_registration(
    private_key: bytes | str,
    domain: ClaimDomain,
    delegate: str,
    nonce: int,
) -> bytes:
    """Produce an owner's ``ClaimPubKey`` signature for *delegate*.

    Parameters
    ----------
    private_key:
        The owner's secp256k1 private key.
    domain:
        Domain of the engine the registration is submitted to.
    delegate:
        Address of the delegate key being registered.
    nonce:
        The owner's current nonce, read from the engine before signing.
    """
    return sign_claim(private_key, domain, RegistrationClaim(delegate=delegate, nonce=nonce))


def sign_execution(
    private_key: bytes | str,
    domain: ClaimDomain,
    account: str,
    to: str,
    value: int,
    data: bytes,
    nonce: int,
) -> bytes:
    """Produce a delegate's ``ExecSafeTx`` signature for one call.

    *nonce* is the delegate's own current nonce.
    """
    claim = ExecutionClaim.for_call(account=account, to=to, value=value, data=data, nonce=nonce)
    return sign_claim(private_key, domain, claim)


__all__ = ["sign_claim", "sign_execution", "sign_registration"]
