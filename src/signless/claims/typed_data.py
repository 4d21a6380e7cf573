"""Typed, domain-separated claims and signer recovery (EIP-712).

Two claim kinds exist:

``ClaimPubKey(address delegate, uint256 nonce)``
    Signed by an owner to register a delegate key.
``ExecSafeTx(address safe, address to, uint256 value, bytes32 dataHash, uint256 nonce)``
    Signed by a delegate to authorize a call on an owner account.

Both are hashed under a domain of ``(name, version, chainId,
verifyingContract)`` so a signature is bound to one deployment on one
network. Everything in this module is pure: no storage, no clock.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import keccak, to_bytes

from signless.addresses import normalize_address

DOMAIN_NAME: str = "SignlessSafeModule"
DOMAIN_VERSION: str = "1.0.0"

EIP712_DOMAIN_FIELDS: list[dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

Signature = Union[bytes, str]

MAX_UINT256: int = 2**256 - 1


@dataclass(frozen=True)
class ClaimDomain:
    """EIP-712 domain that every claim is hashed under.

    Parameters
    ----------
    chain_id:
        Network identifier the engine is deployed on.
    verifying_contract:
        Address of the authorization engine itself.
    name:
        Protocol name. Defaults to ``"SignlessSafeModule"``.
    version:
        Protocol version. Defaults to ``"1.0.0"``.
    """

    chain_id: int
    verifying_contract: str
    name: str = DOMAIN_NAME
    version: str = DOMAIN_VERSION

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "verifying_contract", normalize_address(self.verifying_contract)
        )

    def to_dict(self) -> dict[str, object]:
        """Return the domain in EIP-712 JSON form."""
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }

    def separator(self) -> bytes:
        """Return the 32-byte domain separator."""
        sample = RegistrationClaim(delegate=self.verifying_contract, nonce=0)
        return bytes(encode_claim(self, sample).header)


@dataclass(frozen=True)
class RegistrationClaim:
    """``ClaimPubKey``: an owner's consent to register *delegate*."""

    primary_type: ClassVar[str] = "ClaimPubKey"
    type_fields: ClassVar[list[dict[str, str]]] = [
        {"name": "delegate", "type": "address"},
        {"name": "nonce", "type": "uint256"},
    ]

    delegate: str
    nonce: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "delegate", normalize_address(self.delegate))

    def message(self) -> dict[str, object]:
        return {"delegate": self.delegate, "nonce": self.nonce}


@dataclass(frozen=True)
class ExecutionClaim:
    """``ExecSafeTx``: a delegate's authorization of one call on *account*."""

    primary_type: ClassVar[str] = "ExecSafeTx"
    type_fields: ClassVar[list[dict[str, str]]] = [
        {"name": "safe", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "dataHash", "type": "bytes32"},
        {"name": "nonce", "type": "uint256"},
    ]

    account: str
    to: str
    value: int
    data_hash: bytes
    nonce: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "account", normalize_address(self.account))
        object.__setattr__(self, "to", normalize_address(self.to))
        if len(self.data_hash) != 32:
            raise ValueError(f"data_hash must be 32 bytes (got {len(self.data_hash)}).")

    @classmethod
    def for_call(
        cls, account: str, to: str, value: int, data: bytes, nonce: int
    ) -> "ExecutionClaim":
        """Build a claim from raw call data, hashing it with keccak-256."""
        return cls(
            account=account, to=to, value=value, data_hash=keccak(data), nonce=nonce
        )

    def message(self) -> dict[str, object]:
        return {
            "safe": self.account,
            "to": self.to,
            "value": self.value,
            "dataHash": self.data_hash,
            "nonce": self.nonce,
        }


Claim = Union[RegistrationClaim, ExecutionClaim]


# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------


def typed_data(domain: ClaimDomain, claim: Claim) -> dict[str, object]:
    """Return the full EIP-712 typed-data document for *claim*."""
    return {
        "types": {
            "EIP712Domain": EIP712_DOMAIN_FIELDS,
            claim.primary_type: claim.type_fields,
        },
        "primaryType": claim.primary_type,
        "domain": domain.to_dict(),
        "message": claim.message(),
    }


def encode_claim(domain: ClaimDomain, claim: Claim) -> SignableMessage:
    """Encode *claim* into a signable EIP-712 message."""
    return encode_typed_data(full_message=typed_data(domain, claim))


def claim_digest(domain: ClaimDomain, claim: Claim) -> bytes:
    """Return the 32-byte hash a wallet signs for *claim*."""
    signable = encode_claim(domain, claim)
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


# ------------------------------------------------------------------
# Recovery
# ------------------------------------------------------------------


def signature_bytes(signature: Signature) -> bytes:
    """Coerce a signature given as bytes or ``0x`` hex into raw bytes."""
    if isinstance(signature, str):
        return to_bytes(hexstr=signature)
    return bytes(signature)


def recover_signer(signable: SignableMessage, signature: Signature) -> str | None:
    """Recover the address that produced *signature* over *signable*.

    Returns
    -------
    str | None
        The checksummed signer address, or None when the signature is
        malformed and no signer can be recovered.
    """
    try:
        raw = signature_bytes(signature)
        if len(raw) != 65:
            return None
        return Account.recover_message(signable, signature=raw)
    except (BadSignature, ValidationError, ValueError, TypeError):
        return None


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
    "signature_bytes",
    "typed_data",
]
