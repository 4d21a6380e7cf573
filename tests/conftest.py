"""Shared fixtures: deterministic keys, a manual clock and a bound engine."""
from __future__ import annotations

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount

from signless.account import InMemoryOwnerAccount, Ledger
from signless.audit import DelegationAuditLogger
from signless.claims import ClaimDomain
from signless.clock import ManualClock
from signless.engine import AuthorizationEngine

START_TIME = 1_700_000_000
MODULE_ADDRESS = "0x9309bd93a8b662d315ce0d43bb95984694f120cb"
SAFE_ADDRESS = "0x00000000000000000000000000000000000005af"
ONE_UNIT = 10**18


def key_account(seed: int) -> LocalAccount:
    """Deterministic test key (DO NOT use in production)."""
    return Account.from_key("0x" + f"{seed:02x}" * 32)


@pytest.fixture()
def owner() -> LocalAccount:
    return key_account(0x11)


@pytest.fixture()
def other_owner() -> LocalAccount:
    return key_account(0x22)


@pytest.fixture()
def delegate() -> LocalAccount:
    return key_account(0x33)


@pytest.fixture()
def recipient() -> LocalAccount:
    return key_account(0x44)


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(start=START_TIME)


@pytest.fixture()
def domain() -> ClaimDomain:
    return ClaimDomain(chain_id=100, verifying_contract=MODULE_ADDRESS)


@pytest.fixture()
def audit_logger() -> DelegationAuditLogger:
    return DelegationAuditLogger()


@pytest.fixture()
def engine(
    domain: ClaimDomain, clock: ManualClock, audit_logger: DelegationAuditLogger
) -> AuthorizationEngine:
    return AuthorizationEngine(domain, clock=clock, audit_logger=audit_logger)


@pytest.fixture()
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture()
def safe(owner: LocalAccount, ledger: Ledger) -> InMemoryOwnerAccount:
    account = InMemoryOwnerAccount(SAFE_ADDRESS, owners=[owner.address], ledger=ledger)
    ledger.credit(SAFE_ADDRESS, 10 * ONE_UNIT)
    return account
