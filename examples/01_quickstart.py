#!/usr/bin/env python3
"""Example: Quickstart

Demonstrates the delegate lifecycle: an owner registers a short-lived
delegate key, the delegate moves funds out of the owner's account, the
key expires, and the owner revokes it.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install signless
"""
from __future__ import annotations

from eth_account import Account

import signless
from signless import (
    AuthorizationEngine,
    DelegationError,
    InMemoryOwnerAccount,
    Ledger,
    ManualClock,
    load_network,
    sign_execution,
    sign_registration,
)


def main() -> None:
    print(f"signless version: {signless.__version__}")

    # Step 1: An engine bound to the xdai deployment, with a clock we control
    clock = ManualClock()
    engine = AuthorizationEngine.from_network(load_network("xdai"), clock=clock)

    owner = Account.create()
    delegate = Account.create()
    recipient = Account.create()

    ledger = Ledger()
    safe = InMemoryOwnerAccount("0x" + "5a" * 20, owners=[owner.address], ledger=ledger)
    ledger.credit(safe.address, 10 * 10**18)

    # Step 2: The owner signs a registration claim; anyone may relay it
    nonce = engine.nonce_of(owner.address)
    claim_sig = sign_registration(owner.key, engine.domain, delegate.address, nonce)
    record = engine.register(owner.address, delegate.address, clock.now() + 3600, claim_sig)
    print(f"Registered {record.delegate} until {record.expiry}")

    # Step 3: The delegate authorizes a transfer of one unit
    exec_sig = sign_execution(
        delegate.key,
        engine.domain,
        safe.address,
        recipient.address,
        10**18,
        b"",
        engine.nonce_of(delegate.address),
    )
    result = engine.execute(delegate.address, safe, recipient.address, 10**18, b"", exec_sig)
    print(f"Transfer success={result.success}, recipient balance={ledger.balance_of(recipient.address)}")

    # Step 4: After expiry the same key is refused
    clock.set(record.expiry + 1)
    exec_sig = sign_execution(
        delegate.key,
        engine.domain,
        safe.address,
        recipient.address,
        10**18,
        b"",
        engine.nonce_of(delegate.address),
    )
    try:
        engine.execute(delegate.address, safe, recipient.address, 10**18, b"", exec_sig)
    except DelegationError as error:
        print(f"Refused: {error.reason}")

    # Step 5: The owner revokes the delegate; its record is gone
    engine.revoke(owner.address, 0)
    print(f"Delegates after revoke: {engine.list_delegates(owner.address, 0, 10)}")


if __name__ == "__main__":
    main()
