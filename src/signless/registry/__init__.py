"""Delegation registry: delegate records, owner lists and nonces.

Quick start
-----------
::

    from signless.registry import DelegateRegistry

    registry = DelegateRegistry()
    registry.insert_or_update(owner, delegate, expiry=1_700_000_000)
    print(registry.get(delegate))
"""
from __future__ import annotations

from signless.registry.delegate_registry import DelegateRecord, DelegateRegistry

__all__ = [
    "DelegateRecord",
    "DelegateRegistry",
]
