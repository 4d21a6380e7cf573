"""Authorization engine: signature-verified delegate registration and execution.

Quick start
-----------
::

    from signless.engine import AuthorizationEngine
    from signless.config import load_network

    engine = AuthorizationEngine.from_network(load_network("xdai"))
    engine.register(owner, delegate, expiry, owner_signature)
    engine.execute(delegate, account, to, value, b"", delegate_signature)
"""
from __future__ import annotations

from signless.engine.authorization import AuthorizationEngine, Clock

__all__ = ["AuthorizationEngine", "Clock"]
