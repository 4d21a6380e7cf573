"""HTTP relay mode for signless.

Provides a lightweight stdlib-based HTTP API through which any party can
relay owner-signed registrations and delegate-signed executions, without
requiring an additional web framework dependency.
"""
from __future__ import annotations

from signless.server.app import SignlessRelayHandler, create_server, run_server

__all__ = ["SignlessRelayHandler", "create_server", "run_server"]
