"""Network configuration for engine deployments.

Each network preset names the chain the engine runs on and the address it
is deployed at; both feed the claim domain. Environment variables override
preset fields at load time:

``SIGNLESS_RPC_URL``
    RPC endpoint.
``SIGNLESS_CHAIN_ID``
    Chain identifier (decimal or ``0x`` hex).
``SIGNLESS_MODULE_ADDRESS``
    Deployed engine address.
"""
from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, field_validator

from signless.addresses import normalize_address
from signless.claims.typed_data import DOMAIN_NAME, DOMAIN_VERSION, ClaimDomain


class NetworkConfig(BaseModel):
    """Where an engine is deployed and how its claims are domain-separated."""

    name: str
    chain_id: int
    module_address: str
    rpc_url: Optional[str] = None
    domain_name: str = DOMAIN_NAME
    domain_version: str = DOMAIN_VERSION

    @field_validator("module_address")
    @classmethod
    def _checksum_module_address(cls, value: str) -> str:
        return normalize_address(value)

    @field_validator("chain_id")
    @classmethod
    def _positive_chain_id(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("chain_id must be positive.")
        return value

    def domain(self) -> ClaimDomain:
        """Return the claim domain for this deployment."""
        return ClaimDomain(
            chain_id=self.chain_id,
            verifying_contract=self.module_address,
            name=self.domain_name,
            version=self.domain_version,
        )


NETWORKS: dict[str, NetworkConfig] = {
    "xdai": NetworkConfig(
        name="xdai",
        chain_id=0x64,
        module_address="0x9309bd93a8b662d315ce0d43bb95984694f120cb",
        rpc_url="https://rpc.gnosis.gateway.fm",
    ),
    "hardhat": NetworkConfig(
        name="hardhat",
        chain_id=1,
        module_address="0x5fbdb2315678afecb367f032d93f642f64180aa3",
        rpc_url="http://127.0.0.1:8545",
    ),
}

DEFAULT_NETWORK: str = "xdai"


def load_network(
    name: str = DEFAULT_NETWORK, environ: Mapping[str, str] | None = None
) -> NetworkConfig:
    """Return the preset called *name* with environment overrides applied.

    Parameters
    ----------
    name:
        Preset name (see :data:`NETWORKS`).
    environ:
        Mapping to read overrides from. Defaults to ``os.environ``.

    Raises
    ------
    KeyError
        If no preset is called *name*.
    """
    if name not in NETWORKS:
        raise KeyError(
            f"Unknown network {name!r}. Known networks: {', '.join(sorted(NETWORKS))}."
        )
    env = os.environ if environ is None else environ

    overrides: dict[str, object] = {}
    if env.get("SIGNLESS_RPC_URL"):
        overrides["rpc_url"] = env["SIGNLESS_RPC_URL"]
    if env.get("SIGNLESS_CHAIN_ID"):
        overrides["chain_id"] = int(env["SIGNLESS_CHAIN_ID"], 0)
    if env.get("SIGNLESS_MODULE_ADDRESS"):
        overrides["module_address"] = env["SIGNLESS_MODULE_ADDRESS"]

    preset = NETWORKS[name]
    if not overrides:
        return preset
    return NetworkConfig.model_validate({**preset.model_dump(), **overrides})


__all__ = ["DEFAULT_NETWORK", "NETWORKS", "NetworkConfig", "load_network"]
