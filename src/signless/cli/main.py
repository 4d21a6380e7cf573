"""CLI entry point for signless.

Invoked as::

    signless [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m signless.cli.main

Commands
--------
delegates register   Register a delegate from an owner-signed claim
delegates list       List an owner's delegates
delegates info       Show a delegate record
delegates nonce      Show the current nonce of an address
delegates revoke     Revoke one of the caller's delegates by index
claims registration  Print the typed data an owner signs to register a delegate
claims execution     Print the typed data a delegate signs to execute a call

Registry state is kept in a JSON file (``--state-file``) so that commands
can be chained from a shell.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn

import click
from eth_utils import to_bytes
from rich.console import Console
from rich.table import Table

from signless import __version__
from signless.config import DEFAULT_NETWORK, NETWORKS, load_network
from signless.engine.authorization import AuthorizationEngine
from signless.errors import DelegationError

console = Console()

_STATE_FILE_OPTION = click.option(
    "--state-file",
    type=click.Path(),
    default="signless-state.json",
    show_default=True,
    help="Path to the JSON file holding registry state.",
)
_NETWORK_OPTION = click.option(
    "--network",
    type=click.Choice(sorted(NETWORKS)),
    default=DEFAULT_NETWORK,
    show_default=True,
    help="Network preset the engine is deployed on.",
)


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="signless")
def cli() -> None:
    """Delegate transaction signing to short-lived keys."""


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(f"[bold]signless[/bold] v{__version__}")


# ------------------------------------------------------------------
# delegates command group
# ------------------------------------------------------------------


@cli.group(name="delegates")
def delegates_group() -> None:
    """Register, inspect and revoke delegate keys."""


@delegates_group.command(name="register")
@click.argument("owner")
@click.argument("delegate")
@click.option("--signature", "-s", required=True, help="Owner's ClaimPubKey signature (hex).")
@click.option("--expiry", type=int, default=None, help="Absolute expiry (Unix seconds).")
@click.option(
    "--ttl",
    type=int,
    default=3600,
    show_default=True,
    help="Lifetime in seconds, used when --expiry is not given.",
)
@_STATE_FILE_OPTION
@_NETWORK_OPTION
def register_command(
    owner: str,
    delegate: str,
    signature: str,
    expiry: int | None,
    ttl: int,
    state_file: str,
    network: str,
) -> None:
    """Register DELEGATE for OWNER using the owner's signature."""
    engine = _load_engine(state_file, network)
    if expiry is None:
        expiry = engine.now() + ttl

    try:
        record = engine.register(owner, delegate, expiry, signature)
    except DelegationError as exc:
        _fail(exc)

    _save_engine(engine, state_file, network)
    console.print(f"[green]Registered[/green] delegate [bold]{record.delegate}[/bold]")
    console.print(f"  Owner:  {record.owner}")
    console.print(f"  Expiry: {record.expiry}")
    console.print(f"  Nonce:  {engine.nonce_of(record.owner)}")


@delegates_group.command(name="list")
@click.argument("owner")
@click.option("--offset", type=int, default=0, show_default=True)
@click.option("--limit", type=int, default=50, show_default=True)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON instead of a table.")
@_STATE_FILE_OPTION
@_NETWORK_OPTION
def list_command(
    owner: str, offset: int, limit: int, as_json: bool, state_file: str, network: str
) -> None:
    """List delegates of OWNER in registration order."""
    engine = _load_engine(state_file, network)
    try:
        delegates = engine.list_delegates(owner, offset, limit)
    except (DelegationError, ValueError) as exc:
        _fail(exc)

    if as_json:
        click.echo(json.dumps(delegates))
        return

    if not delegates:
        console.print("[yellow]No delegates found.[/yellow]")
        return

    now = engine.now()
    table = Table(title=f"Delegates ({engine.delegate_count(owner)} total)", show_header=True)
    table.add_column("Index", justify="right")
    table.add_column("Delegate", style="cyan", no_wrap=True)
    table.add_column("Expiry", justify="right")
    table.add_column("Active")
    for position, address in enumerate(delegates, start=offset):
        record = engine.delegate_info(address)
        if record is None:
            continue
        table.add_row(
            str(position),
            address,
            str(record.expiry),
            "[green]yes[/green]" if record.is_active(now) else "[red]expired[/red]",
        )
    console.print(table)


@delegates_group.command(name="info")
@click.argument("delegate")
@_STATE_FILE_OPTION
@_NETWORK_OPTION
def info_command(delegate: str, state_file: str, network: str) -> None:
    """Show the record stored for DELEGATE."""
    engine = _load_engine(state_file, network)
    try:
        record = engine.delegate_info(delegate)
    except DelegationError as exc:
        _fail(exc)

    if record is None:
        console.print(f"[red]Error:[/red] UnknownDelegate: {delegate} is not registered.")
        sys.exit(1)

    active = record.is_active(engine.now())
    console.print(f"  Delegate: {record.delegate}")
    console.print(f"  Owner:    {record.owner}")
    console.print(f"  Expiry:   {record.expiry}")
    console.print(f"  Active:   {'yes' if active else 'no (expired)'}")
    console.print(f"  Nonce:    {engine.nonce_of(record.delegate)}")


@delegates_group.command(name="nonce")
@click.argument("address")
@_STATE_FILE_OPTION
@_NETWORK_OPTION
def nonce_command(address: str, state_file: str, network: str) -> None:
    """Print the current nonce of ADDRESS."""
    engine = _load_engine(state_file, network)
    try:
        click.echo(str(engine.nonce_of(address)))
    except DelegationError as exc:
        _fail(exc)


@delegates_group.command(name="revoke")
@click.argument("index", type=int)
@click.option("--caller", required=True, help="Address of the owner revoking its own delegate.")
@_STATE_FILE_OPTION
@_NETWORK_OPTION
def revoke_command(index: int, caller: str, state_file: str, network: str) -> None:
    """Revoke the delegate at INDEX of the caller's list.

    The last delegate in the list takes the revoked one's position.
    """
    engine = _load_engine(state_file, network)
    try:
        record = engine.revoke(caller, index)
    except DelegationError as exc:
        _fail(exc)

    _save_engine(engine, state_file, network)
    console.print(f"[green]Revoked[/green] delegate [bold]{record.delegate}[/bold]")


# ------------------------------------------------------------------
# claims command group
# ------------------------------------------------------------------


@cli.group(name="claims")
def claims_group() -> None:
    """Print typed data for wallets to sign."""


@claims_group.command(name="registration")
@click.argument("owner")
@click.argument("delegate")
@click.option("--nonce", type=int, default=None, help="Override the owner's nonce from the state file.")
@_STATE_FILE_OPTION
@_NETWORK_OPTION
def registration_claim_command(
    owner: str, delegate: str, nonce: int | None, state_file: str, network: str
) -> None:
    """Print the ClaimPubKey OWNER must sign to register DELEGATE."""
    from signless.claims import RegistrationClaim, claim_digest, typed_data

    engine = _load_engine(state_file, network)
    try:
        if nonce is None:
            nonce = engine.nonce_of(owner)
        claim = RegistrationClaim(delegate=delegate, nonce=nonce)
    except DelegationError as exc:
        _fail(exc)

    _print_claim(typed_data(engine.domain, claim), claim_digest(engine.domain, claim))


@claims_group.command(name="execution")
@click.argument("delegate")
@click.option("--account", required=True, help="Owner account the call runs on.")
@click.option("--to", "to", required=True, help="Call target.")
@click.option("--value", type=int, default=0, show_default=True, help="Amount in the smallest unit.")
@click.option("--data", default="0x", show_default=True, help="Call data (hex).")
@click.option("--nonce", type=int, default=None, help="Override the delegate's nonce from the state file.")
@_STATE_FILE_OPTION
@_NETWORK_OPTION
def execution_claim_command(
    delegate: str,
    account: str,
    to: str,
    value: int,
    data: str,
    nonce: int | None,
    state_file: str,
    network: str,
) -> None:
    """Print the ExecSafeTx DELEGATE must sign to execute a call."""
    from signless.claims import ExecutionClaim, claim_digest, typed_data

    engine = _load_engine(state_file, network)
    try:
        if nonce is None:
            nonce = engine.nonce_of(delegate)
        claim = ExecutionClaim.for_call(
            account=account, to=to, value=value, data=to_bytes(hexstr=data), nonce=nonce
        )
    except (DelegationError, ValueError) as exc:
        _fail(exc)

    document = typed_data(engine.domain, claim)
    message = dict(document["message"])  # type: ignore[call-overload]
    message["dataHash"] = "0x" + claim.data_hash.hex()
    document["message"] = message
    _print_claim(document, claim_digest(engine.domain, claim))


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _print_claim(document: dict[str, object], digest: bytes) -> None:
    click.echo(json.dumps(document, indent=2))
    console.print(f"\n  Digest: [bold]0x{digest.hex()}[/bold]")


def _fail(exc: Exception) -> NoReturn:
    reason = getattr(exc, "reason", type(exc).__name__)
    console.print(f"[red]Error:[/red] {reason}: {exc}")
    sys.exit(1)


def _load_engine(state_file: str, network: str) -> AuthorizationEngine:
    """Return an engine for *network*, pre-populated from *state_file* if it exists."""
    from signless.registry import DelegateRegistry

    path = Path(state_file)
    registry = DelegateRegistry()
    if path.exists():
        try:
            data: dict[str, object] = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            console.print(f"[red]Error:[/red] state file is not valid JSON: {exc}")
            sys.exit(1)
        stored_network = data.get("network", network)
        if stored_network != network:
            console.print(
                f"[red]Error:[/red] state file belongs to network {stored_network!r}, "
                f"not {network!r}."
            )
            sys.exit(1)
        registry = DelegateRegistry.from_dict(data.get("registry") or {})  # type: ignore[arg-type]
    return AuthorizationEngine.from_network(load_network(network), registry=registry)


def _save_engine(engine: AuthorizationEngine, state_file: str, network: str) -> None:
    path = Path(state_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"network": network, "registry": engine.registry.to_dict()}
    # Swap in a complete file; readers never see a partial snapshot.
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    tmp_path.replace(path)


if __name__ == "__main__":
    cli()
