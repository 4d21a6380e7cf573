"""Route handler functions for the signless relay server.

Each function accepts parsed request data and returns a tuple of
(status_code, response_dict). The HTTP handler in app.py calls these
functions and serializes the results to JSON.

There is no revocation route: the relay cannot establish the
identity of the caller, and only an owner may revoke its own delegates.
"""
from __future__ import annotations

from eth_utils import to_bytes
from pydantic import ValidationError

from signless import __version__
from signless.account.interface import OwnerAccount
from signless.addresses import normalize_address
from signless.config import DEFAULT_NETWORK, load_network
from signless.engine.authorization import AuthorizationEngine
from signless.errors import DelegationError, InvalidAddressError
from signless.registry.delegate_registry import DelegateRecord
from signless.server.models import (
    DelegateListResponse,
    DelegateResponse,
    ErrorResponse,
    ExecuteRequest,
    ExecuteResponse,
    HealthResponse,
    NonceResponse,
    RegisterRequest,
)

STATUS_BY_REASON: dict[str, int] = {
    "InvalidSignature": 401,
    "DelegateExpired": 403,
    "DelegatorNotOwner": 403,
    "Unauthorized": 403,
    "UnknownDelegate": 404,
    "IndexOutOfBounds": 400,
    "InvalidExpiry": 422,
    "InvalidAddress": 422,
}

DEFAULT_PAGE_SIZE: int = 50


# Module-level shared state
_engine: AuthorizationEngine = AuthorizationEngine.from_network(load_network(DEFAULT_NETWORK))
_accounts: dict[str, OwnerAccount] = {}


def reset_state(engine: AuthorizationEngine | None = None) -> None:
    """Reset all shared state; used in tests and for clean restarts."""
    global _engine, _accounts
    _engine = (
        engine
        if engine is not None
        else AuthorizationEngine.from_network(load_network(DEFAULT_NETWORK))
    )
    _accounts = {}


def get_engine() -> AuthorizationEngine:
    return _engine


def register_account(account: OwnerAccount) -> None:
    """Make *account* reachable as an execution target."""
    _accounts[normalize_address(account.address)] = account


def _error(exc: DelegationError) -> tuple[int, dict[str, object]]:
    status = STATUS_BY_REASON.get(exc.reason, 400)
    return status, ErrorResponse(
        error="Authorization failed", reason=exc.reason, detail=str(exc)
    ).model_dump()


def _validation_error(detail: str) -> tuple[int, dict[str, object]]:
    return 422, ErrorResponse(
        error="Validation error", reason="ValidationError", detail=detail
    ).model_dump()


def _record_to_response(record: DelegateRecord) -> DelegateResponse:
    return DelegateResponse(
        owner=record.owner,
        delegate=record.delegate,
        expiry=record.expiry,
        active=record.is_active(_engine.now()),
    )


# ------------------------------------------------------------------
# Mutations
# ------------------------------------------------------------------


def handle_register(body: dict[str, object]) -> tuple[int, dict[str, object]]:
    """Handle POST /delegates.

    Parameters
    ----------
    body:
        Parsed JSON request body.

    Returns
    -------
    tuple[int, dict[str, object]]
        HTTP status code and response dictionary.
    """
    try:
        request = RegisterRequest.model_validate(body)
    except ValidationError as exc:
        return _validation_error(str(exc))

    try:
        record = _engine.register(
            owner=request.owner,
            delegate=request.delegate,
            expiry=request.expiry,
            signature=request.signature,
        )
    except DelegationError as exc:
        return _error(exc)

    return 201, _record_to_response(record).model_dump()


def handle_execute(body: dict[str, object]) -> tuple[int, dict[str, object]]:
    """Handle POST /execute.

    The account's own success flag and return data are relayed unchanged;
    a failed downstream call is still a 200 response.
    """
    try:
        request = ExecuteRequest.model_validate(body)
        data = to_bytes(hexstr=request.data)
    except ValidationError as exc:
        return _validation_error(str(exc))
    except ValueError as exc:
        return _validation_error(f"data is not valid hex: {exc}")

    try:
        account = _accounts.get(normalize_address(request.account))
    except InvalidAddressError as exc:
        return _error(exc)
    if account is None:
        return 404, ErrorResponse(
            error="Not found",
            reason="UnknownAccount",
            detail=f"Account {request.account} is not served by this relay.",
        ).model_dump()

    try:
        result = _engine.execute(
            delegate=request.delegate,
            account=account,
            to=request.to,
            value=request.value,
            data=data,
            signature=request.signature,
        )
    except DelegationError as exc:
        return _error(exc)

    response = ExecuteResponse(
        delegate=normalize_address(request.delegate),
        account=account.address,
        success=result.success,
        return_data="0x" + result.return_data.hex(),
    )
    return 200, response.model_dump()


# ------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------


def handle_list_delegates(
    owner: str, offset: int = 0, limit: int = DEFAULT_PAGE_SIZE
) -> tuple[int, dict[str, object]]:
    """Handle GET /delegates/{owner}?offset=&limit=."""
    if offset < 0 or limit < 0:
        return _validation_error("offset and limit must be non-negative.")
    try:
        delegates = _engine.list_delegates(owner, offset, limit)
        total = _engine.delegate_count(owner)
    except DelegationError as exc:
        return _error(exc)

    response = DelegateListResponse(
        owner=normalize_address(owner),
        offset=offset,
        limit=limit,
        total=total,
        delegates=delegates,
    )
    return 200, response.model_dump()


def handle_get_delegate(address: str) -> tuple[int, dict[str, object]]:
    """Handle GET /delegate/{address}."""
    try:
        record = _engine.delegate_info(address)
    except DelegationError as exc:
        return _error(exc)
    if record is None:
        return 404, ErrorResponse(
            error="Not found",
            reason="UnknownDelegate",
            detail=f"Delegate {address} is not registered.",
        ).model_dump()
    return 200, _record_to_response(record).model_dump()


def handle_get_nonce(address: str) -> tuple[int, dict[str, object]]:
    """Handle GET /nonce/{address}."""
    try:
        nonce = _engine.nonce_of(address)
    except DelegationError as exc:
        return _error(exc)
    return 200, NonceResponse(address=normalize_address(address), nonce=nonce).model_dump()


def handle_health() -> tuple[int, dict[str, object]]:
    """Handle GET /health."""
    response = HealthResponse(
        version=__version__,
        chain_id=_engine.domain.chain_id,
        module_address=_engine.address,
        delegate_count=len(_engine.registry),
    )
    return 200, response.model_dump()


__all__ = [
    "get_engine",
    "handle_execute",
    "handle_get_delegate",
    "handle_get_nonce",
    "handle_health",
    "handle_list_delegates",
    "handle_register",
    "register_account",
    "reset_state",
]
