"""Tests for signless.server.routes."""
from __future__ import annotations

import pytest
from eth_account.signers.local import LocalAccount

from signless.account import InMemoryOwnerAccount
from signless.claims import sign_execution, sign_registration
from signless.clock import ManualClock
from signless.engine import AuthorizationEngine
from signless.server import routes

from tests.conftest import ONE_UNIT, START_TIME, key_account

HOUR = 60 * 60


@pytest.fixture(autouse=True)
def reset_server_state(engine: AuthorizationEngine, safe: InMemoryOwnerAccount) -> None:
    """Point the shared route state at a fresh engine serving one account."""
    routes.reset_state(engine)
    routes.register_account(safe)


def _register_body(
    owner: LocalAccount, delegate: str, nonce: int = 0, expiry: int = START_TIME + HOUR
) -> dict[str, object]:
    signature = sign_registration(owner.key, routes.get_engine().domain, delegate, nonce)
    return {
        "owner": owner.address,
        "delegate": delegate,
        "expiry": expiry,
        "signature": "0x" + signature.hex(),
    }


def _execute_body(
    delegate: LocalAccount,
    account: str,
    to: str,
    value: int = ONE_UNIT,
    data: str = "0x",
    nonce: int = 0,
) -> dict[str, object]:
    raw = bytes.fromhex(data[2:])
    signature = sign_execution(
        delegate.key, routes.get_engine().domain, account, to, value, raw, nonce
    )
    return {
        "delegate": delegate.address,
        "account": account,
        "to": to,
        "value": value,
        "data": data,
        "signature": "0x" + signature.hex(),
    }


class TestHandleRegister:
    def test_registers_delegate(self, owner: LocalAccount, delegate: LocalAccount) -> None:
        status, data = routes.handle_register(_register_body(owner, delegate.address))

        assert status == 201
        assert data["owner"] == owner.address
        assert data["delegate"] == delegate.address
        assert data["active"] is True

    def test_replay_is_401(self, owner: LocalAccount, delegate: LocalAccount) -> None:
        body = _register_body(owner, delegate.address)
        routes.handle_register(body)
        status, data = routes.handle_register(body)

        assert status == 401
        assert data["reason"] == "InvalidSignature"

    def test_past_expiry_is_422(self, owner: LocalAccount, delegate: LocalAccount) -> None:
        status, data = routes.handle_register(
            _register_body(owner, delegate.address, expiry=START_TIME)
        )
        assert status == 422
        assert data["reason"] == "InvalidExpiry"

    def test_missing_fields_is_422(self) -> None:
        status, data = routes.handle_register({"owner": "0x" + "11" * 20})
        assert status == 422
        assert data["reason"] == "ValidationError"

    def test_bad_address_is_422(self, delegate: LocalAccount) -> None:
        status, data = routes.handle_register(
            {"owner": "nope", "delegate": delegate.address, "expiry": 1, "signature": "0x"}
        )
        assert status == 422
        assert data["reason"] == "InvalidAddress"


class TestHandleExecute:
    def test_executes_transfer(
        self,
        owner: LocalAccount,
        delegate: LocalAccount,
        recipient: LocalAccount,
        safe: InMemoryOwnerAccount,
    ) -> None:
        routes.handle_register(_register_body(owner, delegate.address))
        status, data = routes.handle_execute(
            _execute_body(delegate, safe.address, recipient.address)
        )

        assert status == 200
        assert data["success"] is True
        assert data["account"] == safe.address
        assert safe.ledger.balance_of(recipient.address) == ONE_UNIT

    def test_downstream_failure_is_still_200(
        self,
        owner: LocalAccount,
        delegate: LocalAccount,
        recipient: LocalAccount,
        safe: InMemoryOwnerAccount,
    ) -> None:
        routes.handle_register(_register_body(owner, delegate.address))
        status, data = routes.handle_execute(
            _execute_body(delegate, safe.address, recipient.address, value=1_000 * ONE_UNIT)
        )

        assert status == 200
        assert data["success"] is False
        assert data["return_data"] == "0x" + b"insufficient balance".hex()

    def test_unknown_delegate_is_404(
        self, delegate: LocalAccount, recipient: LocalAccount, safe: InMemoryOwnerAccount
    ) -> None:
        status, data = routes.handle_execute(
            _execute_body(delegate, safe.address, recipient.address)
        )
        assert status == 404
        assert data["reason"] == "UnknownDelegate"

    def test_expired_is_403(
        self,
        clock: ManualClock,
        owner: LocalAccount,
        delegate: LocalAccount,
        recipient: LocalAccount,
        safe: InMemoryOwnerAccount,
    ) -> None:
        routes.handle_register(_register_body(owner, delegate.address))
        clock.set(START_TIME + HOUR)
        status, data = routes.handle_execute(
            _execute_body(delegate, safe.address, recipient.address)
        )
        assert status == 403
        assert data["reason"] == "DelegateExpired"

    def test_not_owner_is_403(
        self,
        owner: LocalAccount,
        delegate: LocalAccount,
        recipient: LocalAccount,
        safe: InMemoryOwnerAccount,
    ) -> None:
        routes.handle_register(_register_body(owner, delegate.address))
        safe.remove_owner(owner.address)
        status, data = routes.handle_execute(
            _execute_body(delegate, safe.address, recipient.address)
        )
        assert status == 403
        assert data["reason"] == "DelegatorNotOwner"

    def test_unknown_account_is_404(
        self, owner: LocalAccount, delegate: LocalAccount, recipient: LocalAccount
    ) -> None:
        routes.handle_register(_register_body(owner, delegate.address))
        status, data = routes.handle_execute(
            _execute_body(delegate, "0x" + "ee" * 20, recipient.address)
        )
        assert status == 404
        assert data["reason"] == "UnknownAccount"

    def test_negative_value_is_422(
        self, delegate: LocalAccount, recipient: LocalAccount, safe: InMemoryOwnerAccount
    ) -> None:
        body = _execute_body(delegate, safe.address, recipient.address, value=0)
        body["value"] = -1
        status, data = routes.handle_execute(body)
        assert status == 422

    def test_value_above_uint256_is_422(
        self, delegate: LocalAccount, recipient: LocalAccount, safe: InMemoryOwnerAccount
    ) -> None:
        body = _execute_body(delegate, safe.address, recipient.address, value=0)
        body["value"] = 2**256
        status, data = routes.handle_execute(body)
        assert status == 422
        assert data["reason"] == "ValidationError"

    def test_invalid_hex_data_is_422(
        self, delegate: LocalAccount, recipient: LocalAccount, safe: InMemoryOwnerAccount
    ) -> None:
        body = _execute_body(delegate, safe.address, recipient.address)
        body["data"] = "0xzz"
        status, data = routes.handle_execute(body)
        assert status == 422
        assert data["reason"] == "ValidationError"


class TestQueries:
    def test_list_delegates_paginates(self, owner: LocalAccount) -> None:
        delegates = [key_account(0xB0 + i).address for i in range(4)]
        for nonce, address in enumerate(delegates):
            routes.handle_register(_register_body(owner, address, nonce=nonce))

        status, data = routes.handle_list_delegates(owner.address, offset=1, limit=2)

        assert status == 200
        assert data["delegates"] == delegates[1:3]
        assert data["total"] == 4

    def test_list_offset_past_end_is_empty(self, owner: LocalAccount) -> None:
        status, data = routes.handle_list_delegates(owner.address, offset=10, limit=5)
        assert status == 200
        assert data["delegates"] == []

    def test_list_negative_offset_is_422(self, owner: LocalAccount) -> None:
        status, _ = routes.handle_list_delegates(owner.address, offset=-1, limit=5)
        assert status == 422

    def test_get_delegate(self, owner: LocalAccount, delegate: LocalAccount) -> None:
        routes.handle_register(_register_body(owner, delegate.address))
        status, data = routes.handle_get_delegate(delegate.address)
        assert status == 200
        assert data["owner"] == owner.address
        assert data["expiry"] == START_TIME + HOUR

    def test_get_unknown_delegate_is_404(self, delegate: LocalAccount) -> None:
        status, data = routes.handle_get_delegate(delegate.address)
        assert status == 404
        assert data["reason"] == "UnknownDelegate"

    def test_nonce(self, owner: LocalAccount, delegate: LocalAccount) -> None:
        routes.handle_register(_register_body(owner, delegate.address))
        status, data = routes.handle_get_nonce(owner.address)
        assert status == 200
        assert data == {"address": owner.address, "nonce": 1}

    def test_health(self, owner: LocalAccount, delegate: LocalAccount) -> None:
        routes.handle_register(_register_body(owner, delegate.address))
        status, data = routes.handle_health()
        assert status == 200
        assert data["status"] == "ok"
        assert data["service"] == "signless"
        assert data["chain_id"] == 100
        assert data["delegate_count"] == 1
