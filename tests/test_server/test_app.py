"""Tests for signless.server.app: HTTP handler integration."""
from __future__ import annotations

import json
import threading
import urllib.error
import urllib.request
from collections.abc import Iterator
from http.server import HTTPServer

import pytest
from eth_account.signers.local import LocalAccount

from signless.account import InMemoryOwnerAccount
from signless.claims import sign_execution, sign_registration
from signless.engine import AuthorizationEngine
from signless.server import routes
from signless.server.app import SignlessRelayHandler, create_server

from tests.conftest import ONE_UNIT, START_TIME


@pytest.fixture()
def server(engine: AuthorizationEngine, safe: InMemoryOwnerAccount) -> Iterator[str]:
    """Serve the relay on an ephemeral port and yield its base URL."""
    httpd = create_server(host="127.0.0.1", port=0, engine=engine)
    routes.register_account(safe)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        httpd.server_close()
        thread.join(timeout=5)


def _request(
    url: str, method: str = "GET", body: dict[str, object] | bytes | None = None
) -> tuple[int, dict[str, object]]:
    data = body if isinstance(body, bytes) or body is None else json.dumps(body).encode("utf-8")
    request = urllib.request.Request(url, data=data, method=method)
    request.add_header("Content-Type", "application/json")
    try:
        with urllib.request.urlopen(request, timeout=5) as response:
            return response.status, json.loads(response.read().decode("utf-8"))
    except urllib.error.HTTPError as exc:
        return exc.code, json.loads(exc.read().decode("utf-8"))


class TestCreateServer:
    def test_create_server_returns_http_server(self, engine: AuthorizationEngine) -> None:
        server = create_server(host="127.0.0.1", port=0, engine=engine)
        try:
            assert isinstance(server, HTTPServer)
            assert server.RequestHandlerClass is SignlessRelayHandler
            assert routes.get_engine() is engine
        finally:
            server.server_close()


class TestRelayOverHttp:
    def test_health(self, server: str) -> None:
        status, data = _request(f"{server}/health")
        assert status == 200
        assert data["service"] == "signless"

    def test_register_execute_and_query(
        self,
        server: str,
        engine: AuthorizationEngine,
        owner: LocalAccount,
        delegate: LocalAccount,
        recipient: LocalAccount,
        safe: InMemoryOwnerAccount,
    ) -> None:
        registration = sign_registration(owner.key, engine.domain, delegate.address, 0)
        status, data = _request(
            f"{server}/delegates",
            "POST",
            {
                "owner": owner.address,
                "delegate": delegate.address,
                "expiry": START_TIME + 3600,
                "signature": "0x" + registration.hex(),
            },
        )
        assert status == 201, data

        execution = sign_execution(
            delegate.key, engine.domain, safe.address, recipient.address, ONE_UNIT, b"", 0
        )
        status, data = _request(
            f"{server}/execute",
            "POST",
            {
                "delegate": delegate.address,
                "account": safe.address,
                "to": recipient.address,
                "value": ONE_UNIT,
                "signature": "0x" + execution.hex(),
            },
        )
        assert status == 200, data
        assert data["success"] is True

        status, data = _request(f"{server}/delegates/{owner.address}?offset=0&limit=10")
        assert status == 200
        assert data["delegates"] == [delegate.address]

        status, data = _request(f"{server}/delegate/{delegate.address}")
        assert status == 200
        assert data["owner"] == owner.address

        status, data = _request(f"{server}/nonce/{delegate.address}")
        assert status == 200
        assert data["nonce"] == 1

    def test_invalid_json_is_400(self, server: str) -> None:
        status, data = _request(f"{server}/delegates", "POST", b"{broken")
        assert status == 400
        assert data["error"] == "Invalid JSON"

    def test_non_integer_pagination_is_422(self, server: str, owner: LocalAccount) -> None:
        status, _ = _request(f"{server}/delegates/{owner.address}?offset=abc")
        assert status == 422

    def test_unknown_route_is_404(self, server: str) -> None:
        status, _ = _request(f"{server}/revoke", "POST", {})
        assert status == 404
