"""HTTP relay server for signless using stdlib http.server.

Any party may relay signed claims; the server adds no authority of its own.

Routes:
    POST   /delegates              register a delegate (owner-signed claim)
    POST   /execute                execute a call as a delegate
    GET    /delegates/{owner}      list an owner's delegates (?offset=&limit=)
    GET    /delegate/{address}     look up a delegate record
    GET    /nonce/{address}        current nonce of an owner or delegate
    GET    /health                 health check

Usage:
    python -m signless.server.app --port 8080
    python -m signless.server.app --network hardhat --log-level DEBUG
"""
from __future__ import annotations

import argparse
import json
import logging
import re
import urllib.parse
from http.server import BaseHTTPRequestHandler, HTTPServer

from signless.config import DEFAULT_NETWORK, NETWORKS, load_network
from signless.engine.authorization import AuthorizationEngine
from signless.server import routes

logger = logging.getLogger(__name__)

_DELEGATES_PATTERN = re.compile(r"^/delegates/([^/]+)$")
_DELEGATE_PATTERN = re.compile(r"^/delegate/([^/]+)$")
_NONCE_PATTERN = re.compile(r"^/nonce/([^/]+)$")


class SignlessRelayHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the relay server.

    All request bodies and responses use JSON.
    """

    def log_message(self, format: str, *args: object) -> None:
        """Route access logs through the Python logging system."""
        logger.debug(format, *args)

    # -- GET ------------------------------------------------------------

    def do_GET(self) -> None:
        """Handle all GET requests by routing on the URL path."""
        parsed = urllib.parse.urlparse(self.path)
        path = parsed.path.rstrip("/")
        params = urllib.parse.parse_qs(parsed.query)

        if path == "/health":
            self._send_json(*routes.handle_health())
            return

        match = _DELEGATES_PATTERN.match(path)
        if match:
            try:
                offset = int(self._first_param(params, "offset") or 0)
                limit = int(self._first_param(params, "limit") or routes.DEFAULT_PAGE_SIZE)
            except ValueError:
                self._send_json(
                    422, {"error": "Validation error", "detail": "offset and limit must be integers"}
                )
                return
            self._send_json(*routes.handle_list_delegates(match.group(1), offset, limit))
            return

        match = _DELEGATE_PATTERN.match(path)
        if match:
            self._send_json(*routes.handle_get_delegate(match.group(1)))
            return

        match = _NONCE_PATTERN.match(path)
        if match:
            self._send_json(*routes.handle_get_nonce(match.group(1)))
            return

        self._send_json(404, {"error": "Not found", "detail": f"No route for GET {path}"})

    # -- POST -----------------------------------------------------------

    def do_POST(self) -> None:
        """Handle all POST requests by routing on the URL path."""
        parsed = urllib.parse.urlparse(self.path)
        path = parsed.path.rstrip("/")

        body = self._read_json_body()
        if body is None:
            return

        if path == "/delegates":
            self._send_json(*routes.handle_register(body))
        elif path == "/execute":
            self._send_json(*routes.handle_execute(body))
        else:
            self._send_json(404, {"error": "Not found", "detail": f"No route for POST {path}"})

    # -- Helpers --------------------------------------------------------

    def _send_json(self, status: int, data: dict[str, object]) -> None:
        """Serialize *data* to JSON and send an HTTP response with *status*."""
        body = json.dumps(data, default=str).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json_body(self) -> dict[str, object] | None:
        """Read and parse the JSON request body.

        Returns None (and sends a 400 error response) if parsing fails.
        """
        content_length = int(self.headers.get("Content-Length", 0))
        if content_length == 0:
            return {}

        raw = self.rfile.read(content_length)
        try:
            parsed = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            self._send_json(400, {"error": "Invalid JSON", "detail": str(exc)})
            return None
        if not isinstance(parsed, dict):
            self._send_json(400, {"error": "Invalid JSON", "detail": "Body must be an object."})
            return None
        return parsed

    @staticmethod
    def _first_param(params: dict[str, list[str]], key: str) -> str | None:
        """Return the first value for *key* from query parameters, or None."""
        values = params.get(key)
        return values[0] if values else None


def create_server(
    host: str = "0.0.0.0", port: int = 8080, engine: AuthorizationEngine | None = None
) -> HTTPServer:
    """Create (but do not start) the relay server.

    Parameters
    ----------
    host:
        Bind address.
    port:
        TCP port to listen on.
    engine:
        Engine to serve. The shared route state is reset to it if given.
    """
    if engine is not None:
        routes.reset_state(engine)
    server = HTTPServer((host, port), SignlessRelayHandler)
    logger.info(
        "signless relay created at http://%s:%d for module %s",
        host, port, routes.get_engine().address,
    )
    return server


def run_server(
    host: str = "0.0.0.0", port: int = 8080, engine: AuthorizationEngine | None = None
) -> None:
    """Create and run the relay server (blocking)."""
    server = create_server(host=host, port=port, engine=engine)
    logger.info("Serving signless relay on http://%s:%d, press Ctrl-C to stop", host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down signless relay.")
    finally:
        server.server_close()


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="signless relay server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=8080, help="TCP port")
    parser.add_argument(
        "--network", default=DEFAULT_NETWORK, choices=sorted(NETWORKS), help="Network preset"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


if __name__ == "__main__":
    args = _build_arg_parser().parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level))
    run_server(
        host=args.host,
        port=args.port,
        engine=AuthorizationEngine.from_network(load_network(args.network)),
    )
