from __future__ import annotations

import logging
import time
from http import HTTPStatus
from typing import Any, Dict, Optional

import pydantic
import websockets
from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.http11 import Request, Response

from seven.core import health, proto
from seven.core.errors import ValidationError
from seven.core.registry import PeerRegistry
from seven.server.config import ServerConfig
from seven.server.static import render_home
from seven.utils.canonical import dumps

log = logging.getLogger("seven.server.runtime")

ROUTES = (
    ("GET", "/", "home"),
    ("GET", "/health", "health"),
    ("WS", "/echo", "echo"),
    ("WS", "/register", "register"),
)
WEBSOCKET_PATHS = {path for kind, path, _ in ROUTES if kind == "WS"}


class ServerRuntime:
    """Signaling server: peer registration, echo socket, health and test page."""

    def __init__(self, config: ServerConfig, registry: Optional[PeerRegistry] = None) -> None:
        self.cfg = config
        self.registry = registry if registry is not None else PeerRegistry(config.capacity)
        self.started_at: Optional[float] = None
        self._ws_server: Optional[Server] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        log.info("%s - a WebRTC signaling server", self.cfg.component_name)
        for kind, path, name in ROUTES:
            log.debug("route %s %s -> %s", kind, path, name)

        self._ws_server = await serve(
            self._handle_connection,
            self.cfg.host,
            self.cfg.port,
            process_request=self._process_request,
        )
        self.started_at = time.time()
        log.info(
            "Listening on %s:%d (registry capacity %d)",
            self.cfg.host or "0.0.0.0",
            self.port,
            self.registry.capacity,
        )

    async def stop(self) -> None:
        if self._ws_server is not None:
            self._ws_server.close()
            await self._ws_server.wait_closed()
            self._ws_server = None

    @property
    def port(self) -> int:
        if self._ws_server is None:
            raise RuntimeError("server not started")
        sock = next(iter(self._ws_server.sockets))
        return sock.getsockname()[1]

    # ------------------------------------------------------------------
    # Plain HTTP routes
    # ------------------------------------------------------------------

    def _process_request(self, connection: ServerConnection, request: Request) -> Optional[Response]:
        path = _strip_query(request.path)
        if path in WEBSOCKET_PATHS:
            return None
        if path == "/health":
            report = health.health_report(
                self.registry,
                name=self.cfg.component_name,
                version=self.cfg.component_version,
                started_at=self.started_at,
            )
            return _respond(connection, HTTPStatus.OK, dumps(report), "application/json")
        if path == "/":
            host = request.headers.get("Host") or f"localhost:{self.port}"
            return _respond(connection, HTTPStatus.OK, render_home(host), "text/html; charset=utf-8")
        log.debug("No route for %s", path)
        return _respond(connection, HTTPStatus.NOT_FOUND, dumps({"status": "not found"}), "application/json")

    # ------------------------------------------------------------------
    # Websocket routes
    # ------------------------------------------------------------------

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        path = _strip_query(websocket.request.path)
        remote = self._fmt_remote(websocket)
        log.debug("Accepted %s connection from %s", path, remote)
        try:
            if path == "/echo":
                await self._echo(websocket)
            elif path == "/register":
                await self._register_loop(websocket, remote)
        except websockets.ConnectionClosed:
            pass
        finally:
            log.debug("Closed %s connection from %s", path, remote)

    async def _echo(self, websocket: ServerConnection) -> None:
        async for message in websocket:
            log.debug("recv: %s", message)
            await websocket.send(message)

    async def _register_loop(self, websocket: ServerConnection, remote: str) -> None:
        async for raw in websocket:
            reply = self.handle_register_frame(raw, remote=remote)
            await websocket.send(dumps(reply))

    def handle_register_frame(self, raw: str | bytes, *, remote: str = "?") -> Dict[str, Any]:
        """Turn one registration frame into its response frame."""

        try:
            form = proto.parse_register_frame(raw)
        except pydantic.ValidationError as exc:
            log.warning("Error parsing registration from %s: %d error(s)", remote, exc.error_count())
            return proto.build_response(proto.STATUS_BAD_JSON)

        try:
            entries = self.registry.register(form.identity, form.address)
        except ValidationError as exc:
            log.warning("Rejected registration from %s: %s", remote, exc.reason)
            return proto.build_response(proto.STATUS_NOT_ACCEPTABLE, detail=exc.reason)

        return proto.build_response(proto.STATUS_OK, entries=entries)

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    @staticmethod
    def _fmt_remote(websocket: ServerConnection) -> str:
        peer = websocket.remote_address
        if isinstance(peer, tuple):
            return f"{peer[0]}:{peer[1]}"
        return str(peer)


def _strip_query(path: str) -> str:
    return path.split("?", 1)[0]


def _respond(connection: ServerConnection, status: HTTPStatus, body: str, content_type: str) -> Response:
    response = connection.respond(status, body)
    del response.headers["Content-Type"]
    response.headers["Content-Type"] = content_type
    return response


__all__ = ["ServerRuntime", "ROUTES"]
