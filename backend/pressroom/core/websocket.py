"""Live compliance channel for the content editor.

A client opens /api/v1/ws/compliance, sends one "configure" message with the
industry (and optionally content type and language) and then streams editor
content in "check" messages. Checks run debounced per connection; results
come back as "compliance_result" messages.

Client -> server messages: configure, check, reset, ping, pong.
Server -> client messages: connected, configured, checking, compliance_result,
reset, ping, pong, error, shutdown.

Deployment Requirements:
- The server pings every HEARTBEAT_INTERVAL seconds and drops connections
  that have not answered for HEARTBEAT_TIMEOUT seconds
- On shutdown every client gets a "shutdown" message with reconnect advice

ERROR LOGGING REQUIREMENTS:
- Log connection open/close with connection_id and close reason
- Log message traffic at DEBUG level (type and size, never content)
- Log send failures at ERROR level with full context
"""

import asyncio
import contextlib
import json
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from pressroom.core.errors import ServiceError
from pressroom.core.logging import get_logger
from pressroom.services.compliance import ComplianceCheckResult, get_compliance_service
from pressroom.services.realtime_compliance import DebouncedComplianceChecker
from pressroom.services.structured_content import structured_to_plain_text

logger = get_logger("websocket")

RECONNECT_ADVICE = {
    "should_reconnect": True,
    "initial_delay_ms": 1000,
    "max_delay_ms": 30000,
    "backoff_multiplier": 2.0,
}

LANGUAGES = ("ja", "en")

Message = dict[str, Any]


class ConnectionState(Enum):
    """Lifecycle of an editor connection."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class ComplianceSession:
    """Compliance settings of one editor connection."""

    industry_slug: str | None = None
    content_type: str | None = None
    language: str = "ja"

    @property
    def configured(self) -> bool:
        return bool(self.industry_slug)

    def to_dict(self) -> dict[str, Any]:
        return {
            "industry_slug": self.industry_slug,
            "content_type": self.content_type,
            "language": self.language,
        }


@dataclass
class WebSocketConnection:
    """An accepted socket plus its session and debounced checker."""

    websocket: WebSocket
    connection_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    session: ComplianceSession = field(default_factory=ComplianceSession)
    checker: DebouncedComplianceChecker | None = None
    connected_at: float = field(default_factory=time.time)
    last_ping: float = field(default_factory=time.time)
    last_pong: float = field(default_factory=time.time)
    state: ConnectionState = ConnectionState.CONNECTING

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def seconds_since_pong(self, now: float) -> float:
        return now - self.last_pong


def error_message(code: str, message: str) -> Message:
    return {"type": "error", "code": code, "error": message}


class ComplianceConnectionManager:
    """Tracks editor connections and routes their messages.

    Every connection owns a DebouncedComplianceChecker, so rapid keystrokes
    on one editor never trigger checks for another.
    """

    HEARTBEAT_INTERVAL = 30
    HEARTBEAT_TIMEOUT = 90

    def __init__(self, debounce_seconds: float | None = None) -> None:
        self._connections: dict[str, WebSocketConnection] = {}
        self._debounce_seconds = debounce_seconds
        self._heartbeat_task: asyncio.Task[None] | None = None
        self._handlers: dict[
            str, Callable[[WebSocketConnection, Message], Awaitable[Message | None]]
        ] = {
            "ping": self._on_ping,
            "pong": self._on_pong,
            "configure": self._on_configure,
            "check": self._on_check,
            "reset": self._on_reset,
        }

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    @property
    def heartbeat_running(self) -> bool:
        return self._heartbeat_task is not None and not self._heartbeat_task.done()

    # -------------------------------------------------------------------------
    # Heartbeat
    # -------------------------------------------------------------------------

    async def start_heartbeat(self) -> None:
        if self.heartbeat_running:
            return
        self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())
        logger.info("Compliance WebSocket heartbeat started")

    async def stop_heartbeat(self) -> None:
        task, self._heartbeat_task = self._heartbeat_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("Compliance WebSocket heartbeat stopped")

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self.HEARTBEAT_INTERVAL)
            try:
                await self._send_heartbeats()
            except Exception as e:
                logger.error(
                    "Heartbeat round failed",
                    extra={"error_type": type(e).__name__, "error_message": str(e)},
                    exc_info=True,
                )

    async def _send_heartbeats(self) -> None:
        """Ping open connections; drop the ones that stopped answering."""
        now = time.time()
        dead: list[str] = []

        for conn in [c for c in self._connections.values() if c.is_open]:
            silence = conn.seconds_since_pong(now)
            if silence > self.HEARTBEAT_TIMEOUT:
                logger.warning(
                    "No pong from client, dropping connection",
                    extra={
                        "connection_id": conn.connection_id,
                        "last_pong_seconds_ago": round(silence, 2),
                    },
                )
                dead.append(conn.connection_id)
            elif await self.send(conn, {"type": "ping", "timestamp": now}):
                conn.last_ping = now
            else:
                dead.append(conn.connection_id)

        for connection_id in dead:
            await self.disconnect(connection_id, reason="heartbeat_timeout")

    # -------------------------------------------------------------------------
    # Connection lifecycle
    # -------------------------------------------------------------------------

    async def connect(self, websocket: WebSocket) -> WebSocketConnection:
        """Accept the socket, register it and send the "connected" greeting."""
        await websocket.accept()

        conn = WebSocketConnection(websocket=websocket)
        conn.checker = self._build_checker(conn)
        conn.state = ConnectionState.CONNECTED
        self._connections[conn.connection_id] = conn

        logger.info(
            "Compliance WebSocket opened",
            extra={
                "connection_id": conn.connection_id,
                "client_host": websocket.client.host if websocket.client else None,
            },
        )
        await self.send(
            conn,
            {
                "type": "connected",
                "connection_id": conn.connection_id,
                "heartbeat_interval": self.HEARTBEAT_INTERVAL,
                "reconnect_advice": RECONNECT_ADVICE,
            },
        )
        return conn

    async def disconnect(
        self,
        connection_id: str,
        reason: str | None = None,
        code: int = 1000,
    ) -> None:
        """Cancel pending checks, close the socket and forget the connection."""
        conn = self._connections.pop(connection_id, None)
        if conn is None:
            return

        conn.state = ConnectionState.CLOSING
        if conn.checker is not None:
            await conn.checker.close()
        # The client may already be gone
        with contextlib.suppress(Exception):
            await conn.websocket.close(code=code, reason=reason)
        conn.state = ConnectionState.CLOSED

        logger.info(
            "Compliance WebSocket closed",
            extra={"connection_id": connection_id, "close_reason": reason, "close_code": code},
        )

    async def broadcast_shutdown(self, reason: str = "server_shutdown") -> None:
        """Tell every client the server is going away and how to reconnect."""
        notice = {"type": "shutdown", "reason": reason, "reconnect_advice": RECONNECT_ADVICE}
        delivered = 0
        for conn in list(self._connections.values()):
            delivered += await self.send(conn, notice)
        logger.info(
            "Shutdown notice sent",
            extra={"connection_count": self.connection_count, "delivered": delivered},
        )

    async def run_connection(self, websocket: WebSocket) -> None:
        """Serve one client until it disconnects."""
        conn = await self.connect(websocket)
        reason = "connection_ended"
        try:
            while conn.is_open:
                raw_message = await websocket.receive_text()
                reply = await self.handle_message(conn, raw_message)
                if reply:
                    await self.send(conn, reply)
        except WebSocketDisconnect as e:
            reason = f"client_disconnect ({e.code})"
        except Exception as e:
            logger.error(
                "Compliance WebSocket loop failed",
                extra={"connection_id": conn.connection_id, "error_type": type(e).__name__},
                exc_info=True,
            )
        finally:
            await self.disconnect(conn.connection_id, reason=reason)

    # -------------------------------------------------------------------------
    # Messaging
    # -------------------------------------------------------------------------

    async def send(self, conn: WebSocketConnection, message: Message) -> bool:
        """Send a JSON message; False when the connection is closed or broken."""
        if not conn.is_open:
            return False

        payload = json.dumps(message, ensure_ascii=False)
        try:
            await conn.websocket.send_text(payload)
        except Exception as e:
            logger.error(
                "Failed to send WebSocket message",
                extra={
                    "connection_id": conn.connection_id,
                    "message_type": message.get("type"),
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            return False

        logger.debug(
            "WebSocket message sent",
            extra={
                "connection_id": conn.connection_id,
                "message_type": message.get("type"),
                "payload_size": len(payload),
            },
        )
        return True

    async def handle_message(
        self, conn: WebSocketConnection, raw_message: str
    ) -> Message | None:
        """Dispatch one client message; returns the immediate reply, if any."""
        try:
            message = json.loads(raw_message)
        except json.JSONDecodeError:
            return error_message("INVALID_JSON", "Invalid JSON message")
        if not isinstance(message, dict):
            return error_message("INVALID_MESSAGE", "Message must be a JSON object")

        message_type = message.get("type")
        logger.debug(
            "WebSocket message received",
            extra={
                "connection_id": conn.connection_id,
                "message_type": message_type,
                "payload_size": len(raw_message),
            },
        )

        handler = self._handlers.get(message_type) if isinstance(message_type, str) else None
        if handler is None:
            return error_message("UNKNOWN_MESSAGE_TYPE", f"Unknown message type: {message_type}")
        return await handler(conn, message)

    async def _on_ping(self, conn: WebSocketConnection, message: Message) -> Message:
        return {"type": "pong", "timestamp": time.time()}

    async def _on_pong(self, conn: WebSocketConnection, message: Message) -> None:
        conn.last_pong = time.time()
        return None

    async def _on_configure(self, conn: WebSocketConnection, message: Message) -> Message:
        industry_slug = message.get("industry_slug")
        if not isinstance(industry_slug, str) or not industry_slug.strip():
            return error_message("MISSING_INDUSTRY_SLUG", "industry_slug is required for configure")

        language = message.get("language") or "ja"
        if language not in LANGUAGES:
            return error_message("INVALID_LANGUAGE", f"Unsupported language: {language}")

        conn.session = ComplianceSession(
            industry_slug=industry_slug.strip().lower(),
            content_type=message.get("content_type"),
            language=language,
        )
        # Results computed under the old settings no longer apply
        if conn.checker is not None:
            conn.checker.reset()

        logger.info(
            "Compliance session configured",
            extra={"connection_id": conn.connection_id, **conn.session.to_dict()},
        )
        return {"type": "configured", **conn.session.to_dict()}

    async def _on_check(self, conn: WebSocketConnection, message: Message) -> Message | None:
        if not conn.session.configured:
            return error_message("NOT_CONFIGURED", "Send a configure message before check")

        structured = message.get("structured")
        content = (
            structured_to_plain_text(structured)
            if isinstance(structured, dict)
            else message.get("content")
        )
        if not isinstance(content, str):
            return error_message("MISSING_CONTENT", "content or structured is required for check")

        if conn.checker is not None:
            conn.checker.submit(content)
        return None

    async def _on_reset(self, conn: WebSocketConnection, message: Message) -> Message:
        if conn.checker is not None:
            conn.checker.reset()
        return {"type": "reset"}

    # -------------------------------------------------------------------------
    # Compliance checks
    # -------------------------------------------------------------------------

    def _build_checker(self, conn: WebSocketConnection) -> DebouncedComplianceChecker:
        async def check(content: str) -> ComplianceCheckResult:
            session = conn.session
            return await get_compliance_service().check_compliance(
                content,
                session.industry_slug or "",
                content_type=session.content_type,
                language=session.language,
            )

        async def on_checking() -> None:
            await self.send(conn, {"type": "checking"})

        async def on_result(result: ComplianceCheckResult) -> None:
            await self.send(
                conn,
                {"type": "compliance_result", "result": result.to_dict(), "timestamp": time.time()},
            )

        async def on_error(error: Exception) -> None:
            if isinstance(error, ServiceError):
                await self.send(conn, error_message(error.code, error.message))
            else:
                await self.send(conn, error_message("CHECK_FAILED", "Compliance check failed"))

        return DebouncedComplianceChecker(
            check,
            on_result=on_result,
            debounce_seconds=self._debounce_seconds,
            on_error=on_error,
            on_checking=on_checking,
        )


connection_manager = ComplianceConnectionManager()
