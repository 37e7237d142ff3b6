"""Tests for the compliance WebSocket connection manager.

The WebSocket is a MagicMock; sent messages are read back from
send_text calls.
"""

import json
import time
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from pressroom.core.websocket import (
    ComplianceConnectionManager,
    ConnectionState,
    WebSocketConnection,
)

PROHIBITED_TEXT = (
    "この新薬は最も効果的な治療法です。多くの患者様にご利用いただいております。"
    "発売は来年四月を予定しています。"
)


def _websocket() -> MagicMock:
    websocket = MagicMock()
    websocket.client.host = "127.0.0.1"
    websocket.accept = AsyncMock()
    websocket.send_text = AsyncMock()
    websocket.close = AsyncMock()
    return websocket


def _sent(websocket: MagicMock) -> list[dict[str, Any]]:
    return [json.loads(c.args[0]) for c in websocket.send_text.call_args_list]


@pytest.fixture
def manager() -> ComplianceConnectionManager:
    return ComplianceConnectionManager(debounce_seconds=0.01)


@pytest.fixture
async def conn(
    manager: ComplianceConnectionManager,
) -> AsyncGenerator[WebSocketConnection, None]:
    connection = await manager.connect(_websocket())
    yield connection
    await manager.disconnect(connection.connection_id)


class TestConnectionLifecycle:
    """Tests for connect/disconnect."""

    @pytest.mark.asyncio
    async def test_connect_sends_welcome(self, manager: ComplianceConnectionManager) -> None:
        websocket = _websocket()

        conn = await manager.connect(websocket)

        websocket.accept.assert_awaited_once()
        assert conn.state == ConnectionState.CONNECTED
        assert manager.connection_count == 1
        welcome = _sent(websocket)[0]
        assert welcome["type"] == "connected"
        assert welcome["connection_id"] == conn.connection_id
        assert welcome["reconnect_advice"]["should_reconnect"] is True

    @pytest.mark.asyncio
    async def test_disconnect(self, manager: ComplianceConnectionManager) -> None:
        websocket = _websocket()
        conn = await manager.connect(websocket)

        await manager.disconnect(conn.connection_id, reason="bye")

        assert manager.connection_count == 0
        assert conn.state == ConnectionState.CLOSED
        websocket.close.assert_awaited_once_with(code=1000, reason="bye")

    @pytest.mark.asyncio
    async def test_disconnect_unknown_id(self, manager: ComplianceConnectionManager) -> None:
        await manager.disconnect("missing")
        assert manager.connection_count == 0

    @pytest.mark.asyncio
    async def test_broadcast_shutdown(self, manager: ComplianceConnectionManager) -> None:
        websockets = [_websocket(), _websocket()]
        for websocket in websockets:
            await manager.connect(websocket)

        await manager.broadcast_shutdown()

        for websocket in websockets:
            assert _sent(websocket)[-1]["type"] == "shutdown"

    @pytest.mark.asyncio
    async def test_heartbeat_drops_stale_connection(
        self, manager: ComplianceConnectionManager
    ) -> None:
        conn = await manager.connect(_websocket())
        conn.last_pong = time.time() - manager.HEARTBEAT_TIMEOUT - 1

        await manager._send_heartbeats()

        assert manager.connection_count == 0

    @pytest.mark.asyncio
    async def test_heartbeat_pings_live_connection(
        self, manager: ComplianceConnectionManager
    ) -> None:
        websocket = _websocket()
        await manager.connect(websocket)

        await manager._send_heartbeats()

        assert _sent(websocket)[-1]["type"] == "ping"
        assert manager.connection_count == 1

    @pytest.mark.asyncio
    async def test_start_stop_heartbeat(self, manager: ComplianceConnectionManager) -> None:
        await manager.start_heartbeat()
        assert manager.heartbeat_running is True

        await manager.stop_heartbeat()
        assert manager.heartbeat_running is False


class TestHandleMessage:
    """Tests for handle_message."""

    @pytest.mark.asyncio
    async def test_ping(self, manager: ComplianceConnectionManager, conn) -> None:
        response = await manager.handle_message(conn, '{"type": "ping"}')
        assert response is not None
        assert response["type"] == "pong"

    @pytest.mark.asyncio
    async def test_pong_updates_last_pong(
        self, manager: ComplianceConnectionManager, conn
    ) -> None:
        conn.last_pong = 0.0

        response = await manager.handle_message(conn, '{"type": "pong"}')

        assert response is None
        assert conn.last_pong > 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw,code",
        [
            ("not json", "INVALID_JSON"),
            ("[1, 2]", "INVALID_MESSAGE"),
            ('{"type": "subscribe"}', "UNKNOWN_MESSAGE_TYPE"),
        ],
    )
    async def test_invalid_messages(
        self, manager: ComplianceConnectionManager, conn, raw: str, code: str
    ) -> None:
        response = await manager.handle_message(conn, raw)
        assert response["type"] == "error"
        assert response["code"] == code

    @pytest.mark.asyncio
    async def test_configure(self, manager: ComplianceConnectionManager, conn) -> None:
        response = await manager.handle_message(
            conn,
            json.dumps(
                {
                    "type": "configure",
                    "industry_slug": " Pharmaceutical ",
                    "content_type": "press_release",
                }
            ),
        )

        assert response == {
            "type": "configured",
            "industry_slug": "pharmaceutical",
            "content_type": "press_release",
            "language": "ja",
        }
        assert conn.session.configured is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "message,code",
        [
            ({"type": "configure"}, "MISSING_INDUSTRY_SLUG"),
            ({"type": "configure", "industry_slug": "  "}, "MISSING_INDUSTRY_SLUG"),
            (
                {"type": "configure", "industry_slug": "pharmaceutical", "language": "fr"},
                "INVALID_LANGUAGE",
            ),
        ],
    )
    async def test_configure_errors(
        self, manager: ComplianceConnectionManager, conn, message: dict, code: str
    ) -> None:
        response = await manager.handle_message(conn, json.dumps(message))

        assert response["code"] == code
        assert conn.session.configured is False

    @pytest.mark.asyncio
    async def test_check_requires_configure(
        self, manager: ComplianceConnectionManager, conn
    ) -> None:
        response = await manager.handle_message(
            conn, json.dumps({"type": "check", "content": PROHIBITED_TEXT})
        )
        assert response["code"] == "NOT_CONFIGURED"

    @pytest.mark.asyncio
    async def test_check_requires_content(
        self, manager: ComplianceConnectionManager, conn
    ) -> None:
        await manager.handle_message(
            conn, json.dumps({"type": "configure", "industry_slug": "pharmaceutical"})
        )

        response = await manager.handle_message(conn, json.dumps({"type": "check"}))

        assert response["code"] == "MISSING_CONTENT"

    @pytest.mark.asyncio
    async def test_check_pushes_result(self, manager: ComplianceConnectionManager, conn) -> None:
        await manager.handle_message(
            conn, json.dumps({"type": "configure", "industry_slug": "pharmaceutical"})
        )

        response = await manager.handle_message(
            conn, json.dumps({"type": "check", "content": PROHIBITED_TEXT}, ensure_ascii=False)
        )
        assert response is None
        await conn.checker.wait()

        messages = _sent(conn.websocket)
        types = [m["type"] for m in messages]
        assert types[-2:] == ["checking", "compliance_result"]
        result = messages[-1]["result"]
        assert result["source"] == "quick"
        assert result["score"] < 100
        assert any(
            s["type"] == "error" for s in result["suggestions"]
        )

    @pytest.mark.asyncio
    async def test_check_structured_content(
        self, manager: ComplianceConnectionManager, conn
    ) -> None:
        await manager.handle_message(
            conn, json.dumps({"type": "configure", "industry_slug": "pharmaceutical"})
        )

        await manager.handle_message(
            conn,
            json.dumps(
                {
                    "type": "check",
                    "structured": {"headline": "新薬発表", "body": [PROHIBITED_TEXT]},
                },
                ensure_ascii=False,
            ),
        )
        await conn.checker.wait()

        assert _sent(conn.websocket)[-1]["type"] == "compliance_result"

    @pytest.mark.asyncio
    async def test_reset(self, manager: ComplianceConnectionManager, conn) -> None:
        response = await manager.handle_message(conn, '{"type": "reset"}')
        assert response == {"type": "reset"}
