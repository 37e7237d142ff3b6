"""WebSocket endpoint for real-time compliance checks in the editor.

Deployment Requirements:
- Heartbeat/ping keeps connections alive
- Handle reconnection gracefully (deploys will disconnect clients)
- Fallback to the REST check endpoint is handled client-side
"""

from fastapi import APIRouter, WebSocket

from pressroom.core.websocket import connection_manager

router = APIRouter()


@router.websocket("/ws/compliance")
async def compliance_websocket(websocket: WebSocket) -> None:
    """Live compliance feedback for the content editor.

    Message Protocol:
    -----------------

    **Client -> Server Messages:**

    Configure the session (required before checks):
    ```json
    {"type": "configure", "industry_slug": "pharmaceutical",
     "content_type": "press_release", "language": "ja"}
    ```

    Submit editor content (debounced, 1 second):
    ```json
    {"type": "check", "content": "..."}
    {"type": "check", "structured": {"headline": "...", "body": ["..."]}}
    ```

    Forget the last content and result:
    ```json
    {"type": "reset"}
    ```

    Ping / pong:
    ```json
    {"type": "ping"}
    {"type": "pong"}
    ```

    **Server -> Client Messages:**

    - ``connected``: connection_id, heartbeat_interval, reconnect_advice
    - ``configured``: the session settings
    - ``checking``: a debounced check has started
    - ``compliance_result``: result (score, rating, details, suggestions)
    - ``error``: code and error description
    - ``ping``: server heartbeat, answer with pong
    - ``shutdown``: server is going away, reconnect with backoff

    Content under 50 characters or identical to the previous submission is
    not checked.
    """
    await connection_manager.run_connection(websocket)


@router.get("/ws/health")
async def websocket_health() -> dict[str, str | int | bool]:
    """Health check for the WebSocket connection manager."""
    return {
        "status": "ok",
        "active_connections": connection_manager.connection_count,
        "heartbeat_enabled": connection_manager.heartbeat_running,
    }
