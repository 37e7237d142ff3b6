"""Tests for health endpoints and framework error envelopes."""

from fastapi.testclient import TestClient


class TestHealthEndpoints:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_integrations(self, client: TestClient) -> None:
        response = client.get("/health/integrations")

        data = response.json()
        assert data["claude"]["api_key_set"] is False
        assert data["claude"]["circuit_breaker"] == "closed"
        assert data["claude"]["title_model"] == "claude-3-5-haiku-20241022"
        assert data["auth"] == {"required": False, "supabase_url_set": False}

    def test_websocket_health(self, client: TestClient) -> None:
        response = client.get("/api/v1/ws/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestErrorEnvelope:
    def test_unknown_route(self, client: TestClient) -> None:
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND"
        assert body["request_id"] == response.headers["X-Request-ID"]

    def test_wrong_method(self, client: TestClient) -> None:
        response = client.get("/api/v1/compliance/check")

        assert response.status_code == 405
        assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_malformed_json(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/compliance/check",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
