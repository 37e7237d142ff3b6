"""Pytest configuration and fixtures.

Provides fixtures for:
- Settings isolation (no real API keys or .env values leak into tests)
- A mocked Claude client installed as the global client
- FastAPI test client
"""

from collections.abc import Generator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

import pressroom.integrations.claude as claude_module
import pressroom.services.brief_expansion as brief_module
import pressroom.services.compliance as compliance_module
import pressroom.services.content_generation as generation_module
import pressroom.services.title_enhancement as title_module
import pressroom.services.tone_adjustment as tone_module
from pressroom.core.config import Settings, get_settings
from pressroom.integrations.claude import ClaudeClient, CompletionResult

_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "AUTH_REQUIRED",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "FRONTEND_URL",
    "LOG_FORMAT",
)


# ---------------------------------------------------------------------------
# Settings / singleton isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Start every test from default settings and fresh singletons."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_FORMAT", "text")
    # Keep a local .env file out of the tests
    monkeypatch.setitem(Settings.model_config, "env_file", None)
    get_settings.cache_clear()

    claude_module.claude_client = None
    compliance_module._compliance_service = None
    generation_module._content_generation_service = None
    title_module._title_enhancement_service = None
    tone_module._tone_adjustment_service = None
    brief_module._brief_expansion_service = None

    yield

    claude_module.claude_client = None
    compliance_module._compliance_service = None
    generation_module._content_generation_service = None
    title_module._title_enhancement_service = None
    tone_module._tone_adjustment_service = None
    brief_module._brief_expansion_service = None
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Claude fixtures
# ---------------------------------------------------------------------------


def make_completion(text: str | None = None, **kwargs: Any) -> CompletionResult:
    """Build a CompletionResult; success unless ``error`` is given."""
    success = kwargs.pop("success", "error" not in kwargs)
    kwargs.setdefault("model", "claude-test")
    return CompletionResult(success=success, text=text, **kwargs)


@pytest.fixture
def mock_claude() -> MagicMock:
    """A configured Claude client whose complete() is an AsyncMock."""
    client = MagicMock(spec=ClaudeClient)
    client.available = True
    client.model = "claude-test"
    client.complete = AsyncMock(return_value=make_completion("{}"))
    return client


@pytest.fixture
def unavailable_claude() -> MagicMock:
    """A Claude client without an API key."""
    client = MagicMock(spec=ClaudeClient)
    client.available = False
    client.complete = AsyncMock(
        return_value=make_completion(error="Claude not configured (missing API key)")
    )
    return client


@pytest.fixture
def installed_claude(mock_claude: MagicMock) -> Generator[MagicMock, None, None]:
    """Install mock_claude as the global client returned by get_claude()."""
    claude_module.claude_client = mock_claude
    yield mock_claude
    claude_module.claude_client = None


# ---------------------------------------------------------------------------
# FastAPI Test Client Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def app():
    """Create FastAPI app for testing."""
    from pressroom.main import create_app

    return create_app()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Synchronous test client (lifespan not started)."""
    test_client = TestClient(app, raise_server_exceptions=False)
    yield test_client
    app.dependency_overrides.clear()
