"""Application configuration loaded from environment variables.

All configuration is via environment variables (or a local .env file).
No hardcoded URLs, ports, or credentials.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Pressroom Content Service")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    port: int = Field(default=8000, description="Port to bind to")
    host: str = Field(default="0.0.0.0", description="Host to bind to")
    frontend_url: str | None = Field(
        default=None,
        description="Allowed CORS origin for the portal frontend",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format: json or text")

    # Auth (Supabase-issued JWTs)
    auth_required: bool = Field(
        default=False,
        description="Require a valid Supabase session token on API calls",
    )
    supabase_url: str | None = Field(
        default=None,
        description="Supabase project URL (e.g., https://xyz.supabase.co)",
    )
    supabase_anon_key: str | None = Field(
        default=None,
        description="Supabase anon key, sent as apikey when verifying tokens",
    )
    auth_timeout: float = Field(
        default=10.0, description="Token verification timeout in seconds"
    )

    # Claude/Anthropic LLM
    anthropic_api_key: str | None = Field(
        default=None,
        description="Anthropic API key for Claude models",
    )
    claude_timeout: float = Field(
        default=90.0, description="Claude API request timeout in seconds"
    )
    claude_max_retries: int = Field(
        default=3, description="Maximum retry attempts for Claude API requests"
    )
    claude_retry_delay: float = Field(
        default=1.0, description="Base delay between retries in seconds"
    )
    # Circuit breaker settings for Claude
    claude_circuit_failure_threshold: int = Field(
        default=5, description="Failures before circuit opens"
    )
    claude_circuit_recovery_timeout: float = Field(
        default=60.0, description="Seconds before attempting recovery"
    )

    # Generation
    generation_model: str = Field(
        default="claude-sonnet-4-5-20250929",
        description="Model used for content and variant generation",
    )
    generation_max_tokens: int = Field(
        default=4096, description="Maximum tokens for generated content"
    )
    compliance_model: str = Field(
        default="claude-sonnet-4-5-20250929",
        description="Model used for AI compliance analysis",
    )
    compliance_max_tokens: int = Field(
        default=2048, description="Maximum tokens for compliance analysis"
    )
    title_model: str = Field(
        default="claude-3-5-haiku-20241022",
        description="Model used for title suggestions (fast/cheap)",
    )
    title_max_tokens: int = Field(
        default=512, description="Maximum tokens for title suggestions"
    )
    variant_count: int = Field(
        default=3, ge=1, le=3, description="Number of variants generated per brief"
    )
    variant_base_temperature: float = Field(
        default=0.7, description="Sampling temperature of the first variant"
    )
    variant_temperature_step: float = Field(
        default=0.1, description="Temperature increase per additional variant"
    )

    # Compliance
    compliance_quick_check_max_length: int = Field(
        default=100,
        description="Content shorter than this is only checked locally (no AI)",
    )
    realtime_debounce_seconds: float = Field(
        default=1.0, description="Debounce delay for editor compliance checks"
    )
    realtime_min_content_length: int = Field(
        default=50, description="Editor content shorter than this is not checked"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
