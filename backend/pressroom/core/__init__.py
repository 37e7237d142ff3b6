"""Core utilities and configuration."""

from pressroom.core.config import Settings, get_settings
from pressroom.core.errors import ServiceError
from pressroom.core.logging import compliance_logger, get_logger, llm_logger, setup_logging

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "ServiceError",
    # Logging
    "compliance_logger",
    "get_logger",
    "llm_logger",
    "setup_logging",
]
