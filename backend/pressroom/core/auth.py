"""Authentication dependency for FastAPI.

Validates Supabase access tokens against the Supabase Auth REST API.
When AUTH_REQUIRED=false, returns a dev user without checking headers.
"""

from dataclasses import dataclass

import httpx
from fastapi import Request

from pressroom.core.config import get_settings
from pressroom.core.errors import ConfigurationError, UnauthorizedError
from pressroom.core.logging import get_logger, mask_bearer_token, mask_secret

logger = get_logger(__name__)


@dataclass
class UserInfo:
    """Authenticated user information."""

    id: str
    email: str
    name: str


_DEV_USER = UserInfo(id="dev-user", email="dev@localhost", name="Dev User")


def _user_from_payload(payload: dict) -> UserInfo:
    metadata = payload.get("user_metadata") or {}
    email = payload.get("email") or ""
    return UserInfo(
        id=str(payload.get("id", "")),
        email=email,
        name=metadata.get("full_name") or metadata.get("name") or email,
    )


async def verify_token(token: str) -> UserInfo:
    """Resolve a Supabase access token to the user it belongs to.

    Raises:
        UnauthorizedError: If Supabase rejects the token or is unreachable
        ConfigurationError: If SUPABASE_URL is not set
    """
    settings = get_settings()
    if not settings.supabase_url:
        raise ConfigurationError("SUPABASE_URL is not configured")

    headers = {"Authorization": f"Bearer {token}"}
    if settings.supabase_anon_key:
        headers["apikey"] = settings.supabase_anon_key

    url = settings.supabase_url.rstrip("/") + "/auth/v1/user"
    try:
        async with httpx.AsyncClient(timeout=settings.auth_timeout) as client:
            response = await client.get(url, headers=headers)
    except httpx.HTTPError as e:
        logger.warning(
            "Token verification request failed",
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        raise UnauthorizedError("Unable to verify session") from e

    if response.status_code != 200:
        logger.warning(
            "Token rejected by Supabase",
            extra={"status_code": response.status_code, "token": mask_secret(token)},
        )
        raise UnauthorizedError("Invalid or expired session")

    return _user_from_payload(response.json())


async def get_current_user(request: Request) -> UserInfo:
    """FastAPI dependency that validates the bearer token and returns the current user.

    When AUTH_REQUIRED=false, returns a dev user without checking headers.
    """
    settings = get_settings()

    if not settings.auth_required:
        return _DEV_USER

    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        logger.info(
            "Request without bearer token",
            extra={"authorization": mask_bearer_token(auth_header or "")},
        )
        raise UnauthorizedError("Not authenticated")

    return await verify_token(auth_header[7:])
