"""Configuration loading from environment variables."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator

from rest_relay.ports.settings import SettingsPort

__all__ = ["Settings", "load_settings"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

_INT_VARS = ("RETRY_ATTEMPTS", "MAX_SOCKETS")
_STR_VARS = (
    "AUTH_HEALTH_URL",
    "AUTH_TOKEN_URL",
    "DESTINATION_TRANSPORT_URL",
    "AUTH_USERNAME",
    "AUTH_PASSWORD",
)


class Settings(BaseModel):
    """Runtime configuration for the relay plugin.

    Attributes:
        retry_attempts: Attempts for health probing and token fetching.
        max_sockets: Maximum pooled connections.
        auth_health_url: Auth service readiness endpoint.
        auth_token_url: Auth service token endpoint.
        destination_transport_url: Endpoint receiving relayed payloads.
        auth_username: Principal name.
        auth_password: Principal secret.
    """

    retry_attempts: int = Field(..., ge=1, description="Attempt budget for retry loops.")
    max_sockets: int = Field(..., ge=1, description="Maximum pooled connections.")
    auth_health_url: str = Field(..., description="Auth service health endpoint.")
    auth_token_url: str = Field(..., description="Auth service token endpoint.")
    destination_transport_url: str = Field(..., description="Destination REST endpoint.")
    auth_username: str = Field(..., min_length=1, description="Principal name.")
    auth_password: str = Field(..., repr=False, description="Principal secret.")

    @field_validator("auth_health_url", "auth_token_url", "destination_transport_url")
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        """Validate that a URL uses http or https.

        Args:
            v: URL to validate.

        Returns:
            The validated URL.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        try:
            url = _http_url_adapter.validate_python(v)
        except Exception as e:
            raise ValueError(f"Invalid URL: {e}") from e
        if url.scheme not in ("http", "https"):
            raise ValueError(f"Only http:// and https:// URLs allowed (got: {url.scheme})")
        return v

    def to_port(self) -> SettingsPort:
        """Return the immutable settings consumed by the core."""
        return SettingsPort(
            retry_attempts=self.retry_attempts,
            max_sockets=self.max_sockets,
            auth_health_url=self.auth_health_url,
            auth_token_url=self.auth_token_url,
            destination_transport_url=self.destination_transport_url,
            auth_username=self.auth_username,
            auth_password=self.auth_password,
        )


def load_settings() -> Settings:
    """Load and validate settings from the environment (and .env).

    Required environment variables:
    - RETRY_ATTEMPTS: Positive integer.
    - MAX_SOCKETS: Positive integer.
    - AUTH_HEALTH_URL, AUTH_TOKEN_URL, DESTINATION_TRANSPORT_URL: http(s) URLs.
    - AUTH_USERNAME, AUTH_PASSWORD: Credentials for the token endpoint.

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If required env vars missing or counts invalid.
        ValueError: If a URL or credential is invalid.
    """
    try:
        raw = {name: os.environ[name] for name in _INT_VARS + _STR_VARS}
    except KeyError as e:
        raise RuntimeError(f"Missing required environment variable: {e.args[0]}") from e

    counts: dict[str, int] = {}
    for name in _INT_VARS:
        try:
            value = int(raw[name])
            if value <= 0:
                raise ValueError("Must be positive")
        except ValueError as e:
            raise RuntimeError(f"{name} must be a positive integer (got: {raw[name]})") from e
        counts[name.lower()] = value

    settings = Settings(
        **counts,
        **{name.lower(): raw[name] for name in _STR_VARS},
    )

    logger.info(
        f"Relay configured: retries={settings.retry_attempts}, "
        f"max_sockets={settings.max_sockets}, "
        f"health={settings.auth_health_url}, "
        f"token={settings.auth_token_url}, "
        f"destination={settings.destination_transport_url}"
    )

    return settings
