"""Exceptions raised by the relay plugin."""

from typing import Any

__all__ = [
    "RelayError",
    "InitializationError",
    "TokenFetchError",
    "SendError",
    "RetryableError",
    "HealthCheckError",
    "InvalidTokenResponseError",
]


class RelayError(Exception):
    """Base class for errors raised by the relay plugin."""


class InitializationError(RelayError):
    """Startup could not obtain a valid token within the retry budget.

    Terminal: the plugin is unusable and relay() must not be called.
    """


class TokenFetchError(RelayError):
    """A standalone token fetch exhausted its retry budget."""


class SendError(RelayError):
    """The destination answered with a non-2xx status.

    Attributes:
        status: HTTP status of the final response.
    """

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


class RetryableError(RelayError):
    """A single attempt failed in a way that is worth retrying.

    Attributes:
        detail: Raw response or object that caused the failure.
    """

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.detail = detail


class HealthCheckError(RetryableError):
    """The auth service health endpoint did not answer 200."""


class InvalidTokenResponseError(RetryableError):
    """The token endpoint answered without a usable token."""
