"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

__all__ = ["HttpAttemptDto", "MetricsPort"]


@dataclass(slots=True, frozen=True)
class HttpAttemptDto:
    """Immutable snapshot of a single HTTP attempt.

    Attributes:
        method: HTTP method used.
        url: Target URL.
        latency_ms: Time from send to fully read response (or failure).
        is_failed: True on network error or status >= 400.
        status_code: HTTP status code when response arrived; None otherwise.
    """

    method: str
    url: str
    latency_ms: float
    is_failed: bool = False
    status_code: int | None = None


class MetricsPort(Protocol):
    """Interface for recording HTTP attempt metrics.

    Implementations must be async-safe and non-blocking.
    The HTTP client calls update() after each attempt; presentation layers
    call __str__() to render summaries.
    """

    def update(self, attempt: HttpAttemptDto, /) -> None:
        """Record a finished HTTP attempt.

        Args:
            attempt: The attempt to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...
