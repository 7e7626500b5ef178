"""Token cache port definition (interface)."""

from typing import Protocol

__all__ = ["TokenCachePort"]


class TokenCachePort(Protocol):
    """Key-value store for the last known valid bearer token.

    Entries never expire on their own; a stale token is only replaced
    by overwriting it after a fresh fetch.
    """

    def get(self, key: str, /) -> str | None:
        """Return the token stored under key, or None on a miss."""
        ...

    def set(self, key: str, token: str, /) -> None:
        """Store token under key, replacing any previous value."""
        ...
