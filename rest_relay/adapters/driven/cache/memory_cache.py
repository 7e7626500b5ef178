"""Process-local token cache."""

import logging

from rest_relay.ports.token_cache import TokenCachePort

__all__ = ["InMemoryTokenCache"]

logger = logging.getLogger(__name__)


class InMemoryTokenCache(TokenCachePort):
    """Plain dict-backed cache with overwrite-only semantics.

    No expiry and no clock: a token stays until a newer one replaces it.
    Safe for concurrent coroutines on one event loop (no awaits inside).
    """

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._tokens.get(key)

    def set(self, key: str, token: str) -> None:
        replaced = key in self._tokens
        self._tokens[key] = token
        logger.debug(f"Token for {key!r} {'replaced' if replaced else 'cached'}")

    def __len__(self) -> int:
        return len(self._tokens)
