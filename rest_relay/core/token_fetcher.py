"""Bearer token acquisition against the authentication service."""

import asyncio
import json
import logging

import aiohttp

from rest_relay.adapters.driven.http.client import HttpClient
from rest_relay.core.errors import InvalidTokenResponseError, TokenFetchError
from rest_relay.core.retry import RETRYABLE_ERRORS, retry_call
from rest_relay.ports.http import HttpResponseDto
from rest_relay.ports.observability import LOG_SOURCE, LoggerPort, NullLogger
from rest_relay.ports.settings import SettingsPort
from rest_relay.ports.token_cache import TokenCachePort

__all__ = ["TokenFetcher", "TOKEN_RETRY_DELAY_SEC"]

logger = logging.getLogger(__name__)

TOKEN_RETRY_DELAY_SEC = 5.0


def parse_token(response: HttpResponseDto) -> str | None:
    """Extract the raw token string from a token endpoint response.

    The body is the token itself. A body holding a JSON string literal is
    unwrapped. Non-2xx responses and empty bodies yield None.
    """
    if not response.ok:
        return None
    token = response.text.strip()
    if token.startswith('"') and token.endswith('"'):
        try:
            token = json.loads(token)
        except json.JSONDecodeError:
            pass
    return token or None


class TokenFetcher:
    """Exchange the configured credentials for a bearer token.

    Successful fetches overwrite the cached token for the configured
    username; nothing else invalidates it.
    """

    def __init__(
        self,
        settings: SettingsPort,
        http: HttpClient,
        cache: TokenCachePort,
        logger: LoggerPort | None = None,
    ) -> None:
        self.settings = settings
        self.http = http
        self.cache = cache
        self.logger: LoggerPort = logger if logger is not None else NullLogger()

    async def request_token(self) -> str:
        """POST credentials once and cache the returned token.

        Returns:
            The new token.

        Raises:
            InvalidTokenResponseError: Empty body or non-2xx status.
            aiohttp.ClientError: Network failure, propagated unchanged.
        """
        response = await self.http.post(
            self.settings.auth_token_url,
            json={
                "username": self.settings.auth_username,
                "password": self.settings.auth_password,
            },
        )
        token = parse_token(response)
        if token is None:
            raise InvalidTokenResponseError(
                f"Token endpoint answered {response.status} without a token", detail=response
            )

        self.cache.set(self.settings.auth_username, token)
        return token

    async def fetch_token(self) -> str:
        """Fetch a token, retrying up to retry_attempts times.

        Waits TOKEN_RETRY_DELAY_SEC between failed attempts. The first
        usable token is cached and returned immediately.

        Returns:
            The new token.

        Raises:
            TokenFetchError: If every attempt failed.
        """
        try:
            return await retry_call(
                self._attempt,
                times=self.settings.retry_attempts,
                delay_sec=TOKEN_RETRY_DELAY_SEC,
            )
        except RETRYABLE_ERRORS as e:
            logger.error(f"Token fetch gave up after {self.settings.retry_attempts} attempts")
            raise TokenFetchError("Failed to fetch token after multiple attempts") from e

    async def _attempt(self) -> str:
        try:
            return await self.request_token()
        except InvalidTokenResponseError as e:
            logger.warning(f"Invalid token response: {e}")
            self.logger.error("Invalid token response", e.detail, LOG_SOURCE)
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Error fetching token: {e!r}")
            self.logger.error("Error fetching token", e, LOG_SOURCE)
            raise
