"""Startup readiness check and initial token acquisition."""

import asyncio
import logging
from http import HTTPStatus

import aiohttp

from rest_relay.adapters.driven.http.client import HttpClient
from rest_relay.core.errors import HealthCheckError, InitializationError, InvalidTokenResponseError
from rest_relay.core.retry import RETRYABLE_ERRORS, retry_call
from rest_relay.core.token_fetcher import TokenFetcher
from rest_relay.ports.observability import LOG_SOURCE, LoggerPort, NullLogger
from rest_relay.ports.settings import SettingsPort

__all__ = ["HealthProber", "HEALTH_RETRY_DELAY_SEC"]

logger = logging.getLogger(__name__)

HEALTH_RETRY_DELAY_SEC = 0.5


class HealthProber:
    """Wait for the auth service and obtain the first token.

    Each attempt probes the health endpoint and, when it answers 200,
    requests a token. Only a usable token ends the loop; a healthy probe
    followed by a bad token response counts as a failed attempt and is
    followed by the same backoff as a failed probe.
    """

    def __init__(
        self,
        settings: SettingsPort,
        http: HttpClient,
        fetcher: TokenFetcher,
        logger: LoggerPort | None = None,
    ) -> None:
        self.settings = settings
        self.http = http
        self.fetcher = fetcher
        self.logger: LoggerPort = logger if logger is not None else NullLogger()

    async def probe(self) -> None:
        """GET the health endpoint once.

        Raises:
            HealthCheckError: If the status is not 200.
            aiohttp.ClientError: Network failure.
        """
        url = self.settings.auth_health_url
        try:
            response = await self.http.get(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Probe failed for {url}: {e!r}")
            self.logger.error("Health check request failed, trying again", e, LOG_SOURCE)
            raise

        if response.status != HTTPStatus.OK:
            logger.warning(f"Probe for {url} returned status {response.status}")
            self.logger.log("Health check failed, trying again", LOG_SOURCE)
            raise HealthCheckError(f"Health check returned {response.status}", detail=response)

    async def acquire_initial_token(self) -> str:
        """Probe, then fetch and cache a token, within one retry budget.

        Returns:
            The cached token.

        Raises:
            InitializationError: If no attempt produced a usable token.
        """
        try:
            token = await retry_call(
                self._attempt,
                times=self.settings.retry_attempts,
                delay_sec=HEALTH_RETRY_DELAY_SEC,
            )
        except RETRYABLE_ERRORS as e:
            self.logger.error(
                f"Failed to initialize {LOG_SOURCE} after multiple attempts", e, LOG_SOURCE
            )
            raise InitializationError("Initialization failed: Unable to fetch a valid token") from e

        logger.info("Auth service healthy, initial token cached")
        return token

    async def _attempt(self) -> str:
        await self.probe()
        try:
            return await self.fetcher.request_token()
        except InvalidTokenResponseError as e:
            self.logger.error("Token response is invalid", e.detail, LOG_SOURCE)
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error("Error fetching token", e, LOG_SOURCE)
            raise
