"""REST relay transport plugin: lifecycle and relay entry point."""

import logging
from types import TracebackType

from rest_relay.adapters.driven.cache.memory_cache import InMemoryTokenCache
from rest_relay.adapters.driven.http.client import HttpClient
from rest_relay.core.health_prober import HealthProber
from rest_relay.core.sender import Sender
from rest_relay.core.token_fetcher import TokenFetcher
from rest_relay.ports.http import Payload
from rest_relay.ports.metrics import MetricsPort
from rest_relay.ports.observability import (
    LOG_SOURCE,
    LoggerPort,
    NullLogger,
    NullTracer,
    TracerPort,
)
from rest_relay.ports.settings import SettingsPort
from rest_relay.ports.token_cache import TokenCachePort

__all__ = ["RestRelayPlugin"]

logger = logging.getLogger(__name__)

_PAYLOAD_TYPES = (bytes, bytearray, memoryview, str)


class RestRelayPlugin:
    """Relay opaque payloads to a REST endpoint with bearer authentication.

    Usage:
        plugin = RestRelayPlugin(settings)
        await plugin.init(logger, tracer)
        await plugin.relay(b"...")
        await plugin.close()

    init() must succeed before relay() is used. Concurrent relay() calls
    are allowed; they share the connection pool and the token cache, and
    simultaneous cache misses each fetch their own token (last write wins).
    """

    def __init__(
        self,
        settings: SettingsPort,
        *,
        http: HttpClient | None = None,
        cache: TokenCachePort | None = None,
        metrics: MetricsPort | None = None,
    ) -> None:
        """Build the plugin and its connection pool.

        Args:
            settings: Validated runtime settings.
            http: HTTP client to use; one bounded by settings.max_sockets by default.
            cache: Token cache; an in-memory one by default.
            metrics: Optional metrics collector for the default HTTP client.
        """
        self.settings = settings
        self.http = (
            http if http is not None else HttpClient(max_sockets=settings.max_sockets, metrics=metrics)
        )
        self.cache: TokenCachePort = cache if cache is not None else InMemoryTokenCache()
        self.logger: LoggerPort = NullLogger()
        self.tracer: TracerPort = NullTracer()
        self.initialized = False

        self.fetcher = TokenFetcher(settings, self.http, self.cache)
        self.prober = HealthProber(settings, self.http, self.fetcher)
        self.sender = Sender(settings, self.http, refresh_token=self.fetcher.fetch_token)

    async def init(self, logger: LoggerPort | None = None, tracer: TracerPort | None = None) -> None:
        """Open the pool, wait for the auth service and cache a first token.

        Args:
            logger: Host logger; events are dropped when omitted.
            tracer: Host tracer; no spans are recorded when omitted.

        Raises:
            InitializationError: If no valid token was obtained within
                retry_attempts probes. The plugin must not be used then.
        """
        self.logger = logger if logger is not None else NullLogger()
        self.tracer = tracer if tracer is not None else NullTracer()
        for component in (self.fetcher, self.prober, self.sender):
            component.logger = self.logger

        self.logger.log("init() called, fetching auth token", LOG_SOURCE)

        await self.http.open()
        await self.prober.acquire_initial_token()
        self.initialized = True

    async def fetch_token(self) -> str:
        """Fetch, cache and return a fresh token (see TokenFetcher.fetch_token)."""
        return await self.fetcher.fetch_token()

    async def relay(self, data: Payload) -> None:
        """Send one payload to the destination.

        Uses the cached token, fetching one first on a cache miss. The
        observability transaction is ended exactly once per call.

        Args:
            data: Text (sent as JSON) or bytes (sent as-is).

        Raises:
            TypeError: If data is neither text nor bytes.
            RuntimeError: If init() has not completed.
            TokenFetchError: If a token could not be fetched.
            SendError: If the destination rejected the payload.
            aiohttp.ClientError: On network failure.
        """
        if not isinstance(data, _PAYLOAD_TYPES):
            raise TypeError(f"Payload must be bytes or str, not {type(data).__name__}")
        if not self.initialized:
            raise RuntimeError("Plugin not initialized; await init() first")

        self.logger.log("Relaying data", LOG_SOURCE)
        token = self.cache.get(self.settings.auth_username)
        if not token:
            logger.debug("No cached token, fetching one")
            token = await self.fetch_token()

        transaction = self.tracer.start_transaction(LOG_SOURCE)
        span = None
        try:
            span = self.tracer.start_span("relay")
            await self.sender.send(token, data)
        except Exception as e:
            self.logger.error("Error relaying data", e, LOG_SOURCE)
            raise
        finally:
            if span is not None:
                span.end()
            transaction.end()

    async def close(self) -> None:
        """Release the connection pool."""
        await self.http.close()
        self.initialized = False

    async def __aenter__(self) -> "RestRelayPlugin":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
