"""Pooled HTTP client adapter with metrics integration."""

import asyncio
import logging
from types import TracebackType
from typing import Any

import aiohttp
from aiohttp import ClientTimeout

from rest_relay.ports.http import HttpResponseDto
from rest_relay.ports.metrics import HttpAttemptDto, MetricsPort

__all__ = ["HttpClient"]

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 10
KEEPALIVE_TIMEOUT = 30
FIRST_FAILING_HTTP_CODE = 400


class HttpClient:
    """HTTP client sharing one keep-alive connection pool.

    Features:
    - Single session and connector for http and https targets.
    - Socket count bounded by max_sockets; extra requests wait for a slot.
    - Responses read fully and returned as HttpResponseDto.
    - Metrics collection (latency, failure rate).
    - Context manager for proper resource cleanup.

    Retries are left to callers.
    """

    def __init__(self, max_sockets: int, metrics: MetricsPort | None = None) -> None:
        """Initialize HTTP client.

        Args:
            max_sockets: Maximum number of simultaneous pooled connections.
            metrics: Optional metrics collector to track attempts.
        """
        self.max_sockets = max_sockets
        self.metrics = metrics
        self.session: aiohttp.ClientSession | None = None

    async def open(self) -> None:
        """Create the session and its connection pool (idempotent)."""
        if self.session is not None and not self.session.closed:
            return
        connector = aiohttp.TCPConnector(
            limit=self.max_sockets,
            keepalive_timeout=KEEPALIVE_TIMEOUT,
        )
        self.session = aiohttp.ClientSession(connector=connector)
        logger.debug(f"Connection pool opened (max_sockets={self.max_sockets})")

    async def close(self) -> None:
        """Close the session and release pooled connections."""
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (open pool).

        Returns:
            Self for use in async with statement.
        """
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close pool).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        await self.close()

    async def get(self, url: str, timeout: int = PROBE_TIMEOUT) -> HttpResponseDto:
        """Send a GET request.

        Args:
            url: Target URL.
            timeout: Total timeout in seconds.

        Returns:
            Fully read response.
        """
        return await self._request("GET", url, timeout=ClientTimeout(total=timeout))

    async def post(
        self,
        url: str,
        *,
        data: Any = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponseDto:
        """Send a POST request.

        Args:
            url: Target URL.
            data: Raw body (bytes or str), sent unmodified.
            json: JSON-serializable body; mutually exclusive with data.
            headers: Extra request headers.

        Returns:
            Fully read response.
        """
        return await self._request("POST", url, data=data, json=json, headers=headers)

    async def _request(self, method: str, url: str, **kwargs: Any) -> HttpResponseDto:
        """Send one request and record metrics.

        Raises:
            RuntimeError: If the pool has not been opened.
            aiohttp.ClientError: Network errors, propagated unchanged.
            asyncio.TimeoutError: If the request times out.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; call open() or use 'async with'")

        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            async with self.session.request(method, url, **kwargs) as resp:
                body = await resp.read()
                status = resp.status
        except Exception:
            self._record(method, url, started, status=None)
            raise

        self._record(method, url, started, status=status)
        logger.debug(f"{method} {url} -> {status}")
        return HttpResponseDto(status=status, body=body, url=url)

    def _record(self, method: str, url: str, started: float, status: int | None) -> None:
        if not self.metrics:
            return
        latency_ms = (asyncio.get_running_loop().time() - started) * 1_000.0
        self.metrics.update(
            HttpAttemptDto(
                method=method,
                url=url,
                latency_ms=latency_ms,
                is_failed=status is None or status >= FIRST_FAILING_HTTP_CODE,
                status_code=status,
            )
        )
        logger.debug(f"HTTP metrics: {self.metrics}")
