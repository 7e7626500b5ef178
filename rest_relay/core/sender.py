"""Payload delivery with one-shot recovery from an expired token."""

import logging
from collections.abc import Awaitable, Callable
from http import HTTPStatus

from rest_relay.adapters.driven.http.client import HttpClient
from rest_relay.core.errors import SendError
from rest_relay.ports.http import HttpResponseDto, Payload
from rest_relay.ports.observability import LOG_SOURCE, LoggerPort, NullLogger
from rest_relay.ports.settings import SettingsPort

__all__ = ["Sender", "build_headers"]

logger = logging.getLogger(__name__)


def build_headers(token: str, payload: Payload) -> dict[str, str]:
    """Return request headers for payload.

    Text payloads are declared as JSON; byte payloads get no content type.
    """
    headers = {"Authorization": f"Bearer {token}"}
    if isinstance(payload, str):
        headers["Content-Type"] = "application/json"
    return headers


class Sender:
    """POST payloads to the destination.

    A 401 answer triggers exactly one token refresh and one resend; the
    resend's outcome is final. Any final status outside 2xx raises
    SendError.
    """

    def __init__(
        self,
        settings: SettingsPort,
        http: HttpClient,
        refresh_token: Callable[[], Awaitable[str]],
        logger: LoggerPort | None = None,
    ) -> None:
        """Initialize sender.

        Args:
            settings: Runtime settings (destination URL).
            http: Pooled HTTP client.
            refresh_token: Coroutine returning a freshly fetched token.
            logger: Host logger.
        """
        self.settings = settings
        self.http = http
        self.refresh_token = refresh_token
        self.logger: LoggerPort = logger if logger is not None else NullLogger()

    async def send(self, token: str, payload: Payload) -> None:
        """Deliver payload using token.

        Raises:
            SendError: Final response was not 2xx.
            TokenFetchError: Refresh after a 401 failed.
            aiohttp.ClientError: Network failure.
        """
        try:
            response = await self._post(token, payload)

            if response.status == HTTPStatus.UNAUTHORIZED:
                logger.warning("Destination rejected token, refreshing and resending once")
                self.logger.error("Unauthorized access - token may be invalid", response, LOG_SOURCE)
                new_token = await self.refresh_token()
                response = await self._post(new_token, payload)

            if not response.ok:
                raise SendError(f"Destination answered {response.status}", status=response.status)
        except Exception as e:
            logger.error(f"Failed to send data: {e!r}")
            self.logger.error("Failed to send data", e, LOG_SOURCE)
            raise

    async def _post(self, token: str, payload: Payload) -> HttpResponseDto:
        return await self.http.post(
            self.settings.destination_transport_url,
            data=payload,
            headers=build_headers(token, payload),
        )
