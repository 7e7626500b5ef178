"""Container health check: configuration plus auth service reachability."""

import asyncio
import logging
from http import HTTPStatus

import aiohttp

from rest_relay.adapters.driven.config.settings import Settings, load_settings
from rest_relay.adapters.driven.http.client import HttpClient
from rest_relay.adapters.driven.logging.logging_config import configure_logs

__all__ = ["main"]

logger = logging.getLogger(__name__)


async def auth_service_healthy(settings: Settings) -> bool:
    """GET AUTH_HEALTH_URL once over a single-socket pool.

    Returns:
        True if the auth service answered 200.
    """
    url = settings.auth_health_url
    async with HttpClient(max_sockets=1) as http:
        try:
            response = await http.get(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error(f"Auth service unreachable at {url}: {exc!r}")
            return False

    if response.status != HTTPStatus.OK:
        logger.error(f"Auth service at {url} answered {response.status}")
        return False
    return True


def main() -> int:
    """Run health check for container orchestration.

    Validates:
    - Required environment variables are set and well formed.
    - The auth service health endpoint answers 200.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(f"Relay plugin healthcheck FAILED: {exc}")
        return 1

    if not asyncio.run(auth_service_healthy(settings)):
        logger.error("Relay plugin healthcheck FAILED: auth service not ready")
        return 1

    logger.info(f"Relay plugin healthcheck OK (destination={settings.destination_transport_url})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
