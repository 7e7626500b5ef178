"""Application entrypoint: relay files or stdin through the plugin."""

import asyncio
import logging
import sys
from pathlib import Path

from rest_relay.adapters.driven.config.settings import load_settings
from rest_relay.adapters.driven.logging.logging_config import configure_logs
from rest_relay.adapters.driven.metrics.http_metrics import Metrics
from rest_relay.adapters.driven.observability.stdlib import LoggingTracer, StdlibLoggerAdapter
from rest_relay.core.errors import InitializationError
from rest_relay.core.plugin import RestRelayPlugin
from rest_relay.ports.http import Payload

__all__ = ["main", "read_payload", "run"]

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"


async def read_payload(source: str) -> Payload:
    """Read one payload off the event loop.

    Args:
        source: File path (relayed as bytes) or "-" for stdin (relayed as text).

    Returns:
        Payload ready for relay().

    Raises:
        OSError: If the file cannot be read.
    """
    if source == STDIN_MARKER:
        return await asyncio.to_thread(sys.stdin.read)
    return await asyncio.to_thread(Path(source).read_bytes)


async def main(argv: list[str] | None = None) -> int:
    """Relay every given source to the configured destination.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Probe the auth service and cache a token (plugin init).
    4. Relay each source in order.
    5. Close the connection pool.

    Args:
        argv: Sources to relay; defaults to sys.argv[1:].

    Returns:
        0 when everything was relayed, 1 on relay or startup failure,
        2 on usage or configuration errors.
    """
    configure_logs()
    sources = sys.argv[1:] if argv is None else argv
    if not sources:
        logger.error("Usage: rest-relay PATH [PATH ...]  (use '-' for stdin)")
        return 2

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check RETRY_ATTEMPTS, MAX_SOCKETS, AUTH_HEALTH_URL, AUTH_TOKEN_URL, "
            "DESTINATION_TRANSPORT_URL, AUTH_USERNAME and AUTH_PASSWORD.",
            exc,
        )
        return 2

    metrics = Metrics()
    failures = 0

    async with RestRelayPlugin(config.to_port(), metrics=metrics) as plugin:
        try:
            await plugin.init(StdlibLoggerAdapter(), LoggingTracer())
        except InitializationError as e:
            logger.error(f"Startup failed: {e}")
            return 1

        for source in sources:
            try:
                await plugin.relay(await read_payload(source))
            except Exception as e:
                failures += 1
                logger.error(f"Relay of {source!r} failed: {e}", exc_info=True)
            else:
                logger.info(f"Relayed {source!r}")

        logger.info(f"HTTP metrics: {metrics}")

    return 1 if failures else 0


def run() -> None:
    """Console script entry point."""
    try:
        raise SystemExit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")
        raise SystemExit(130) from None


if __name__ == "__main__":
    run()
