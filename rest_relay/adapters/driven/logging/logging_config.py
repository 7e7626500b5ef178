"""Console logging setup for the relay plugin."""

import logging

__all__ = ["configure_logs", "LOG_FORMAT"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%d/%m/%y %H:%M:%S"


def configure_logs(level: int = logging.INFO) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at the given level (INFO by default).
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (rest_relay) at DEBUG level.
    - Structured format with timestamp, level, module, and line number.

    Calling it again does not add a second handler.

    Args:
        level: Root logger level.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_rest_relay", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handler._rest_relay = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # Suppress verbose framework loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Application loggers
    logging.getLogger("rest_relay").setLevel(logging.DEBUG)
