"""Observability adapters backed by the standard logging module."""

import logging
import time
from typing import Any

from rest_relay.ports.observability import LoggerPort, SpanPort, TracerPort

__all__ = ["StdlibLoggerAdapter", "LoggingTracer"]


class StdlibLoggerAdapter(LoggerPort):
    """Forward plugin events to a logging.Logger.

    The event source becomes the ``source`` extra on each record so that
    formatters can include it. Exceptions passed as detail keep their
    traceback.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize adapter.

        Args:
            logger: Target logger; defaults to this module's logger.
        """
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def log(self, message: str, source: str) -> None:
        self._logger.info(f"[{source}] {message}", extra={"source": source})

    def error(self, message: str, detail: Any, source: str) -> None:
        exc_info = detail if isinstance(detail, BaseException) else None
        self._logger.error(
            f"[{source}] {message}: {detail!r}",
            exc_info=exc_info,
            extra={"source": source},
        )


class _TimedSpan(SpanPort):
    """Span that logs its duration when ended."""

    def __init__(self, logger: logging.Logger, kind: str, name: str) -> None:
        self._logger = logger
        self.kind = kind
        self.name = name
        self.started_at = time.monotonic()
        self.duration_ms: float | None = None

    def end(self) -> None:
        if self.duration_ms is not None:
            return
        self.duration_ms = (time.monotonic() - self.started_at) * 1_000.0
        self._logger.debug(f"{self.kind} {self.name!r} ended after {self.duration_ms:.1f} ms")


class LoggingTracer(TracerPort):
    """Tracer that logs transaction and span durations at DEBUG level.

    Useful when no APM backend is available but timings are still wanted.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def start_transaction(self, name: str) -> SpanPort:
        return _TimedSpan(self._logger, "transaction", name)

    def start_span(self, name: str) -> SpanPort:
        return _TimedSpan(self._logger, "span", name)
