"""Observability port definitions (interfaces).

The host may hand the plugin a logger and a tracer. Both are optional:
the Null* implementations below stand in for a missing one, so core code
never checks for their presence.
"""

from __future__ import annotations

from typing import Any, Protocol

__all__ = [
    "LOG_SOURCE",
    "LoggerPort",
    "SpanPort",
    "TracerPort",
    "NullLogger",
    "NullSpan",
    "NullTracer",
]

# Source tag attached to every event the plugin reports to the host.
LOG_SOURCE = "RestRelayPlugin"


class LoggerPort(Protocol):
    """Host logger contract."""

    def log(self, message: str, source: str, /) -> None:
        """Report an informational event."""
        ...

    def error(self, message: str, detail: Any, source: str, /) -> None:
        """Report a failure with the raw error or response attached."""
        ...


class SpanPort(Protocol):
    """A started transaction or span."""

    def end(self) -> None:
        """Finish the span."""
        ...


class TracerPort(Protocol):
    """Host tracer contract."""

    def start_transaction(self, name: str, /) -> SpanPort:
        """Open a top-level transaction."""
        ...

    def start_span(self, name: str, /) -> SpanPort:
        """Open a span nested in the current transaction."""
        ...


class NullLogger:
    """Logger used when the host supplies none; discards every event."""

    def log(self, message: str, source: str, /) -> None:
        pass

    def error(self, message: str, detail: Any, source: str, /) -> None:
        pass


class NullSpan:
    """Span that records nothing."""

    def end(self) -> None:
        pass


class NullTracer:
    """Tracer used when the host supplies none; hands out NullSpan."""

    def start_transaction(self, name: str, /) -> SpanPort:
        return NullSpan()

    def start_span(self, name: str, /) -> SpanPort:
        return NullSpan()
