"""Sliding-window request statistics for the relay's HTTP traffic."""

from __future__ import annotations

import statistics
from collections import deque
from dataclasses import dataclass
from http import HTTPStatus

from rest_relay.ports.metrics import HttpAttemptDto, MetricsPort

__all__ = ["Metrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    latency_ms: float
    failed: bool
    status_code: int


class Metrics(MetricsPort):
    """Keep the most recent attempts and summarize them on demand.

    The summary covers mean and p95 latency, the failure share, 401
    answers (expired tokens), the last status (0 when no response came
    back) and the lifetime attempt count.

    Meant for one event loop; no locking.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent attempts kept for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0

    def update(self, attempt: HttpAttemptDto) -> None:
        self._window.append(
            _Sample(
                latency_ms=attempt.latency_ms,
                failed=attempt.is_failed,
                status_code=attempt.status_code or 0,
            )
        )
        self._total_seen += 1

    def _p95_latency(self) -> float:
        latencies = [s.latency_ms for s in self._window]
        if len(latencies) < 2:
            return latencies[0]
        return statistics.quantiles(latencies, n=20, method="inclusive")[-1]

    def __str__(self) -> str:
        if not self._window:
            return "Metrics: waiting for data …"

        size = len(self._window)
        fail_pct = sum(s.failed for s in self._window) / size * 100
        unauthorized = sum(s.status_code == HTTPStatus.UNAUTHORIZED for s in self._window)

        return (
            f"latency={statistics.fmean(s.latency_ms for s in self._window):6.1f} ms "
            f"(p95 {self._p95_latency():.1f}) | "
            f"status={self._window[-1].status_code:3d} | "
            f"fail={fail_pct:5.1f}% | "
            f"401s={unauthorized} | "
            f"win={size}/{self._window.maxlen} | "
            f"total={self._total_seen}"
        )
