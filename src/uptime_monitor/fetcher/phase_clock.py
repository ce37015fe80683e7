"""
Per-request clock recording the connection phases of a probe.

A PhaseClock is passed to aiohttp as ``trace_request_ctx``; the trace callbacks
registered in ``uptime_monitor.config.http_config`` stamp it as the request
progresses. All marks are taken from the same monotonic clock as the start mark.
"""

import time
from typing import Callable, Optional


class PhaseClock:
    """Start mark plus the first DNS-resolved and connection-established marks."""

    def __init__(self, is_tls: bool = False, now: Callable[[], float] = time.perf_counter) -> None:
        self._now = now
        self.is_tls: bool = is_tls
        self.started_at: float = now()
        self.dns_resolved_at: Optional[float] = None
        self.connected_at: Optional[float] = None

    def mark_dns_resolved(self) -> None:
        # Redirects may open more connections; only the first hop is reported.
        if self.dns_resolved_at is None:
            self.dns_resolved_at = self._now()

    def mark_connected(self) -> None:
        if self.connected_at is None:
            self.connected_at = self._now()

    def elapsed_ms(self) -> float:
        return self._offset_ms(self._now())

    def dns_lookup_ms(self) -> float:
        return self._offset_ms(self.dns_resolved_at)

    def tcp_handshake_ms(self) -> float:
        return self._offset_ms(self.connected_at)

    def ssl_handshake_ms(self) -> float:
        # aiohttp completes TCP and TLS in one step, so the TLS mark is the connection mark.
        return self._offset_ms(self.connected_at) if self.is_tls else 0.0

    def _offset_ms(self, mark: Optional[float]) -> float:
        if mark is None:
            return 0.0
        return max(0.0, (mark - self.started_at) * 1000)
