"""
Domain models for the uptime monitoring system.

This module defines the core data structures used throughout the application:
monitors read from the registry, the scheduled jobs bound to them, and the
probe results written to the result sink.
"""

import asyncio
from datetime import datetime, timedelta
from enum import Enum
from typing import NamedTuple, Optional, Tuple
from urllib.parse import urlsplit

from .errors import ConfigurationError

SUPPORTED_SCHEMES = ("http", "https")


class SchedulerState(str, Enum):
    """
    Lifecycle of a scheduler. Transitions are monotonic:
    NOT_STARTED -> RUNNING -> STOPPED.
    """

    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class Monitor(NamedTuple):
    """
    A configured target under periodic observation.

    This data structure corresponds to the columns of the 'monitors' table.

    Attributes:
        id: The unique identifier of the monitor in the registry.
        name: Display name, used in alerts.
        url: Absolute HTTP or HTTPS URL to probe.
        interval: How frequently the monitor should be probed.
        owner_contact: Where downtime alerts are sent (an e-mail address).
    """

    id: int
    name: str
    url: str
    interval: timedelta
    owner_contact: str


class ProbeResult(NamedTuple):
    """
    The outcome of a single probe.

    All timings are in milliseconds, measured as offsets from the probe start.
    A failed probe has status_code 0 and every timing set to 0.

    Attributes:
        monitor_id: The id of the probed monitor.
        timestamp: UTC time at which the probe started.
        status_code: HTTP status code, or 0 if the probe failed.
        response_time: Time until the full response body was received.
        dns_lookup_time: Time until DNS resolution completed.
        tcp_handshake_time: Time until the TCP connection was established.
        ssl_handshake_time: Time until the TLS handshake completed (0 for HTTP).
        success: True when the status code is in [200, 400).
        error: Failure detail, or None on success.
    """

    monitor_id: int
    timestamp: datetime
    status_code: int
    response_time: float
    dns_lookup_time: float
    tcp_handshake_time: float
    ssl_handshake_time: float
    success: bool
    error: Optional[str] = None

    @classmethod
    def failure(cls, monitor_id: int, timestamp: datetime, error: str) -> "ProbeResult":
        """Builds a failed result with a zero status code and zeroed timings."""
        return cls(
            monitor_id=monitor_id,
            timestamp=timestamp,
            status_code=0,
            response_time=0.0,
            dns_lookup_time=0.0,
            tcp_handshake_time=0.0,
            ssl_handshake_time=0.0,
            success=False,
            error=error,
        )


class ScheduledJob:
    """
    The live recurring timer bound to one monitor.

    The task runs the timer loop and doubles as the cancellation handle. The
    monitor snapshot may be refreshed in place by the scheduler as long as the
    interval stays the same; an interval change always produces a new job.
    """

    __slots__ = ("monitor", "interval", "task")

    def __init__(self, monitor: Monitor, task: Optional["asyncio.Task[None]"] = None) -> None:
        self.monitor: Monitor = monitor
        self.interval: timedelta = monitor.interval
        self.task: Optional["asyncio.Task[None]"] = task

    @property
    def monitor_id(self) -> int:
        return self.monitor.id

    @property
    def cancelled(self) -> bool:
        return self.task is None or self.task.done()

    def cancel(self) -> None:
        if self.task is not None and not self.task.done():
            self.task.cancel()

    def __repr__(self) -> str:
        return f"<ScheduledJob(monitor_id={self.monitor_id}, interval={self.interval})>"


class ReconcileReport(NamedTuple):
    """
    What a single reconciliation did, as tuples of monitor ids.

    Attributes:
        added: Monitors that got a new job.
        removed: Monitors whose job was cancelled because they left the snapshot.
        rescheduled: Monitors whose job was replaced because the interval changed or its timer had ended.
        unchanged: Monitors whose job was kept as is.
        rejected: Monitors skipped because of a configuration error.
    """

    added: Tuple[int, ...] = ()
    removed: Tuple[int, ...] = ()
    rescheduled: Tuple[int, ...] = ()
    unchanged: Tuple[int, ...] = ()
    rejected: Tuple[int, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.rescheduled)


def validate_monitor(monitor: Monitor) -> None:
    """
    Checks that a monitor can be scheduled.

    Args:
        monitor: The monitor to validate.

    Raises:
        ConfigurationError: If the interval is not positive or the URL is not
            an absolute HTTP or HTTPS URL.
    """
    if not isinstance(monitor.interval, timedelta) or monitor.interval.total_seconds() <= 0:
        raise ConfigurationError(monitor.id, f"interval must be positive, got {monitor.interval!r}")
    validate_url(monitor.id, monitor.url)


def validate_url(monitor_id: int, url: str) -> None:
    """Raises ConfigurationError unless url is an absolute HTTP(S) URL with a host."""
    if not isinstance(url, str) or not url:
        raise ConfigurationError(monitor_id, "url must be a non-empty string")
    try:
        parts = urlsplit(url)
    except ValueError as err:
        raise ConfigurationError(monitor_id, f"malformed url {url!r}") from err
    if parts.scheme.lower() not in SUPPORTED_SCHEMES:
        raise ConfigurationError(monitor_id, f"unsupported url scheme {parts.scheme!r}")
    if not parts.hostname:
        raise ConfigurationError(monitor_id, f"url {url!r} has no host")
