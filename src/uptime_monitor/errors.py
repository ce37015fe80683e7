"""
Error taxonomy for the uptime monitoring system.

Every error raised by the core derives from UptimeMonitorError. Errors coming
from third-party libraries (aiohttp, asyncpg, aiosmtplib) are wrapped into one
of these classes with the original exception chained as the cause.
"""

from typing import Any


class UptimeMonitorError(Exception):
    """Base class for all errors raised by the uptime monitor."""


class ConfigurationError(UptimeMonitorError):
    """
    A monitor has an invalid configuration (bad URL, non-positive interval).

    Attributes:
        monitor_id: The id of the offending monitor.
        reason: A short description of what is wrong.
    """

    def __init__(self, monitor_id: Any, reason: str) -> None:
        super().__init__(f"Invalid monitor {monitor_id}: {reason}")
        self.monitor_id = monitor_id
        self.reason = reason


class TransportError(UptimeMonitorError):
    """DNS failure, refused or reset connection, TLS failure or timeout."""


class PersistenceError(UptimeMonitorError):
    """The result sink could not store a probe result."""


class DispatchError(UptimeMonitorError):
    """The alert dispatcher could not deliver a downtime notification."""


class RegistryUnavailableError(UptimeMonitorError):
    """The monitor registry could not be read."""


class SchedulerStateError(UptimeMonitorError):
    """An operation was called in a scheduler state that does not allow it."""
