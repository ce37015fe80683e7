"""
Core interfaces for the uptime monitoring system.

This module defines the abstract base classes the scheduler and the probe
pipeline depend on. The registry, result sink and alert dispatcher are external
collaborators; the core only reads from and writes to them through these
contracts, which keeps the timing and classification logic testable without
network or storage.
"""

import abc
from typing import Sequence

from .domain import Monitor, ProbeResult


class MonitorRegistry(abc.ABC):
    """
    Abstract interface for the source of monitors.

    The core only observes snapshots; creating, editing and deleting monitors
    happens elsewhere.
    """

    @abc.abstractmethod
    async def list_monitors(self) -> Sequence[Monitor]:
        """
        Returns the current snapshot of monitors, ordered by id.

        Returns:
            Sequence[Monitor]: All monitors known to the registry.

        Raises:
            RegistryUnavailableError: If the registry cannot be read.
        """
        pass


class ProbeExecutor(abc.ABC):
    """
    Abstract interface for a component that probes a single monitor.

    Its responsibility is to encapsulate the network I/O for one monitor and
    return a structured, classified result. It has no side effects.
    """

    @abc.abstractmethod
    async def probe(self, monitor: Monitor) -> ProbeResult:
        """
        Performs one HTTP(S) probe of the given monitor.

        Args:
            monitor: The monitor to probe.

        Returns:
            ProbeResult: The classified outcome with its phase timings.

        Note:
            Implementations must convert every failure into a ProbeResult with
            success=False instead of raising.
        """
        pass


class ResultSink(abc.ABC):
    """Abstract interface for the durable, append-only store of probe results."""

    @abc.abstractmethod
    async def record(self, result: ProbeResult) -> None:
        """
        Persists a single probe result.

        Args:
            result: The result to store.

        Raises:
            PersistenceError: If the result could not be stored.
        """
        pass


class AlertDispatcher(abc.ABC):
    """Abstract interface for the downtime notification transport."""

    @abc.abstractmethod
    async def notify(self, contact: str, monitor_name: str, url: str) -> None:
        """
        Sends a downtime notification for a monitor.

        Args:
            contact: Who to notify.
            monitor_name: Display name of the failing monitor.
            url: The URL that failed.

        Raises:
            DispatchError: If the notification could not be delivered.
        """
        pass
