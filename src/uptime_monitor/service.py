"""
Long-running monitoring service.

This module provides the MonitoringService class, which starts the scheduler
and keeps it in sync with the monitor registry by re-reading it periodically.
It also exposes ``reload`` for callers that learn about monitor changes sooner,
such as a web layer handling monitor CRUD.
"""

import asyncio
import logging
from typing import Optional

from .contracts import MonitorRegistry
from .domain import ReconcileReport, SchedulerState
from .errors import RegistryUnavailableError
from .scheduler.monitor_scheduler import MonitorScheduler


class MonitoringService:
    """
    Runs a MonitorScheduler and reconciles it against the registry.

    A registry failure at startup is fatal. Later failures are logged and the
    jobs of the last good snapshot keep running.
    """

    def __init__(
        self,
        worker_id: str,
        registry: MonitorRegistry,
        scheduler: MonitorScheduler,
        refresh_interval: float,
    ) -> None:
        """
        Initializes a new MonitoringService instance.

        Args:
            worker_id: A unique identifier for this monitoring instance.
            registry: Source of monitor snapshots.
            scheduler: The scheduler to drive.
            refresh_interval: Seconds between two registry reads.
        """
        if refresh_interval <= 0:
            raise ValueError("refresh_interval must be positive.")

        self._worker_id: str = worker_id
        self._registry: MonitorRegistry = registry
        self._scheduler: MonitorScheduler = scheduler
        self._refresh_interval: float = refresh_interval
        self._logger: logging.Logger = logging.getLogger(__name__)
        self._refresh_task: Optional["asyncio.Task[None]"] = None
        self._reload_lock = asyncio.Lock()

    async def reload(self) -> Optional[ReconcileReport]:
        """
        Reads the registry once and reconciles the scheduler with it.

        Returns:
            Optional[ReconcileReport]: The reconciliation outcome, or None if the
                registry could not be read.
        """
        # Serialize reloads so that an older snapshot never overwrites a newer one.
        async with self._reload_lock:
            try:
                monitors = await self._registry.list_monitors()
            except RegistryUnavailableError as e:
                self._logger.error(f"Registry refresh failed, keeping current jobs: {e}")
                return None
            return self._scheduler.reconcile(monitors)

    async def _refresh_loop(self) -> None:
        refresh_logger: logging.Logger = logging.getLogger(f"{self._worker_id}-Refresher")

        while True:
            try:
                await asyncio.sleep(self._refresh_interval)
                await self.reload()
                refresh_logger.info(
                    f"Live jobs: {len(self._scheduler.jobs)}, probes in flight: {self._scheduler.in_flight}, "
                    f"skipped ticks so far: {self._scheduler.skipped_ticks}"
                )
            except asyncio.CancelledError:
                refresh_logger.info("Shutting down.")
                break
            except Exception as e:
                refresh_logger.exception(f"Refresh failed with error: {e}")

    async def start(self) -> None:
        """
        Starts the scheduler and then refreshes it until stopped.

        Raises:
            RegistryUnavailableError: If the registry cannot be read at startup.
        """
        self._logger.info(f"Starting monitoring service (refresh every {self._refresh_interval}s).")
        await self._scheduler.start()
        if self._scheduler.state is not SchedulerState.RUNNING:
            self._logger.info("Scheduler was stopped during startup; not refreshing.")
            return

        self._refresh_task = asyncio.create_task(self._refresh_loop())
        await self._refresh_task

    async def stop(self) -> None:
        """Stops refreshing, then stops the scheduler and drains in-flight probes."""
        self._logger.info("Initiating graceful shutdown...")

        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
            await asyncio.gather(self._refresh_task, return_exceptions=True)

        await self._scheduler.stop()
        self._logger.info("Monitoring service shutdown complete")
