"""
Interval scheduler owning one recurring timer per monitor.

The scheduler keeps a private map from monitor id to ScheduledJob. The map is
only mutated by ``reconcile`` and ``stop``, both of which run on the event loop
without awaiting while they mutate it, so no timer can observe a half-applied
change and no lock is needed.

Every tick starts the probe pipeline in its own task. If the previous probe of
the same monitor is still in flight the tick is skipped, which keeps results
of one monitor in the order their probes were started.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Mapping

from uptime_monitor.contracts import MonitorRegistry
from uptime_monitor.domain import (
    Monitor,
    ReconcileReport,
    ScheduledJob,
    SchedulerState,
    validate_monitor,
)
from uptime_monitor.errors import (
    ConfigurationError,
    RegistryUnavailableError,
    SchedulerStateError,
)
from uptime_monitor.pipeline import ProbePipeline

# Module logger
logger = logging.getLogger(__name__)


class MonitorScheduler:
    """
    Schedules periodic probes for the monitors of a registry.

    Lifecycle: NOT_STARTED -> RUNNING -> STOPPED, with no way back.
    """

    def __init__(
        self,
        registry: MonitorRegistry,
        pipeline: ProbePipeline,
        drain_timeout: float = 10.0,
    ) -> None:
        """
        Initializes a new MonitorScheduler instance.

        Args:
            registry: Source of the monitor snapshot loaded by start().
            pipeline: Runs one probe cycle for a monitor on every tick.
            drain_timeout: Seconds stop() waits for in-flight probes before cancelling them.

        Raises:
            ValueError: If drain_timeout is negative.
        """
        if drain_timeout < 0:
            raise ValueError("drain_timeout must not be negative.")

        self._registry: MonitorRegistry = registry
        self._pipeline: ProbePipeline = pipeline
        self._drain_timeout: float = drain_timeout
        self._state: SchedulerState = SchedulerState.NOT_STARTED
        self._jobs: Dict[int, ScheduledJob] = {}
        self._in_flight: Dict[int, "asyncio.Task[None]"] = {}
        self._skipped_ticks: int = 0
        self._loading: bool = False

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def jobs(self) -> Mapping[int, ScheduledJob]:
        """A copy of the live jobs, keyed by monitor id."""
        return dict(self._jobs)

    @property
    def in_flight(self) -> int:
        return sum(1 for task in self._in_flight.values() if not task.done())

    @property
    def skipped_ticks(self) -> int:
        return self._skipped_ticks

    async def start(self) -> ReconcileReport:
        """
        Loads the monitors from the registry and schedules one job per monitor.

        If stop() is called while the registry is being read, the snapshot is
        discarded and the scheduler stays STOPPED.

        Returns:
            ReconcileReport: What the initial reconciliation scheduled, empty if
                the scheduler was stopped during startup.

        Raises:
            SchedulerStateError: If the scheduler was already started, is being
                started, or was stopped.
            RegistryUnavailableError: If the registry cannot be read. No job is
                created and the scheduler stays NOT_STARTED, so the caller may retry.
        """
        if self._state is not SchedulerState.NOT_STARTED or self._loading:
            raise SchedulerStateError(f"Cannot start a scheduler in state '{self._state.value}'.")

        logger.info("Starting scheduler...")
        self._loading = True
        try:
            monitors = await self._registry.list_monitors()
        except RegistryUnavailableError:
            raise
        except Exception as e:
            raise RegistryUnavailableError(f"Could not load monitors: {e}") from e
        finally:
            self._loading = False

        if self._state is not SchedulerState.NOT_STARTED:
            # stop() ran while the registry was being read.
            logger.info(f"Scheduler was stopped during startup; discarding {len(monitors)} monitors.")
            return ReconcileReport()

        self._state = SchedulerState.RUNNING
        report = self.reconcile(monitors)
        logger.info(f"Scheduler started with {len(self._jobs)} jobs.")
        return report

    def reconcile(self, monitors: Iterable[Monitor]) -> ReconcileReport:
        """
        Brings the live jobs in line with a fresh monitor snapshot.

        Monitors with an unchanged interval keep their timer (their snapshot is
        refreshed for the next tick), monitors with a new interval get their
        timer replaced, monitors missing from the snapshot lose their timer and
        new monitors get one. Invalid monitors are skipped and, if they had a
        job, treated as removed. When an id appears twice the first wins. A job
        whose timer task has ended is replaced as if its interval had changed.

        Args:
            monitors: The current monitor snapshot.

        Returns:
            ReconcileReport: The ids affected by each kind of change.

        Raises:
            SchedulerStateError: If the scheduler is not running.
        """
        if self._state is not SchedulerState.RUNNING:
            raise SchedulerStateError(f"Cannot reconcile a scheduler in state '{self._state.value}'.")

        snapshot: Dict[int, Monitor] = {}
        seen = set()
        rejected: List[int] = []
        for monitor in monitors:
            if monitor.id in seen:
                logger.warning(f"Duplicate monitor id {monitor.id} in snapshot; keeping the first one.")
                continue
            seen.add(monitor.id)
            try:
                validate_monitor(monitor)
            except ConfigurationError as e:
                logger.error(f"Skipping monitor {monitor.id}: {e.reason}")
                rejected.append(monitor.id)
                continue
            snapshot[monitor.id] = monitor

        removed = [monitor_id for monitor_id in self._jobs if monitor_id not in snapshot]
        for monitor_id in removed:
            self._jobs.pop(monitor_id).cancel()
            logger.info(f"Cancelled job of monitor {monitor_id}.")

        added: List[int] = []
        rescheduled: List[int] = []
        unchanged: List[int] = []
        for monitor in snapshot.values():
            job = self._jobs.get(monitor.id)
            if job is None:
                self._jobs[monitor.id] = self._schedule(monitor)
                added.append(monitor.id)
                logger.info(f"Scheduled monitor {monitor.id} every {monitor.interval}.")
            elif job.interval != monitor.interval or job.cancelled:
                # Cancel and replace with no await in between.
                job.cancel()
                self._jobs[monitor.id] = self._schedule(monitor)
                rescheduled.append(monitor.id)
                if job.interval != monitor.interval:
                    logger.info(
                        f"Rescheduled monitor {monitor.id} from every {job.interval} to every {monitor.interval}."
                    )
                else:
                    logger.warning(f"Timer of monitor {monitor.id} had ended; rescheduled it.")
            else:
                job.monitor = monitor
                unchanged.append(monitor.id)

        report = ReconcileReport(
            added=tuple(added),
            removed=tuple(removed),
            rescheduled=tuple(rescheduled),
            unchanged=tuple(unchanged),
            rejected=tuple(rejected),
        )
        if report.changed or report.rejected:
            logger.info(
                f"Reconciled: {len(added)} added, {len(removed)} removed, "
                f"{len(rescheduled)} rescheduled, {len(unchanged)} unchanged, {len(rejected)} rejected."
            )
        return report

    async def stop(self) -> None:
        """
        Cancels every job and waits for in-flight probes.

        In-flight probes get up to drain_timeout seconds to finish and store
        their result; those still running afterwards are cancelled. No probe
        runs once this method returns. Stopping twice is a no-op.
        """
        if self._state is SchedulerState.STOPPED:
            return
        self._state = SchedulerState.STOPPED

        jobs = list(self._jobs.values())
        self._jobs.clear()
        logger.info(f"Stopping scheduler: cancelling {len(jobs)} jobs...")
        for job in jobs:
            job.cancel()
        await asyncio.gather(*(job.task for job in jobs if job.task is not None), return_exceptions=True)

        pending_probes = [task for task in self._in_flight.values() if not task.done()]
        if pending_probes:
            logger.info(f"Waiting up to {self._drain_timeout}s for {len(pending_probes)} in-flight probes...")
            _, still_running = await asyncio.wait(pending_probes, timeout=self._drain_timeout)
            if still_running:
                logger.warning(f"Cancelling {len(still_running)} probes that did not finish in time.")
                for task in still_running:
                    task.cancel()
                await asyncio.gather(*still_running, return_exceptions=True)
        self._in_flight.clear()

        logger.info("Scheduler stopped.")

    def _schedule(self, monitor: Monitor) -> ScheduledJob:
        job = ScheduledJob(monitor)
        job.task = asyncio.create_task(self._run_timer(job), name=f"monitor-{monitor.id}-timer")
        return job

    async def _run_timer(self, job: ScheduledJob) -> None:
        """
        Fixed-rate timer loop of one job.

        The first tick fires one interval after the job was created. Deadlines
        advance by exactly one interval, so slow ticks do not accumulate drift;
        ticks missed while the event loop was blocked are dropped, not replayed.
        """
        loop = asyncio.get_running_loop()
        interval: float = job.interval.total_seconds()
        next_fire: float = loop.time() + interval

        try:
            while True:
                await asyncio.sleep(max(0.0, next_fire - loop.time()))
                next_fire += interval
                now = loop.time()
                if next_fire <= now:
                    missed = int((now - next_fire) // interval) + 1
                    next_fire += missed * interval
                    logger.warning(f"Monitor {job.monitor_id} timer fell behind; dropped {missed} ticks.")

                if self._jobs.get(job.monitor_id) is not job:
                    # Superseded or removed; never tick against a cancelled job.
                    return
                self._fire(job.monitor)
        except asyncio.CancelledError:
            logger.debug(f"Timer of monitor {job.monitor_id} cancelled.")

    def _fire(self, monitor: Monitor) -> None:
        running = self._in_flight.get(monitor.id)
        if running is not None and not running.done():
            self._skipped_ticks += 1
            logger.warning(f"Previous probe of monitor {monitor.id} still in flight; skipping this tick.")
            return

        task = asyncio.create_task(self._run_probe(monitor), name=f"monitor-{monitor.id}-probe")
        self._in_flight[monitor.id] = task
        task.add_done_callback(lambda t, monitor_id=monitor.id: self._forget_probe(monitor_id, t))

    def _forget_probe(self, monitor_id: int, task: "asyncio.Task[None]") -> None:
        if self._in_flight.get(monitor_id) is task:
            del self._in_flight[monitor_id]

    async def _run_probe(self, monitor: Monitor) -> None:
        try:
            await self._pipeline.run(monitor)
        except asyncio.CancelledError:
            logger.warning(f"Probe of monitor {monitor.id} cancelled before completion.")
            raise
        except Exception as e:
            logger.exception(f"Pipeline failed for monitor {monitor.id} with error: {e}")
