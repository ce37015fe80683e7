"""
The probe pipeline: probe, record, and alert on failure.

This module glues the side-effect-free ProbeExecutor to the effectful
collaborators. Each side effect runs in its own guard so that a failing result
sink never prevents an alert, a failing dispatcher never loses a result, and
neither ever reaches the scheduler's timer loop.
"""

import logging

from .contracts import AlertDispatcher, ProbeExecutor, ResultSink
from .domain import Monitor, ProbeResult
from .errors import DispatchError, PersistenceError

# Module logger
logger = logging.getLogger(__name__)


class ProbePipeline:
    """
    Runs one probe cycle for a monitor.

    Every call writes exactly one result to the sink and, when the probe failed,
    calls the dispatcher exactly once with the owner contact, name and URL.
    """

    def __init__(
        self,
        executor: ProbeExecutor,
        sink: ResultSink,
        dispatcher: AlertDispatcher,
    ) -> None:
        self._executor: ProbeExecutor = executor
        self._sink: ResultSink = sink
        self._dispatcher: AlertDispatcher = dispatcher

    async def _record(self, result: ProbeResult) -> None:
        try:
            await self._sink.record(result)
        except PersistenceError as e:
            logger.error(f"Result of monitor {result.monitor_id} was not stored: {e}")
        except Exception as e:
            logger.exception(
                f"Sink '{type(self._sink).__name__}' failed for monitor {result.monitor_id} with error: {e}"
            )

    async def _alert(self, monitor: Monitor) -> None:
        try:
            await self._dispatcher.notify(monitor.owner_contact, monitor.name, monitor.url)
        except DispatchError as e:
            logger.error(f"Downtime alert for monitor {monitor.id} was not delivered: {e}")
        except Exception as e:
            logger.exception(
                f"Dispatcher '{type(self._dispatcher).__name__}' failed for monitor {monitor.id} with error: {e}"
            )

    async def run(self, monitor: Monitor) -> ProbeResult:
        """
        Probes the monitor and handles the result.

        Args:
            monitor: The monitor to probe.

        Returns:
            ProbeResult: The result that was handed to the sink.
        """
        result = await self._executor.probe(monitor)
        await self._record(result)

        if not result.success:
            logger.warning(f"Monitor {monitor.id} ('{monitor.name}') is down: {result.error}")
            await self._alert(monitor)

        return result
