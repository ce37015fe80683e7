"""
HTTP probe implementation using the aiohttp library.

This module provides an implementation of the ProbeExecutor interface that uses
a shared aiohttp ClientSession to GET a monitor's URL, measure its connection
phases and classify the outcome. It performs no persistence and sends no
alerts; that is the job of the probe pipeline.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from urllib.parse import urlsplit

import aiohttp

from uptime_monitor.contracts import ProbeExecutor
from uptime_monitor.domain import Monitor, ProbeResult, validate_url
from uptime_monitor.errors import ConfigurationError, TransportError
from uptime_monitor.fetcher.phase_clock import PhaseClock

# Module logger
logger = logging.getLogger(__name__)


def is_success_status(status_code: int) -> bool:
    """2xx and 3xx responses count as up."""
    return 200 <= status_code < 400


def _is_tls(url: str) -> bool:
    try:
        return urlsplit(url).scheme.lower() == "https"
    except (TypeError, ValueError, AttributeError):
        return False


def describe_error(error: BaseException) -> str:
    """Formats an exception as 'ClassName: message' for the result's error detail."""
    message = str(error)
    name = type(error).__name__
    return f"{name}: {message}" if message else name


class AiohttpProbeExecutor(ProbeExecutor):
    """
    A concrete implementation of ProbeExecutor using the aiohttp library.

    The session must be created by ``uptime_monitor.config.http_config.get_http_session``
    (or otherwise carry its trace configuration) for the DNS and connection
    timings to be populated. Its connector must not cap connections: the wait
    for a free connector slot would be counted as handshake time. Concurrency
    is capped here instead, before the probe's clock and timeout start.
    """

    def __init__(
        self,
        worker_id: str,
        session: aiohttp.ClientSession,
        max_timeout: float,
        max_connections: int = 0,
        clock_factory: Callable[[bool], PhaseClock] = PhaseClock,
    ) -> None:
        """
        Initializes the executor with a shared aiohttp ClientSession.

        Args:
            worker_id: A unique identifier for this monitoring instance.
            session: An active aiohttp.ClientSession to be used for requests.
            max_timeout: Upper bound in seconds for a single probe.
            max_connections: Maximum number of probes running at once, 0 for no limit.
                Time spent waiting for a slot is not part of the probe.
            clock_factory: Builds the per-request PhaseClock; receives whether the URL is HTTPS.
        """
        if max_timeout <= 0:
            raise ValueError("max_timeout must be positive.")
        if max_connections < 0:
            raise ValueError("max_connections must not be negative.")

        self._worker_id: str = worker_id
        self._session: aiohttp.ClientSession = session
        self._max_timeout: float = max_timeout
        self._slots: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(max_connections) if max_connections else None
        )
        self._clock_factory = clock_factory

    def timeout_for(self, monitor: Monitor) -> float:
        """A probe never outlives its monitor's interval nor the configured maximum."""
        return min(monitor.interval.total_seconds(), self._max_timeout)

    async def probe(self, monitor: Monitor) -> ProbeResult:
        """
        GETs the monitor's URL and returns the classified result.

        Any failure (invalid URL, transport error, timeout, or a status outside
        [200, 400)) yields a result with success=False, status_code 0 and zeroed
        timings. Only asyncio.CancelledError escapes.

        Args:
            monitor: The monitor to probe.

        Returns:
            ProbeResult: The outcome of the probe.
        """
        if self._slots is None:
            return await self._probe(monitor)
        async with self._slots:
            return await self._probe(monitor)

    async def _fetch(self, monitor: Monitor, clock: PhaseClock) -> int:
        """
        Performs the GET and drains the body.

        Raises:
            TransportError: If the request fails or times out.
        """
        timeout = self.timeout_for(monitor)
        try:
            async with self._session.get(
                monitor.url,
                timeout=aiohttp.ClientTimeout(total=timeout),
                trace_request_ctx=clock,
            ) as response:
                # Drain the body so that the response time covers the full transfer.
                await response.read()
                return response.status
        except asyncio.TimeoutError as e:
            raise TransportError(f"timed out after {timeout}s") from e
        except (aiohttp.ClientError, OSError, ValueError) as e:
            raise TransportError(describe_error(e)) from e

    async def _probe(self, monitor: Monitor) -> ProbeResult:
        timestamp = datetime.now(timezone.utc)
        clock = self._clock_factory(_is_tls(monitor.url))
        logger.debug(f"Starting probe for monitor {monitor.id}: {monitor.url}")

        error: Optional[str] = None
        status_code: int = 0

        try:
            validate_url(monitor.id, monitor.url)
            status_code = await self._fetch(monitor, clock)
        except ConfigurationError as e:
            error = describe_error(e)
            logger.warning(f"Monitor {monitor.id} is misconfigured: {e.reason}")
        except TransportError as e:
            error = str(e)
            logger.info(f"Probe for monitor {monitor.id} failed: {error}")
        except Exception as e:
            error = describe_error(e)
            logger.exception(f"Unexpected error probing monitor {monitor.id} ({monitor.url})")

        response_time = clock.elapsed_ms()

        if error is None and not is_success_status(status_code):
            error = f"HTTP {status_code}"
            logger.info(f"Monitor {monitor.id} answered with status {status_code}")

        if error is not None:
            return ProbeResult.failure(monitor.id, timestamp, error)

        logger.debug(
            f"Monitor {monitor.id} is up: status {status_code} in {response_time:.1f}ms"
        )
        return ProbeResult(
            monitor_id=monitor.id,
            timestamp=timestamp,
            status_code=status_code,
            response_time=response_time,
            dns_lookup_time=clock.dns_lookup_ms(),
            tcp_handshake_time=clock.tcp_handshake_ms(),
            ssl_handshake_time=clock.ssl_handshake_ms(),
            success=True,
        )
