"""
HTTP client configuration module for the uptime monitoring system.

This module provides functionality to create and configure the aiohttp client
session used for probing. Every session carries a TraceConfig that stamps the
DNS and connection phases on the PhaseClock passed as ``trace_request_ctx``.
"""

import logging
from types import SimpleNamespace
from typing import Any, List

import aiohttp

from uptime_monitor.fetcher.phase_clock import PhaseClock

# Module logger
logger = logging.getLogger(__name__)


def _clock_of(trace_config_ctx: SimpleNamespace) -> Any:
    clock = getattr(trace_config_ctx, "trace_request_ctx", None)
    return clock if isinstance(clock, PhaseClock) else None


async def _on_dns_resolvehost_end(
    session: aiohttp.ClientSession, trace_config_ctx: SimpleNamespace, params: Any
) -> None:
    clock = _clock_of(trace_config_ctx)
    if clock is not None:
        clock.mark_dns_resolved()


async def _on_connection_create_end(
    session: aiohttp.ClientSession, trace_config_ctx: SimpleNamespace, params: Any
) -> None:
    clock = _clock_of(trace_config_ctx)
    if clock is not None:
        clock.mark_connected()


def get_trace_config() -> List[aiohttp.TraceConfig]:
    """
    Build the trace configuration that records probe phase timings.

    Returns:
        List[aiohttp.TraceConfig]: A single-element list suitable for ClientSession(trace_configs=...).
    """
    trace_config = aiohttp.TraceConfig()
    trace_config.on_dns_resolvehost_end.append(_on_dns_resolvehost_end)
    trace_config.on_connection_create_end.append(_on_connection_create_end)
    return [trace_config]


def get_http_session() -> aiohttp.ClientSession:
    """
    Create and configure the HTTP client session used for probing.

    Connections are never reused and the DNS cache is disabled so that every
    probe measures a full DNS, TCP and TLS cycle. The connector has no
    connection limit: a request queued for a free slot would have the wait
    counted in its timeout and its handshake timings. Probe concurrency is
    capped by the executor instead. Must be called from a running event loop.

    Returns:
        aiohttp.ClientSession: A configured HTTP client session.
    """
    connector = aiohttp.TCPConnector(force_close=True, use_dns_cache=False, limit=0)
    logger.debug("HTTP connector configured without connection limit.")
    return aiohttp.ClientSession(connector=connector, trace_configs=get_trace_config())
