"""
Main entry point for the uptime monitoring application.

This module initializes and runs the uptime monitor. It sets up logging,
creates database and HTTP connections, wires the probe pipeline and the
scheduler, and handles graceful shutdown when the application is terminated.
"""

import asyncio
import logging
import sys
from typing import List, Optional

import aiohttp
import asyncpg

from uptime_monitor.alerting.logging_alert_dispatcher import LoggingAlertDispatcher
from uptime_monitor.alerting.smtp_alert_dispatcher import SmtpAlertDispatcher
from uptime_monitor.config import MonitoringContext, get_context
from uptime_monitor.config.db_config import initiate_db_pool
from uptime_monitor.config.http_config import get_http_session
from uptime_monitor.config.logging_config import configure_logging
from uptime_monitor.contracts import AlertDispatcher
from uptime_monitor.errors import RegistryUnavailableError
from uptime_monitor.fetcher.aiohttp_probe_executor import AiohttpProbeExecutor
from uptime_monitor.pipeline import ProbePipeline
from uptime_monitor.registry.asyncpg_registry import AsyncpgMonitorRegistry
from uptime_monitor.scheduler.monitor_scheduler import MonitorScheduler
from uptime_monitor.service import MonitoringService
from uptime_monitor.sink.asyncpg_result_sink import AsyncpgResultSink


def build_dispatcher(context: MonitoringContext) -> AlertDispatcher:
    """E-mail alerts when an SMTP host is configured, log-only alerts otherwise."""
    if not context.smtp_host:
        logging.getLogger(__name__).warning("No SMTP host configured; downtime alerts go to the log only.")
        return LoggingAlertDispatcher()
    return SmtpAlertDispatcher(
        hostname=context.smtp_host,
        port=context.smtp_port,
        sender=context.alert_sender,
        username=context.smtp_user,
        password=context.smtp_password,
        use_tls=context.smtp_use_tls,
    )


async def main(context: MonitoringContext) -> None:
    """
    Set up and run the uptime monitoring application.

    Args:
        context: Configuration context containing all application settings.
    """
    logger: logging.Logger = logging.getLogger(__name__)
    logger.info("Starting application...")
    worker_id: str = context.worker_id

    http_session: aiohttp.ClientSession = get_http_session()
    logger.info("configured: http_session")

    db_pool: Optional[asyncpg.pool.Pool] = None
    service: Optional[MonitoringService] = None
    try:
        db_pool = await initiate_db_pool(context)
        logger.info("initialized: db_pool")

        registry = AsyncpgMonitorRegistry(pool=db_pool)
        pipeline = ProbePipeline(
            executor=AiohttpProbeExecutor(
                worker_id=worker_id,
                session=http_session,
                max_timeout=context.max_timeout,
                max_connections=context.max_connections,
            ),
            sink=AsyncpgResultSink(pool=db_pool),
            dispatcher=build_dispatcher(context),
        )
        service = MonitoringService(
            worker_id=worker_id,
            registry=registry,
            scheduler=MonitorScheduler(
                registry=registry,
                pipeline=pipeline,
                drain_timeout=context.drain_timeout,
            ),
            refresh_interval=context.refresh_interval,
        )

        logger.info("Service initialized. Starting monitoring loop...")
        await service.start()

    except asyncio.CancelledError:
        logger.info("Application shutdown requested.")
    finally:
        # Stop probing before closing the resources the probes use.
        logger.info("Shutting down resources...")
        if service:
            await service.stop()
        await http_session.close()
        if db_pool:
            await db_pool.close()
        logger.info("Shutdown complete.")


def run(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    context: MonitoringContext = get_context(argv)
    configure_logging(context)

    try:
        asyncio.run(main(context))
    except KeyboardInterrupt:
        logging.info("Shutdown initiated by user (Ctrl+C).")
    except RegistryUnavailableError as e:
        logging.critical(f"Cannot start without the monitor registry: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(run())
