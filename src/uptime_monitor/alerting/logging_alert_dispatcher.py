"""
Alert dispatcher that only writes downtime notifications to the log.

Used when no SMTP server is configured, so that downtime is still visible.
"""

import logging

from uptime_monitor.contracts import AlertDispatcher

# Module logger
logger = logging.getLogger(__name__)


class LoggingAlertDispatcher(AlertDispatcher):
    async def notify(self, contact: str, monitor_name: str, url: str) -> None:
        logger.warning(f"Monitor '{monitor_name}' is DOWN ({url}); owner: {contact}")
