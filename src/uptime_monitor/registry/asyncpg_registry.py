"""
PostgreSQL-based implementation of the MonitorRegistry interface.

Monitors are owned by an external web layer that writes the 'monitors' table;
this registry only reads a snapshot of it.
"""

import logging
from typing import List

from asyncpg import Pool, Record

from uptime_monitor.contracts import MonitorRegistry
from uptime_monitor.domain import Monitor
from uptime_monitor.errors import RegistryUnavailableError

# Module logger
logger = logging.getLogger(__name__)

LIST_MONITORS_QUERY = """
                      SELECT id,
                             monitor_name,
                             url,
                             check_interval,
                             owner_email
                      FROM monitors
                      ORDER BY id; \
                      """


def map_monitor(record: Record) -> Monitor:
    """
    Converts a database record to a Monitor domain object.

    Args:
        record: A row of the 'monitors' table.

    Returns:
        Monitor: The corresponding domain object.
    """
    return Monitor(
        id=record["id"],
        name=record["monitor_name"],
        url=record["url"],
        interval=record["check_interval"],
        owner_contact=record["owner_email"],
    )


class AsyncpgMonitorRegistry(MonitorRegistry):
    """Reads the monitor snapshot from PostgreSQL through an asyncpg pool."""

    def __init__(self, pool: Pool, acquire_timeout: float = 10.0) -> None:
        """
        Args:
            pool: A connection pool to the PostgreSQL database.
            acquire_timeout: Seconds to wait for a free connection.
        """
        self._pool: Pool = pool
        self._acquire_timeout: float = acquire_timeout

    async def list_monitors(self) -> List[Monitor]:
        """
        Returns every monitor, ordered by id.

        Raises:
            RegistryUnavailableError: If the query cannot be executed.
        """
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                records = await conn.fetch(LIST_MONITORS_QUERY)
        except Exception as e:
            logger.error(f"Could not read monitors from the database: {e}")
            raise RegistryUnavailableError(f"Could not read monitors: {e}") from e

        monitors = [map_monitor(record) for record in records]
        logger.debug(f"Loaded {len(monitors)} monitors from the registry.")
        return monitors
