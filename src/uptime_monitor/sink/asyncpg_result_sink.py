"""
Database persistence of probe results.

Every probe result is appended to the 'probe_results' table as soon as it is
recorded. Writes are never buffered so that a failed write can be reported to
the caller for the probe it belongs to.
"""

import asyncio
import logging
from typing import Tuple

from asyncpg import Pool, exceptions

from uptime_monitor.contracts import ResultSink
from uptime_monitor.domain import ProbeResult
from uptime_monitor.errors import PersistenceError

# Module logger
logger = logging.getLogger(__name__)

INSERT_RESULT_QUERY = """
    INSERT INTO probe_results (
        monitor_id, checked_at, status_code, response_time_ms, dns_lookup_time_ms,
        tcp_handshake_time_ms, ssl_handshake_time_ms, success, error_detail
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9);
"""


def to_row(result: ProbeResult) -> Tuple:
    """Transforms a ProbeResult into a tuple matching the 'probe_results' columns."""
    return (
        result.monitor_id,
        result.timestamp,
        result.status_code,
        result.response_time,
        result.dns_lookup_time,
        result.tcp_handshake_time,
        result.ssl_handshake_time,
        result.success,
        result.error,
    )


class AsyncpgResultSink(ResultSink):
    """Appends probe results to PostgreSQL, one row per probe."""

    def __init__(self, pool: Pool, acquire_timeout: float = 10.0) -> None:
        """
        Args:
            pool: The asyncpg connection pool.
            acquire_timeout: Seconds to wait for a free connection.
        """
        self._pool: Pool = pool
        self._acquire_timeout: float = acquire_timeout

    async def record(self, result: ProbeResult) -> None:
        """
        Inserts one probe result.

        Raises:
            PersistenceError: If the row could not be written.
        """
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                await conn.execute(INSERT_RESULT_QUERY, *to_row(result))
        except asyncio.TimeoutError as e:
            raise PersistenceError(
                f"Timed out acquiring a connection to store the result of monitor {result.monitor_id}"
            ) from e
        except exceptions.PostgresError as e:
            raise PersistenceError(
                f"Database error storing the result of monitor {result.monitor_id}: {e}"
            ) from e
        except (OSError, exceptions.InterfaceError) as e:
            raise PersistenceError(
                f"Connection error storing the result of monitor {result.monitor_id}: {e}"
            ) from e

        logger.debug(f"Stored result of monitor {result.monitor_id} (success={result.success}).")
