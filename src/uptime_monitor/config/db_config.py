"""
Database pool for the monitor registry and the result sink.

Both collaborators share one asyncpg pool. Before the pool is handed out, the
tables they depend on are looked up so that a missing schema stops the service
at startup instead of failing every probe write later on.
"""

import logging
from typing import List, Sequence

import asyncpg

from uptime_monitor.config import MonitoringContext

# Module logger
logger = logging.getLogger(__name__)

REQUIRED_TABLES: Sequence[str] = ("monitors", "probe_results")

# to_regclass resolves through the connection's search_path and yields NULL for unknown names.
MISSING_TABLES_QUERY = """
    SELECT name
    FROM unnest($1::text[]) AS name
    WHERE to_regclass(name) IS NULL;
"""

COMMAND_TIMEOUT = 30.0


async def initiate_db_pool(context: MonitoringContext) -> asyncpg.pool.Pool:
    """
    Create the shared connection pool and check the schema it will be used with.

    Args:
        context: Configuration context containing database connection parameters.

    Returns:
        asyncpg.pool.Pool: A pool whose connections see the required tables.

    Raises:
        RuntimeError: If a required table is missing.
        Exception: If the database cannot be reached. The pool is closed first.
    """
    pool: asyncpg.pool.Pool = await asyncpg.create_pool(
        dsn=context.dsn,
        min_size=1,
        max_size=context.db_pool_size,
        command_timeout=COMMAND_TIMEOUT,
    )

    try:
        async with pool.acquire() as connection:
            missing: List[str] = [
                record["name"] for record in await connection.fetch(MISSING_TABLES_QUERY, list(REQUIRED_TABLES))
            ]
        if missing:
            raise RuntimeError(
                f"Missing tables {', '.join(missing)}; apply utils/schema.sql or check the DSN search_path."
            )
    except Exception as e:
        logger.error(f"Database is not usable: {e}")
        await pool.close()
        raise

    logger.info(f"Database pool ready (max {context.db_pool_size} connections).")
    return pool
