"""
Configuration module for the uptime monitoring system.

This module provides functionality to parse command-line arguments and environment
variables to create a configuration context for the monitoring system. It defines
default values and help text for all configurable parameters.
"""

import argparse
import os
from typing import Any, List, Optional
from uuid import uuid4

from uptime_monitor.config.constants import (
    DEFAULT_ALERT_SENDER,
    DEFAULT_DB_POOL_SIZE,
    DEFAULT_DRAIN_TIMEOUT,
    DEFAULT_DSN,
    DEFAULT_LOGGING_CONFIG_FILE,
    DEFAULT_LOGGING_TYPE,
    DEFAULT_MAX_CONNECTIONS,
    DEFAULT_MAX_TIMEOUT,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_SMTP_HOST,
    DEFAULT_SMTP_PASSWORD,
    DEFAULT_SMTP_PORT,
    DEFAULT_SMTP_USE_TLS,
    DEFAULT_SMTP_USER,
    DEFAULT_WORKER_ID_PREFIX,
)
from uptime_monitor.config.monitoring_context import MonitoringContext

__all__ = ["MonitoringContext", "get_context"]


def get_context(argv: Optional[List[str]] = None) -> MonitoringContext:
    """
    Parse command-line arguments and environment variables to create a configuration context.

    For each option, the command-line argument wins, then the UPTIME_MONITOR_*
    environment variable, and finally the default from the constants module.

    Args:
        argv: Arguments to parse. Defaults to sys.argv[1:].

    Returns:
        MonitoringContext: A configuration context object containing all parsed settings.
    """
    parser = argparse.ArgumentParser(
        prog="uptime-monitor",
        description="Periodically probes HTTP(S) monitors and records their availability.",
    )

    parser.add_argument(
        "-dsn",
        type=str,
        default=os.getenv("UPTIME_MONITOR_DSN", DEFAULT_DSN),
        help="Specifies the DSN (connection string) for the PostgreSQL database.\n"
        "If not provided, the value is read from the UPTIME_MONITOR_DSN environment variable.",
    )

    parser.add_argument(
        "-wid",
        "--worker-id",
        type=str,
        default=os.getenv("UPTIME_MONITOR_WORKER_ID", f"{DEFAULT_WORKER_ID_PREFIX}{uuid4()}"),
        help="Specifies the identifier of this monitoring instance.\n"
        "If not provided, the value is read from the UPTIME_MONITOR_WORKER_ID environment variable.\n"
        f"If that is also absent, the default value will be {DEFAULT_WORKER_ID_PREFIX}uuid4().",
    )

    parser.add_argument(
        "-ps",
        "--db-pool-size",
        type=int,
        default=int(os.getenv("UPTIME_MONITOR_DB_POOL_SIZE", DEFAULT_DB_POOL_SIZE)),
        help="Specifies the maximum number of connections in the database connection pool.\n"
        f"Environment variable: UPTIME_MONITOR_DB_POOL_SIZE. Default: {DEFAULT_DB_POOL_SIZE}.",
    )

    parser.add_argument(
        "-mt",
        "--max-timeout",
        type=int,
        default=int(os.getenv("UPTIME_MONITOR_MAX_TIMEOUT", DEFAULT_MAX_TIMEOUT)),
        help="Specifies the maximum duration in seconds of a single probe.\n"
        "A probe never runs longer than its monitor's interval either.\n"
        f"Environment variable: UPTIME_MONITOR_MAX_TIMEOUT. Default: {DEFAULT_MAX_TIMEOUT}.",
    )

    parser.add_argument(
        "-mc",
        "--max-connections",
        type=int,
        default=int(os.getenv("UPTIME_MONITOR_MAX_CONNECTIONS", DEFAULT_MAX_CONNECTIONS)),
        help="Specifies the maximum number of probes running at once (0 for no limit).\n"
        "Probes waiting for a slot start their clock and timeout only once they get one.\n"
        f"Environment variable: UPTIME_MONITOR_MAX_CONNECTIONS. Default: {DEFAULT_MAX_CONNECTIONS}.",
    )

    parser.add_argument(
        "-ri",
        "--refresh-interval",
        type=int,
        default=int(os.getenv("UPTIME_MONITOR_REFRESH_INTERVAL", DEFAULT_REFRESH_INTERVAL)),
        help="Specifies how often, in seconds, the monitor registry is re-read.\n"
        f"Environment variable: UPTIME_MONITOR_REFRESH_INTERVAL. Default: {DEFAULT_REFRESH_INTERVAL}.",
    )

    parser.add_argument(
        "-dt",
        "--drain-timeout",
        type=int,
        default=int(os.getenv("UPTIME_MONITOR_DRAIN_TIMEOUT", DEFAULT_DRAIN_TIMEOUT)),
        help="Specifies how long, in seconds, shutdown waits for in-flight probes.\n"
        f"Environment variable: UPTIME_MONITOR_DRAIN_TIMEOUT. Default: {DEFAULT_DRAIN_TIMEOUT}.",
    )

    parser.add_argument(
        "--smtp-host",
        type=str,
        default=os.getenv("UPTIME_MONITOR_SMTP_HOST", DEFAULT_SMTP_HOST),
        help="Specifies the SMTP server used to send downtime alerts.\n"
        "When empty, alerts are only written to the log.",
    )

    parser.add_argument(
        "--smtp-port",
        type=int,
        default=int(os.getenv("UPTIME_MONITOR_SMTP_PORT", DEFAULT_SMTP_PORT)),
        help=f"Specifies the SMTP server port. Default: {DEFAULT_SMTP_PORT}.",
    )

    parser.add_argument(
        "--smtp-user",
        type=str,
        default=os.getenv("UPTIME_MONITOR_SMTP_USER", DEFAULT_SMTP_USER),
        help="Specifies the SMTP user name.",
    )

    parser.add_argument(
        "--smtp-password",
        type=str,
        default=os.getenv("UPTIME_MONITOR_SMTP_PASSWORD", DEFAULT_SMTP_PASSWORD),
        help="Specifies the SMTP password. Prefer the UPTIME_MONITOR_SMTP_PASSWORD environment variable.",
    )

    parser.add_argument(
        "--smtp-use-tls",
        type=str,
        default=os.getenv("UPTIME_MONITOR_SMTP_USE_TLS", DEFAULT_SMTP_USE_TLS),
        help=f"Specifies whether to connect to the SMTP server over TLS. Default: {DEFAULT_SMTP_USE_TLS}.",
    )

    parser.add_argument(
        "--alert-sender",
        type=str,
        default=os.getenv("UPTIME_MONITOR_ALERT_SENDER", DEFAULT_ALERT_SENDER),
        help=f"Specifies the From address of downtime alerts. Default: {DEFAULT_ALERT_SENDER}.",
    )

    parser.add_argument(
        "-lt",
        "--logging-type",
        type=str,
        default=os.getenv("UPTIME_MONITOR_LOGGING_TYPE", DEFAULT_LOGGING_TYPE),
        help="Specifies the logging configuration type to use.\n"
        "Allowed values: dev, prod, custom (case insensitive).\n"
        "For 'dev' and 'prod', system will use built-in configurations.\n"
        "For 'custom', the --logging-config-file argument is required.",
    )

    parser.add_argument(
        "-lcf",
        "--logging-config-file",
        type=str,
        default=os.getenv("UPTIME_MONITOR_LOGGING_CONFIG_FILE", DEFAULT_LOGGING_CONFIG_FILE),
        help="Path to custom logging configuration file.\n"
        "Required when --logging-type is set to 'custom'.",
    )

    # Parse the command-line arguments
    args: Any = parser.parse_args(argv)

    if args.refresh_interval < 1:
        parser.error("--refresh-interval must be a positive integer")
    if args.max_timeout < 1:
        parser.error("--max-timeout must be a positive integer")
    if args.max_connections < 0:
        parser.error("--max-connections must not be negative")

    return MonitoringContext(
        dsn=args.dsn,
        worker_id=args.worker_id,
        logging_type=args.logging_type,
        logging_config_file=args.logging_config_file,
        db_pool_size=args.db_pool_size,
        max_timeout=args.max_timeout,
        max_connections=args.max_connections,
        refresh_interval=args.refresh_interval,
        drain_timeout=args.drain_timeout,
        smtp_host=args.smtp_host,
        smtp_port=args.smtp_port,
        smtp_user=args.smtp_user,
        smtp_password=args.smtp_password,
        smtp_use_tls=args.smtp_use_tls.lower() == "true",
        alert_sender=args.alert_sender,
    )
