"""
Configuration context for the uptime monitoring system.

This module defines a data structure that holds all configuration parameters
for the monitoring system. It serves as a central point for passing configuration
throughout the application.
"""

from typing import NamedTuple


class MonitoringContext(NamedTuple):
    """
    A data structure containing all configuration parameters for the monitoring system.

    This class is immutable and provides a type-safe way to pass configuration
    throughout the application. It is created by parsing command-line arguments
    and environment variables.

    Attributes:
        dsn: Database connection string for PostgreSQL.
        worker_id: Unique identifier for this monitoring instance.
        logging_type: Type of logging configuration to use (dev, prod, or custom).
        logging_config_file: Path to custom logging configuration file (if logging_type is 'custom').
        db_pool_size: Maximum number of connections in the database connection pool.
        max_timeout: Upper bound in seconds for a single probe.
        max_connections: Maximum number of probes running at once, 0 for no limit.
        refresh_interval: Seconds between two reads of the monitor registry.
        drain_timeout: Seconds to wait for in-flight probes during shutdown.
        smtp_host: SMTP server used for downtime alerts; empty disables e-mail.
        smtp_port: SMTP server port.
        smtp_user: SMTP user name, empty for anonymous.
        smtp_password: SMTP password.
        smtp_use_tls: Whether to connect to the SMTP server over TLS.
        alert_sender: The From address of downtime e-mails.
    """

    dsn: str
    worker_id: str
    logging_type: str
    logging_config_file: str
    db_pool_size: int
    max_timeout: int
    max_connections: int
    refresh_interval: int
    drain_timeout: int
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_use_tls: bool
    alert_sender: str
