"""
Logging configuration module for the uptime monitoring system.

Logging is configured once at startup from a JSON dictConfig file: one of the
built-in 'dev' and 'prod' files shipped next to this module, or a user-supplied
file for the 'custom' type. Every record is stamped with the worker id so that
log lines from several monitoring instances can be told apart.
"""

import json
import logging.config
import os
from typing import Any, Dict

from uptime_monitor.config import MonitoringContext

_BUILT_IN_CONFIGS: Dict[str, str] = {
    "dev": "logging-config-dev.json",
    "prod": "logging-config-prod.json",
}


def configure_logging(context: MonitoringContext) -> None:
    """
    Configure logging for the application based on the provided configuration.

    Args:
        context: Configuration context containing logging settings.

    Raises:
        ValueError: If the logging type is empty or unknown, or if the 'custom'
            type is selected without a configuration file.
        RuntimeError: If the configuration file cannot be loaded.
    """
    logging_type: str = (context.logging_type or "").lower()
    if not logging_type:
        raise ValueError("Logging type must be provided.")

    if logging_type in _BUILT_IN_CONFIGS:
        config_file = _get_local_package_file_path(_BUILT_IN_CONFIGS[logging_type])
    elif logging_type == "custom":
        if not context.logging_config_file:
            raise ValueError("Custom logging configuration file must be provided.")
        config_file = context.logging_config_file
    else:
        raise ValueError(
            f"Invalid logging type: {context.logging_type}. Allowed values are: dev, prod, custom"
        )

    _load_logging_config(config_file)

    # Handler filters see propagated records, logger filters do not.
    worker_filter = _WorkerIdFilter(worker_id=context.worker_id)
    for handler in logging.getLogger().handlers:
        handler.addFilter(worker_filter)

    logging.getLogger(__name__).debug(f"Logging configured from {config_file}.")


def _load_logging_config(config_file: str) -> None:
    """
    Apply a JSON dictConfig file.

    Raises:
        RuntimeError: If the file is missing, is not valid JSON, or is rejected
            by logging.config.dictConfig.
    """
    try:
        with open(config_file) as f:
            config: Dict[str, Any] = json.load(f)
    except FileNotFoundError as err:
        raise RuntimeError(f"Logging config file not found: {config_file}") from err
    except json.JSONDecodeError as err:
        raise RuntimeError(f"Invalid JSON format in logging config file: {config_file}") from err

    try:
        logging.config.dictConfig(config)
    except (ValueError, TypeError, AttributeError, ImportError) as err:
        raise RuntimeError(f"Error loading logging config: {err}") from err


def _get_local_package_file_path(config_file: str) -> str:
    return os.path.join(os.path.dirname(__file__), config_file)


class _WorkerIdFilter(logging.Filter):
    """Adds a 'worker_id' attribute to every record; never drops a record."""

    def __init__(self, worker_id: str) -> None:
        super().__init__()
        self._worker_id: str = worker_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.worker_id = self._worker_id
        return True
