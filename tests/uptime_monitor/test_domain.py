"""
Unit tests for the domain models and monitor validation.

The tests follow the Arrange-Act-Assert (AAA) pattern.
"""

from datetime import datetime, timedelta, timezone

import pytest

from uptime_monitor.domain import (
    Monitor,
    ProbeResult,
    ReconcileReport,
    ScheduledJob,
    SchedulerState,
    validate_monitor,
)
from uptime_monitor.errors import ConfigurationError


@pytest.fixture
def monitor() -> Monitor:
    """
    Creates a valid Monitor for testing.

    Returns:
        Monitor: A monitor probing https://example.com every 30 seconds.
    """
    return Monitor(
        id=1,
        name="Example",
        url="https://example.com",
        interval=timedelta(seconds=30),
        owner_contact="owner@example.com",
    )


def test_validate_monitor_should_accept_http_and_https_urls(monitor: Monitor) -> None:
    # Act & Assert
    validate_monitor(monitor)
    validate_monitor(monitor._replace(url="http://example.com:8080/health?full=1"))


@pytest.mark.parametrize(
    "url",
    [
        "ftp://example.com/file",
        "example.com",
        "/relative/path",
        "http://",
        "",
        "mailto:owner@example.com",
    ],
)
def test_validate_monitor_should_reject_invalid_urls(monitor: Monitor, url: str) -> None:
    # Arrange
    invalid = monitor._replace(url=url)

    # Act & Assert
    with pytest.raises(ConfigurationError) as exc_info:
        validate_monitor(invalid)
    assert exc_info.value.monitor_id == 1


@pytest.mark.parametrize("interval", [timedelta(0), timedelta(seconds=-5)])
def test_validate_monitor_should_reject_non_positive_intervals(
    monitor: Monitor, interval: timedelta
) -> None:
    # Arrange
    invalid = monitor._replace(interval=interval)

    # Act & Assert
    with pytest.raises(ConfigurationError, match="interval must be positive"):
        validate_monitor(invalid)


def test_validate_monitor_should_reject_non_timedelta_interval(monitor: Monitor) -> None:
    # Act & Assert
    with pytest.raises(ConfigurationError):
        validate_monitor(monitor._replace(interval=30))


def test_probe_result_failure_should_zero_status_and_timings() -> None:
    # Arrange
    timestamp = datetime(2024, 1, 1, tzinfo=timezone.utc)

    # Act
    result = ProbeResult.failure(monitor_id=7, timestamp=timestamp, error="ClientConnectorError")

    # Assert
    assert result.monitor_id == 7
    assert result.timestamp == timestamp
    assert result.status_code == 0
    assert result.response_time == 0
    assert result.dns_lookup_time == 0
    assert result.tcp_handshake_time == 0
    assert result.ssl_handshake_time == 0
    assert result.success is False
    assert result.error == "ClientConnectorError"


def test_scheduled_job_without_task_should_count_as_cancelled(monitor: Monitor) -> None:
    # Arrange
    job = ScheduledJob(monitor)

    # Act
    job.cancel()

    # Assert
    assert job.monitor_id == 1
    assert job.interval == timedelta(seconds=30)
    assert job.cancelled is True


def test_reconcile_report_should_only_count_timer_changes_as_changed() -> None:
    # Assert
    assert ReconcileReport(unchanged=(1, 2), rejected=(3,)).changed is False
    assert ReconcileReport(added=(1,)).changed is True
    assert ReconcileReport(removed=(1,)).changed is True
    assert ReconcileReport(rescheduled=(1,)).changed is True


def test_scheduler_state_values_should_be_strings() -> None:
    # Assert
    assert SchedulerState.RUNNING == "running"
    assert [state.value for state in SchedulerState] == ["not_started", "running", "stopped"]
