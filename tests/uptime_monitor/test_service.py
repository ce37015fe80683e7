"""
Unit tests for the MonitoringService class.

The tests follow the Arrange-Act-Assert (AAA) pattern and use proper mocking
of all external dependencies to ensure true unit testing.
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from uptime_monitor.contracts import MonitorRegistry
from uptime_monitor.domain import Monitor, ReconcileReport, SchedulerState
from uptime_monitor.errors import RegistryUnavailableError
from uptime_monitor.scheduler.monitor_scheduler import MonitorScheduler
from uptime_monitor.service import MonitoringService

MONITORS = [
    Monitor(
        id=1,
        name="Shop",
        url="https://shop.example.com",
        interval=timedelta(seconds=30),
        owner_contact="owner@example.com",
    )
]
REPORT = ReconcileReport(added=(1,), removed=(), rescheduled=(), unchanged=(), rejected=())


@pytest_asyncio.fixture
async def registry() -> AsyncMock:
    registry = AsyncMock(spec=MonitorRegistry)
    registry.list_monitors.return_value = MONITORS
    return registry


@pytest_asyncio.fixture
async def scheduler() -> MagicMock:
    """
    Creates a mock MonitorScheduler with async start/stop and sync reconcile.

    Returns:
        MagicMock: A mock scheduler.
    """
    scheduler = MagicMock(spec=MonitorScheduler)
    scheduler.start = AsyncMock(return_value=REPORT)
    scheduler.stop = AsyncMock()
    scheduler.reconcile.return_value = REPORT
    scheduler.jobs = {}
    scheduler.in_flight = 0
    scheduler.skipped_ticks = 0
    scheduler.state = SchedulerState.RUNNING
    return scheduler


def test_init_should_reject_non_positive_refresh_interval(registry, scheduler) -> None:
    # Act & Assert
    with pytest.raises(ValueError, match="refresh_interval"):
        MonitoringService("worker", registry, scheduler, refresh_interval=0)


@pytest.mark.asyncio
async def test_reload_should_reconcile_with_registry_snapshot(registry, scheduler) -> None:
    # Arrange
    service = MonitoringService("worker", registry, scheduler, refresh_interval=60)

    # Act
    report = await service.reload()

    # Assert
    assert report is REPORT
    scheduler.reconcile.assert_called_once_with(MONITORS)


@pytest.mark.asyncio
async def test_reload_should_keep_jobs_when_registry_is_unavailable(registry, scheduler) -> None:
    # Arrange
    registry.list_monitors.side_effect = RegistryUnavailableError("database down")
    service = MonitoringService("worker", registry, scheduler, refresh_interval=60)

    # Act
    report = await service.reload()

    # Assert
    assert report is None
    scheduler.reconcile.assert_not_called()


@pytest.mark.asyncio
async def test_start_should_refresh_periodically_until_stopped(registry, scheduler) -> None:
    # Arrange
    service = MonitoringService("worker", registry, scheduler, refresh_interval=0.02)

    # Act
    task = asyncio.create_task(service.start())
    await asyncio.sleep(0.11)
    await service.stop()
    await asyncio.wait_for(task, timeout=1)

    # Assert
    scheduler.start.assert_awaited_once()
    assert scheduler.reconcile.call_count >= 2
    scheduler.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_refresh_loop_should_survive_unexpected_errors(registry, scheduler) -> None:
    # Arrange
    scheduler.reconcile.side_effect = [RuntimeError("boom"), REPORT, REPORT, REPORT, REPORT, REPORT]
    service = MonitoringService("worker", registry, scheduler, refresh_interval=0.02)

    # Act
    task = asyncio.create_task(service.start())
    await asyncio.sleep(0.11)
    await service.stop()
    await asyncio.wait_for(task, timeout=1)

    # Assert
    assert scheduler.reconcile.call_count >= 2


@pytest.mark.asyncio
async def test_start_should_propagate_startup_registry_failure(registry, scheduler) -> None:
    # Arrange
    scheduler.start.side_effect = RegistryUnavailableError("database down")
    service = MonitoringService("worker", registry, scheduler, refresh_interval=60)

    # Act & Assert
    with pytest.raises(RegistryUnavailableError):
        await service.start()

    scheduler.reconcile.assert_not_called()


@pytest.mark.asyncio
async def test_stop_should_stop_scheduler_when_never_started(registry, scheduler) -> None:
    # Arrange
    service = MonitoringService("worker", registry, scheduler, refresh_interval=60)

    # Act
    await service.stop()

    # Assert
    scheduler.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_start_should_not_refresh_when_stopped_during_startup(registry, scheduler) -> None:
    # Arrange
    scheduler.start.return_value = ReconcileReport()
    scheduler.state = SchedulerState.STOPPED
    service = MonitoringService("worker", registry, scheduler, refresh_interval=0.01)

    # Act
    await asyncio.wait_for(service.start(), timeout=1)
    await asyncio.sleep(0.05)

    # Assert
    scheduler.reconcile.assert_not_called()
    registry.list_monitors.assert_not_awaited()
