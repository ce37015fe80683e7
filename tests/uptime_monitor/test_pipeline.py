"""
Unit tests for the ProbePipeline class.

These tests check that every probe is recorded exactly once, that only failed
probes raise an alert, and that sink and dispatcher errors are contained.

The tests follow the Arrange-Act-Assert (AAA) pattern and use proper mocking
of all external dependencies to ensure true unit testing.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from uptime_monitor.contracts import AlertDispatcher, ProbeExecutor, ResultSink
from uptime_monitor.domain import Monitor, ProbeResult
from uptime_monitor.errors import DispatchError, PersistenceError
from uptime_monitor.pipeline import ProbePipeline

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def monitor() -> Monitor:
    return Monitor(
        id=3,
        name="Shop",
        url="https://shop.example.com",
        interval=timedelta(seconds=30),
        owner_contact="owner@example.com",
    )


@pytest_asyncio.fixture
async def success_result() -> ProbeResult:
    return ProbeResult(
        monitor_id=3,
        timestamp=NOW,
        status_code=200,
        response_time=120.0,
        dns_lookup_time=10.0,
        tcp_handshake_time=30.0,
        ssl_handshake_time=30.0,
        success=True,
    )


@pytest_asyncio.fixture
async def mocks():
    """
    Creates mocks for the executor, sink and dispatcher.

    Returns:
        A tuple of (executor, sink, dispatcher) AsyncMocks.
    """
    return (
        AsyncMock(spec=ProbeExecutor),
        AsyncMock(spec=ResultSink),
        AsyncMock(spec=AlertDispatcher),
    )


@pytest.mark.asyncio
async def test_run_should_record_success_without_alert(mocks, monitor, success_result) -> None:
    # Arrange
    executor, sink, dispatcher = mocks
    executor.probe.return_value = success_result
    pipeline = ProbePipeline(executor, sink, dispatcher)

    # Act
    result = await pipeline.run(monitor)

    # Assert
    assert result is success_result
    executor.probe.assert_awaited_once_with(monitor)
    sink.record.assert_awaited_once_with(success_result)
    dispatcher.notify.assert_not_awaited()


@pytest.mark.asyncio
async def test_run_should_record_failure_and_alert_once(mocks, monitor) -> None:
    # Arrange
    executor, sink, dispatcher = mocks
    failure = ProbeResult.failure(3, NOW, "TransportError: timed out after 10.0s")
    executor.probe.return_value = failure
    pipeline = ProbePipeline(executor, sink, dispatcher)

    # Act
    result = await pipeline.run(monitor)

    # Assert
    assert result.success is False
    sink.record.assert_awaited_once_with(failure)
    dispatcher.notify.assert_awaited_once_with(
        "owner@example.com", "Shop", "https://shop.example.com"
    )


@pytest.mark.asyncio
async def test_run_should_still_alert_when_sink_fails(mocks, monitor) -> None:
    # Arrange
    executor, sink, dispatcher = mocks
    executor.probe.return_value = ProbeResult.failure(3, NOW, "HTTP 503")
    sink.record.side_effect = PersistenceError("database is down")
    pipeline = ProbePipeline(executor, sink, dispatcher)

    # Act
    result = await pipeline.run(monitor)

    # Assert
    assert result.success is False
    sink.record.assert_awaited_once()
    dispatcher.notify.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_should_contain_dispatch_errors(mocks, monitor) -> None:
    # Arrange
    executor, sink, dispatcher = mocks
    executor.probe.return_value = ProbeResult.failure(3, NOW, "HTTP 500")
    dispatcher.notify.side_effect = DispatchError("smtp unreachable")
    pipeline = ProbePipeline(executor, sink, dispatcher)

    # Act
    result = await pipeline.run(monitor)

    # Assert
    assert result.status_code == 0
    sink.record.assert_awaited_once()
    dispatcher.notify.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_should_contain_unexpected_collaborator_errors(
    mocks, monitor, caplog: pytest.LogCaptureFixture
) -> None:
    # Arrange
    executor, sink, dispatcher = mocks
    executor.probe.return_value = ProbeResult.failure(3, NOW, "HTTP 500")
    sink.record.side_effect = RuntimeError("boom")
    dispatcher.notify.side_effect = KeyError("missing")
    pipeline = ProbePipeline(executor, sink, dispatcher)

    # Act
    await pipeline.run(monitor)

    # Assert
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "boom" in messages
    assert "missing" in messages
