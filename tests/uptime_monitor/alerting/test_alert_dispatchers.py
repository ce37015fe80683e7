"""
Unit tests for the SMTP and logging alert dispatchers.

The tests follow the Arrange-Act-Assert (AAA) pattern and use proper mocking
of all external dependencies to ensure true unit testing.
"""

import logging
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from uptime_monitor.alerting.logging_alert_dispatcher import LoggingAlertDispatcher
from uptime_monitor.alerting.smtp_alert_dispatcher import SmtpAlertDispatcher
from uptime_monitor.errors import DispatchError


@pytest.fixture
def dispatcher() -> SmtpAlertDispatcher:
    return SmtpAlertDispatcher(
        hostname="smtp.example.com",
        port=587,
        sender="alerts@example.com",
        username="alerts",
        password="secret",
        use_tls=False,
    )


def test_init_should_require_hostname() -> None:
    # Act & Assert
    with pytest.raises(ValueError, match="hostname"):
        SmtpAlertDispatcher(hostname="", port=25, sender="alerts@example.com")


def test_build_message_should_address_owner(dispatcher: SmtpAlertDispatcher) -> None:
    # Act
    message = dispatcher.build_message("owner@example.com", "Shop", "https://shop.example.com")

    # Assert
    assert message["To"] == "owner@example.com"
    assert message["From"] == "alerts@example.com"
    assert message["Subject"] == "Downtime alert: Shop"
    body = message.get_payload()[0].get_payload()
    assert "https://shop.example.com" in body
    assert '"Shop" is DOWN' in body


@pytest.mark.asyncio
async def test_notify_should_send_one_email(dispatcher: SmtpAlertDispatcher) -> None:
    # Arrange
    with patch("aiosmtplib.send", new_callable=AsyncMock) as mock_send:
        # Act
        await dispatcher.notify("owner@example.com", "Shop", "https://shop.example.com")

    # Assert
    mock_send.assert_awaited_once()
    message = mock_send.await_args.args[0]
    assert message["To"] == "owner@example.com"
    kwargs = mock_send.await_args.kwargs
    assert kwargs["hostname"] == "smtp.example.com"
    assert kwargs["port"] == 587
    assert kwargs["username"] == "alerts"
    assert kwargs["password"] == "secret"
    assert kwargs["use_tls"] is False


@pytest.mark.asyncio
async def test_notify_should_send_anonymously_without_credentials() -> None:
    # Arrange
    dispatcher = SmtpAlertDispatcher(hostname="localhost", port=25, sender="alerts@example.com")
    with patch("aiosmtplib.send", new_callable=AsyncMock) as mock_send:
        # Act
        await dispatcher.notify("owner@example.com", "Shop", "https://shop.example.com")

    # Assert
    assert mock_send.await_args.kwargs["username"] is None
    assert mock_send.await_args.kwargs["password"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [aiosmtplib.SMTPConnectError("connection refused"), ConnectionRefusedError("refused")],
)
async def test_notify_should_raise_dispatch_error_on_delivery_failure(
    dispatcher: SmtpAlertDispatcher, error: Exception
) -> None:
    # Arrange
    with patch("aiosmtplib.send", new_callable=AsyncMock, side_effect=error):
        # Act & Assert
        with pytest.raises(DispatchError) as exc_info:
            await dispatcher.notify("owner@example.com", "Shop", "https://shop.example.com")

    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_notify_should_reject_missing_contact(dispatcher: SmtpAlertDispatcher) -> None:
    # Arrange
    with patch("aiosmtplib.send", new_callable=AsyncMock) as mock_send:
        # Act & Assert
        with pytest.raises(DispatchError, match="No contact"):
            await dispatcher.notify("", "Shop", "https://shop.example.com")

    mock_send.assert_not_awaited()


@pytest.mark.asyncio
async def test_logging_dispatcher_should_log_a_warning(caplog: pytest.LogCaptureFixture) -> None:
    # Arrange
    dispatcher = LoggingAlertDispatcher()

    # Act
    with caplog.at_level(logging.WARNING):
        await dispatcher.notify("owner@example.com", "Shop", "https://shop.example.com")

    # Assert
    assert "Monitor 'Shop' is DOWN (https://shop.example.com)" in caplog.text
