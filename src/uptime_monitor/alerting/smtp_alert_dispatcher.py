"""
Downtime alerts delivered by e-mail.

The dispatcher sends one plain-text message per failed probe to the monitor
owner's contact address using aiosmtplib. Delivery is attempted once; retries,
if any, are the SMTP server's business.
"""

import logging
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib

from uptime_monitor.contracts import AlertDispatcher
from uptime_monitor.errors import DispatchError

# Module logger
logger = logging.getLogger(__name__)

SUBJECT_TEMPLATE = "Downtime alert: {monitor_name}"

BODY_TEMPLATE = """Hello,

Your monitor "{monitor_name}" is DOWN.

URL: {url}
Detected at: {detected_at}

The monitor will keep probing the site and recording results.
"""


class SmtpAlertDispatcher(AlertDispatcher):
    """Sends downtime notifications through an SMTP server."""

    def __init__(
        self,
        hostname: str,
        port: int,
        sender: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = False,
        timeout: float = 30.0,
    ) -> None:
        """
        Args:
            hostname: SMTP server host name.
            port: SMTP server port.
            sender: The From address of the messages.
            username: SMTP user name, None for anonymous delivery.
            password: SMTP password.
            use_tls: Whether to connect over TLS.
            timeout: Seconds before the SMTP conversation is abandoned.
        """
        if not hostname:
            raise ValueError("hostname must be provided and must be not blank.")

        self._hostname: str = hostname
        self._port: int = port
        self._sender: str = sender
        self._username: Optional[str] = username or None
        self._password: Optional[str] = password or None
        self._use_tls: bool = use_tls
        self._timeout: float = timeout

    def build_message(self, contact: str, monitor_name: str, url: str) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["From"] = self._sender
        msg["To"] = contact
        msg["Subject"] = SUBJECT_TEMPLATE.format(monitor_name=monitor_name)
        body = BODY_TEMPLATE.format(
            monitor_name=monitor_name,
            url=url,
            detected_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )
        msg.attach(MIMEText(body, "plain"))
        return msg

    async def notify(self, contact: str, monitor_name: str, url: str) -> None:
        """
        E-mails a downtime alert to the monitor owner.

        Raises:
            DispatchError: If there is no contact or the SMTP delivery fails.
        """
        if not contact:
            raise DispatchError(f"No contact address for monitor '{monitor_name}'")

        message = self.build_message(contact, monitor_name, url)
        try:
            await aiosmtplib.send(
                message,
                hostname=self._hostname,
                port=self._port,
                username=self._username,
                password=self._password,
                use_tls=self._use_tls,
                timeout=self._timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise DispatchError(f"Could not e-mail {contact} about '{monitor_name}': {e}") from e

        logger.info(f"Downtime alert for '{monitor_name}' sent to {contact}.")
