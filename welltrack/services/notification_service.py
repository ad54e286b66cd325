"""Outgoing notifications (password reset links, weekly digests).

Services depend on the ``NotificationSender`` capability only; the concrete
sender is picked from ``NOTIFICATION_BACKEND`` at startup.
"""

import asyncio
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from functools import lru_cache

import structlog

from welltrack.config import settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Notification:
    """Message payload; ``html`` is an optional alternative body."""

    subject: str
    text: str
    html: str | None = None


class NotificationSender(ABC):
    """Delivers a notification to one recipient."""

    @abstractmethod
    async def send(self, to: str, notification: Notification) -> None:
        """
        Deliver a notification.

        Raises:
            Exception: whatever the transport raises; callers decide whether
                a failed delivery is fatal
        """


class ConsoleNotificationSender(NotificationSender):
    """Writes notifications to the application log instead of delivering them."""

    async def send(self, to: str, notification: Notification) -> None:
        logger.info(
            "notification_logged",
            to=to,
            subject=notification.subject,
            body=notification.text,
        )


class SMTPNotificationSender(NotificationSender):
    """Sends notifications as email over SMTP."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        from_email: str = "",
        from_name: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email
        self.from_name = from_name

    def build_message(self, to: str, notification: Notification) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = notification.subject
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = to
        msg.attach(MIMEText(notification.text, "plain", "utf-8"))
        if notification.html:
            msg.attach(MIMEText(notification.html, "html", "utf-8"))
        return msg

    def _deliver(self, to: str, notification: Notification) -> None:
        msg = self.build_message(to, notification)
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.sendmail(self.from_email, [to], msg.as_string())

    async def send(self, to: str, notification: Notification) -> None:
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._deliver, to, notification)
        logger.info("notification_sent", to=to, subject=notification.subject)


@lru_cache
def get_notification_sender() -> NotificationSender:
    """Sender configured by ``NOTIFICATION_BACKEND`` (``console`` or ``smtp``)."""
    backend = settings.notification_backend.lower()
    if backend == "smtp":
        return SMTPNotificationSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_email=settings.smtp_from_email,
            from_name=settings.smtp_from_name,
        )
    if backend != "console":
        logger.warning("unknown_notification_backend", backend=backend)
    return ConsoleNotificationSender()


def password_reset_notification(reset_url: str, expires_minutes: int) -> Notification:
    """Notification carrying a password reset link."""
    text = (
        "Hi,\n\n"
        "We received a request to reset your WellTrack password.\n\n"
        f"Use the link below to choose a new password:\n{reset_url}\n\n"
        f"The link expires in {expires_minutes} minutes. "
        "If you did not request this, you can safely ignore this email.\n"
    )
    return Notification(subject="Reset your WellTrack password", text=text)
