"""Tests for notification senders."""

from unittest.mock import MagicMock, patch

import pytest

from welltrack.services.notification_service import (
    ConsoleNotificationSender,
    Notification,
    SMTPNotificationSender,
    get_notification_sender,
    password_reset_notification,
)


@pytest.fixture
def smtp_sender() -> SMTPNotificationSender:
    return SMTPNotificationSender(
        host="smtp.example.com",
        port=587,
        username="mailer",
        password="secret",
        from_email="no-reply@example.com",
        from_name="WellTrack",
    )


def test_build_message_with_html_alternative(smtp_sender: SMTPNotificationSender) -> None:
    """Test building an email message."""
    msg = smtp_sender.build_message("alex@example.com", Notification("Hello", "plain body", "<p>html</p>"))

    assert msg["Subject"] == "Hello"
    assert msg["To"] == "alex@example.com"
    assert msg["From"] == "WellTrack <no-reply@example.com>"
    assert [part.get_content_type() for part in msg.get_payload()] == ["text/plain", "text/html"]


@pytest.mark.asyncio
async def test_smtp_send_uses_tls_and_login(smtp_sender: SMTPNotificationSender) -> None:
    """Test sending mail over SMTP."""
    with patch("welltrack.services.notification_service.smtplib.SMTP") as smtp_class:
        server = MagicMock()
        smtp_class.return_value.__enter__.return_value = server

        await smtp_sender.send("alex@example.com", Notification("Hello", "body"))

    smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=30)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer", "secret")
    from_addr, to_addrs, _ = server.sendmail.call_args.args
    assert (from_addr, to_addrs) == ("no-reply@example.com", ["alex@example.com"])


@pytest.mark.asyncio
async def test_smtp_errors_propagate(smtp_sender: SMTPNotificationSender) -> None:
    """Test SMTP failures."""
    with patch("welltrack.services.notification_service.smtplib.SMTP", side_effect=OSError("refused")):
        with pytest.raises(OSError):
            await smtp_sender.send("alex@example.com", Notification("Hello", "body"))


@pytest.mark.asyncio
async def test_console_sender_does_not_raise() -> None:
    """Test the console sender."""
    await ConsoleNotificationSender().send("alex@example.com", Notification("Hello", "body"))


def test_default_backend_is_console() -> None:
    """Test the default notification backend."""
    assert isinstance(get_notification_sender(), ConsoleNotificationSender)


def test_password_reset_notification() -> None:
    """Test the password reset email."""
    notification = password_reset_notification("http://app/reset-password?token=abc", 60)

    assert "http://app/reset-password?token=abc" in notification.text
    assert "60 minutes" in notification.text
