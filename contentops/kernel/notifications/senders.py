"""
Notification sender collaborator.

Welcome and password reset emails are fire-and-forget: a failed send is
logged and never undoes the operation that triggered it.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from contentops.config import Settings, get_settings
from contentops.logging_config import get_logger

logger = get_logger(__name__)


class TemplateKind(str, Enum):
    """Notification templates the core sends."""
    WELCOME = "welcome"
    PASSWORD_RESET = "password_reset"


class NotificationSender(Protocol):
    """Delivers a templated notification to one recipient."""

    async def send(
        self,
        template_kind: TemplateKind,
        recipient: str,
        payload: Dict[str, Any],
    ) -> None: ...


def render(template_kind: TemplateKind, payload: Dict[str, Any], settings: Settings) -> tuple[str, str]:
    """Return (subject, plain-text body) for a template."""
    name = payload.get("name", "there")
    if template_kind == TemplateKind.PASSWORD_RESET:
        link = f"{settings.frontend_url}/reset-password?token={payload['token']}"
        minutes = payload.get("expires_in_minutes", settings.password_reset_expire_minutes)
        return (
            f"Reset your {settings.project_name} password",
            f"Hi {name},\n\nUse this link within {minutes} minutes to choose a new password:\n{link}\n\n"
            "If you did not ask for a reset you can ignore this email.\n",
        )
    role = payload.get("role", "user")
    return (
        f"Welcome to {settings.project_name}",
        f"Hi {name},\n\nYour {role} account is ready. Sign in here:\n{settings.frontend_url}/login\n",
    )


class LoggingNotificationSender:
    """Default sender: writes the rendered message to the log."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    async def send(
        self,
        template_kind: TemplateKind,
        recipient: str,
        payload: Dict[str, Any],
    ) -> None:
        subject, _ = render(template_kind, payload, self.settings)
        logger.info(
            "Notification (not delivered, logging sender)",
            extra={"template": template_kind.value, "recipient": recipient, "subject": subject},
        )


class SmtpNotificationSender:
    """Sends plain-text email over SMTP. The blocking client runs in a worker thread."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    async def send(
        self,
        template_kind: TemplateKind,
        recipient: str,
        payload: Dict[str, Any],
    ) -> None:
        subject, body = render(template_kind, payload, self.settings)
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.smtp_from_email
        msg["To"] = recipient
        msg.set_content(body)
        await asyncio.to_thread(self._deliver, msg)

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as smtp:
            smtp.starttls()
            if self.settings.smtp_user:
                smtp.login(self.settings.smtp_user, self.settings.smtp_password)
            smtp.send_message(msg)


def get_notification_sender(settings: Optional[Settings] = None) -> NotificationSender:
    """SMTP when credentials are configured, otherwise the logging sender."""
    settings = settings or get_settings()
    if settings.smtp_user:
        return SmtpNotificationSender(settings)
    return LoggingNotificationSender(settings)


async def notify_safely(
    sender: NotificationSender,
    template_kind: TemplateKind,
    recipient: str,
    payload: Dict[str, Any],
) -> bool:
    """
    Send a non-critical notification.

    Returns:
        True if the sender reported success, False if it raised (the error is logged)
    """
    try:
        await sender.send(template_kind, recipient, payload)
    except Exception:
        logger.exception(
            "Notification failed",
            extra={"template": template_kind.value, "recipient": recipient},
        )
        return False
    return True
