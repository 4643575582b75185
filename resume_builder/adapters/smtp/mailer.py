"""
SMTP email sender adapter - Implements EmailSender protocol via fastapi-mail.

Messages are sent asynchronously so a slow mail server never ties up a
worker thread. Transport failures surface as the domain's
NotificationError; the workflows log them and keep the issued code valid.
"""

import logging

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from resume_builder.config.settings import Settings
from resume_builder.domain.exceptions import NotificationError

logger = logging.getLogger(__name__)


def build_connection_config(settings: Settings) -> ConnectionConfig:
    """Translate application settings into a fastapi-mail connection config."""
    return ConnectionConfig(
        MAIL_USERNAME=settings.mail_username,
        MAIL_PASSWORD=settings.mail_password,
        MAIL_FROM=settings.mail_from,
        MAIL_FROM_NAME=settings.mail_from_name,
        MAIL_PORT=settings.mail_port,
        MAIL_SERVER=settings.mail_server,
        MAIL_STARTTLS=settings.mail_starttls,
        MAIL_SSL_TLS=settings.mail_ssl_tls,
        USE_CREDENTIALS=bool(settings.mail_username),
    )


class SmtpEmailSender:
    """Implements EmailSender protocol with an HTML message per send."""

    def __init__(self, mail: FastMail) -> None:
        self._mail = mail

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpEmailSender":
        return cls(FastMail(build_connection_config(settings)))

    async def send(self, to_email: str, subject: str, html_body: str) -> None:
        message = MessageSchema(
            subject=subject,
            recipients=[to_email],
            body=html_body,
            subtype=MessageType.html,
        )

        logger.info("Sending email to %s", to_email)
        try:
            await self._mail.send_message(message)
        except Exception as e:
            logger.error("Email to %s failed: %s", to_email, e)
            raise NotificationError(f"Failed to send email to {to_email}") from e
        logger.info("Email sent to %s", to_email)
