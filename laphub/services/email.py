from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from laphub.config import Settings
from laphub.schemas.errors import EmailSendError

LOGGER = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10


def build_otp_body(code: str, ttl_seconds: int) -> str:
    return f"Your code is {code}. It expires in {ttl_seconds} seconds."


class SmtpMailer:
    def __init__(self, settings: Settings) -> None:
        self._host = settings.smtp_host
        self._port = settings.smtp_port
        self._username = settings.smtp_username
        self._password = settings.smtp_password
        self._sender = settings.otp_email_sender

    @property
    def is_configured(self) -> bool:
        return bool(self._host and self._sender)

    def send(self, recipient: str, subject: str, body: str) -> None:
        if not self.is_configured:
            raise EmailSendError("SMTP is not configured")

        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self._host, self._port, timeout=SMTP_TIMEOUT_SECONDS) as smtp:
                smtp.starttls()
                if self._username:
                    smtp.login(self._username, self._password)
                smtp.send_message(message)
        except smtplib.SMTPException as exc:
            LOGGER.error("SMTP error sending to=%s: %s", recipient, exc)
            raise EmailSendError("Failed to send email") from exc
        except OSError as exc:
            raise EmailSendError("Failed to reach SMTP server") from exc
