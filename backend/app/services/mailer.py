# app/services/mailer.py
"""
Outbound mail.

The account lifecycle treats mail as a side effect: most callers swallow a
send failure, only forgot-password and resend-verification report it.
"""
import logging
import smtplib
from email.message import EmailMessage

from fastapi.concurrency import run_in_threadpool

from app.config import Settings

logger = logging.getLogger("uvicorn.error")


class Mailer:
    """Interface: deliver one HTML message or raise."""

    async def send(self, to: str, subject: str, html: str) -> None:
        raise NotImplementedError


class SmtpMailer(Mailer):
    def __init__(self, host: str, port: int, username: str | None, password: str | None, sender: str):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender

    def _build(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP_SSL(self.host, self.port) as smtp:
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(msg)

    async def send(self, to: str, subject: str, html: str) -> None:
        msg = self._build(to, subject, html)
        # smtplib blocks; keep it off the event loop
        await run_in_threadpool(self._deliver, msg)
        logger.info("[mail] sent subject=%r to=%s", subject, to)


class LoggingMailer(Mailer):
    """Used when no SMTP host is configured (local development)."""

    async def send(self, to: str, subject: str, html: str) -> None:
        logger.warning("[mail] SMTP not configured, not sending subject=%r to=%s", subject, to)


def build_mailer(settings: Settings) -> Mailer:
    if not settings.smtp_host:
        return LoggingMailer()
    return SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.mail_from,
    )
