"""Outbound email delivery for verification links."""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from email.message import EmailMessage

import aiosmtplib
import httpx

from authgate.config import settings
from authgate.constants import VERIFY_EMAIL_PATH

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailBackend(ABC):
    """Abstract base class for email backends.

    Backends report delivery failure by returning False; they never raise.
    """

    @abstractmethod
    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        pass


class ConsoleEmailBackend(EmailBackend):
    """Writes emails to the log instead of sending them (development)."""

    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (console backend - not sent)\n"
            f"To: {to}\n"
            f"Subject: {subject}\n"
            f"{'=' * 60}\n"
            f"{text or html}\n"
            f"{'=' * 60}"
        )
        return True


class SMTPEmailBackend(EmailBackend):
    """Email backend using SMTP."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_address: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address

    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text or "Open this message in an HTML capable client.")
        message.add_alternative(html, subtype="html")

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email via SMTP to {to}: {e!r}")
            return False

        logger.info(f"Email sent via SMTP to {to}")
        return True


class ResendEmailBackend(EmailBackend):
    """Email backend using the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        from_address: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.from_address = from_address
        self.timeout = timeout
        self._http_client = http_client

    @asynccontextmanager
    async def _client(self) -> AsyncGenerator[httpx.AsyncClient, None]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        payload = {
            "from": self.from_address,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text

        async with self._client() as client:
            try:
                response = await client.post(
                    RESEND_API_URL,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(f"Resend rejected email to {to}: {e.response.status_code} {e.response.text}")
                return False
            except httpx.HTTPError as e:
                logger.error(f"Failed to reach Resend for {to}: {e!r}")
                return False

        logger.info(f"Email sent via Resend to {to}")
        return True


def get_email_backend() -> EmailBackend:
    """Build the backend named by settings.email_backend."""
    match settings.email_backend:
        case "console":
            return ConsoleEmailBackend()
        case "smtp":
            return SMTPEmailBackend(
                host=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_username,
                password=settings.smtp_password,
                use_tls=settings.smtp_use_tls,
                from_address=settings.email_from,
            )
        case "resend":
            return ResendEmailBackend(api_key=settings.resend_api_key, from_address=settings.email_from)
        case _:
            raise ValueError(f"Unknown email backend: {settings.email_backend}")


def build_verification_url(token: str) -> str:
    return f"{settings.app_url.rstrip('/')}{VERIFY_EMAIL_PATH}?token={token}"


class EmailService:
    """Composes application emails and hands them to a backend."""

    def __init__(self, backend: EmailBackend | None = None):
        self._backend = backend

    @property
    def backend(self) -> EmailBackend:
        """Lazy-load the backend."""
        if self._backend is None:
            self._backend = get_email_backend()
        return self._backend

    async def send_verification_email(self, to: str, token: str) -> bool:
        """Send the link that proves control of an email address.

        Returns:
            True if the backend accepted the message
        """
        verification_url = build_verification_url(token)
        hours = settings.verification_token_expiration_hours
        subject = "Verify your email address"

        html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; padding: 40px 20px; background-color: #f9fafb;">
    <div style="max-width: 480px; margin: 0 auto; background: white; border-radius: 8px; padding: 40px;">
        <h1 style="margin: 0 0 24px; font-size: 24px; color: #111827;">Verify your email</h1>
        <p style="margin: 0 0 24px; font-size: 16px; line-height: 1.5; color: #4b5563;">
            Thanks for signing up! Click the button below to verify your email address.
        </p>
        <a href="{verification_url}"
           style="display: inline-block; padding: 12px 24px; background-color: #111827; color: white; text-decoration: none; border-radius: 6px;">
            Verify Email
        </a>
        <p style="margin: 24px 0 0; font-size: 14px; color: #6b7280;">
            If you didn't create an account, you can safely ignore this email.
        </p>
        <p style="margin: 16px 0 0; font-size: 12px; color: #9ca3af;">
            This link will expire in {hours} hours.
        </p>
    </div>
</body>
</html>
"""

        text = f"""
Verify your email
=================

Open the link below to verify your email address.
This link will expire in {hours} hours.

{verification_url}

If you didn't create an account, you can safely ignore this email.
"""

        return await self.backend.send(to=to, subject=subject, html=html, text=text)


# Global email service instance
email_service = EmailService()
