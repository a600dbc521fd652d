"""Background email jobs."""

import logging
from typing import Any

from authgate.services.email import email_service
from authgate.tasks.queue import EMAIL_TIMEOUT_SECONDS, queue

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """The email backend did not accept a message."""


async def send_verification_email(ctx: dict[str, Any], *, email: str, token: str) -> None:
    """Deliver a verification link.

    Raising marks the SAQ job as failed, which the worker logs.
    """
    sent = await email_service.send_verification_email(to=email, token=token)
    if not sent:
        logger.error(f"Verification email to {email} was not delivered")
        raise EmailDeliveryError(f"Failed to send verification email to {email}")
    logger.info(f"Verification email sent to {email}")


async def dispatch_verification_email(email: str, token: str) -> None:
    """Submit a verification email job without waiting for delivery.

    Submission failures are logged and swallowed; the caller's flow has
    already succeeded and must not fail because of email delivery.
    """
    try:
        await queue.enqueue(
            "send_verification_email",
            email=email,
            token=token,
            timeout=EMAIL_TIMEOUT_SECONDS,
        )
    except Exception as e:
        logger.error(f"Failed to queue verification email for {email}: {e!r}")
