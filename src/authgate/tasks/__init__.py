"""Background task processing."""

from authgate.tasks.email import dispatch_verification_email, send_verification_email
from authgate.tasks.queue import get_queue_settings, queue

__all__ = [
    "dispatch_verification_email",
    "get_queue_settings",
    "queue",
    "send_verification_email",
]
