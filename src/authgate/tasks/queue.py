"""SAQ queue configuration for background jobs."""

from saq import Queue

from authgate.config import settings

# Main job queue
queue = Queue.from_url(settings.redis_url)

# Sending one email should never take long
EMAIL_TIMEOUT_SECONDS = 60


def get_queue_settings() -> dict:
    """Get SAQ queue settings for the worker."""
    # Import here to avoid circular imports
    from authgate.tasks.email import send_verification_email

    return {
        "queue": queue,
        "functions": [send_verification_email],
        "concurrency": 4,
        "startup": startup,
        "shutdown": shutdown,
    }


async def startup(_ctx: dict) -> None:
    """Called when worker starts."""
    pass


async def shutdown(_ctx: dict) -> None:
    """Called when worker shuts down."""
    pass
