"""Background job worker using SAQ."""

import asyncio

from saq import Worker

from authgate.logging import setup_logging
from authgate.tasks.queue import get_queue_settings


def main() -> None:
    """Run the SAQ worker."""
    setup_logging()
    settings = get_queue_settings()
    worker = Worker(
        queue=settings["queue"],
        functions=settings["functions"],
        concurrency=settings.get("concurrency", 10),
        startup=settings.get("startup"),
        shutdown=settings.get("shutdown"),
    )
    asyncio.run(worker.start())


if __name__ == "__main__":
    main()
