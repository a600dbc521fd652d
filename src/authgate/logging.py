"""Logging configuration based on environment.

The API (through uvicorn) and the worker share one dictConfig, so every
record passes through RequestContextFilter and carries a request_id.
"""

import logging.config

from authgate.config import settings

# Development format: cleaner
DEV_FORMAT = "%(levelname)s:     %(name)s - %(message)s"

# Production format: timestamped and tagged with the request correlation ID
PROD_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s - %(message)s"

# Chatty at INFO; their failures still surface as warnings
QUIET_LOGGERS = ("httpx", "httpcore", "aiosmtplib")


def get_log_config() -> dict:
    """Build the dictConfig for the current environment."""
    is_dev = settings.is_development
    access_format = (
        '%(levelprefix)s "%(request_line)s" %(status_code)s'
        if is_dev
        else '%(asctime)s %(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s'
    )

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": "authgate.api.middleware.RequestContextFilter"},
        },
        "formatters": {
            "app": {"format": DEV_FORMAT if is_dev else PROD_FORMAT},
            "access": {"()": "uvicorn.logging.AccessFormatter", "fmt": access_format},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "app",
                "filters": ["request_id"],
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
            "uvicorn.error": {"level": "INFO"},
            **{name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        },
        "root": {"handlers": ["default"], "level": settings.log_level},
    }


def setup_logging() -> None:
    """Configure logging for processes not started by uvicorn (the worker)."""
    logging.config.dictConfig(get_log_config())
