"""Password hashing with bcrypt."""

import logging
from functools import lru_cache

import bcrypt

from authgate.config import settings

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Hash and verify passwords at a fixed bcrypt cost."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")

    def verify(self, password: str, digest: str) -> bool:
        """Check a password against a stored digest.

        Returns False rather than raising for a mismatch or an unreadable digest.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), digest.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as e:
            logger.warning(f"Unable to check password against stored digest: {e!r}")
            return False


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Get the process-wide hasher configured from settings."""
    return PasswordHasher(rounds=settings.bcrypt_rounds)
