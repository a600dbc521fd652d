"""Session token minting and verification."""

import logging
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from jose import JWTError, jwt

from authgate.config import Settings, settings

logger = logging.getLogger(__name__)

USER_ID_CLAIM = "userId"


class TokenMinter:
    """Issue and verify signed, expiring session tokens.

    The only application claim carried is the user ID.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_in: timedelta = timedelta(hours=1)):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenMinter":
        return cls(
            secret=config.session_secret,
            algorithm=config.jwt_algorithm,
            expires_in=timedelta(minutes=config.jwt_expiration_minutes),
        )

    def issue(self, user_id: str) -> str:
        """Create a session token for a user."""
        now = datetime.now(UTC)
        payload = {
            USER_ID_CLAIM: user_id,
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str | None:
        """Return the user ID carried by a valid token, or None."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug(f"Session token rejected: {e}")
            return None

        user_id = payload.get(USER_ID_CLAIM)
        if not isinstance(user_id, str) or not user_id:
            logger.debug("Session token rejected: missing user ID")
            return None
        return user_id


@lru_cache
def get_token_minter() -> TokenMinter:
    """Get the process-wide minter, keyed once from settings."""
    return TokenMinter.from_settings(settings)
