"""Single-use email verification tokens."""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from authgate.config import settings
from authgate.errors import VerificationTokenExpired, VerificationTokenNotFound
from authgate.models import VerificationToken

logger = logging.getLogger(__name__)


def generate_verification_token() -> str:
    """Two random UUIDs back to back, well over 122 bits of entropy."""
    return str(uuid.uuid4()) + uuid.uuid4().hex


def _as_aware(value: datetime) -> datetime:
    # Some backends (SQLite) hand back naive datetimes; stored values are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class VerificationTokenStore:
    """Issue and consume verification tokens.

    At most one live token exists per email: issuing a new one deletes the rest.
    """

    def __init__(self, session: AsyncSession, lifetime: timedelta | None = None):
        self.session = session
        self.lifetime = lifetime or timedelta(hours=settings.verification_token_expiration_hours)

    async def issue(self, email: str) -> VerificationToken:
        await self.session.execute(
            delete(VerificationToken).where(VerificationToken.email == email)  # type: ignore[arg-type]
        )

        verification = VerificationToken(
            token=generate_verification_token(),
            email=email,
            expires_at=datetime.now(UTC) + self.lifetime,
        )
        self.session.add(verification)
        await self.session.flush()
        return verification

    async def consume(self, token: str) -> str:
        """Delete a live token and return the email it was issued for.

        Raises:
            VerificationTokenNotFound: no token matches
            VerificationTokenExpired: the token has expired; it is deleted first
        """
        result = await self.session.execute(
            select(VerificationToken).where(VerificationToken.token == token)
        )
        verification = result.scalar_one_or_none()

        if verification is None:
            raise VerificationTokenNotFound()

        if _as_aware(verification.expires_at) < datetime.now(UTC):
            await self.session.delete(verification)
            await self.session.commit()
            logger.info(f"Deleted expired verification token for {verification.email}")
            raise VerificationTokenExpired()

        email = verification.email
        await self.session.delete(verification)
        await self.session.flush()
        return email
