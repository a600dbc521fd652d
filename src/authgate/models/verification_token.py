"""Verification token model for email verification links."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from authgate.models.base import generate_nanoid, utcnow


class VerificationToken(SQLModel, table=True):
    """Single-use token proving control of an email address."""

    __tablename__ = "verification_tokens"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    token: str = Field(unique=True, index=True, max_length=255, description="Random verification token")
    email: str = Field(index=True, max_length=255, description="Email address being verified")
    expires_at: datetime = Field(
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        description="Token expiration time",
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
    )
