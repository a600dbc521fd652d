"""Base model with common fields and mixins."""

from datetime import UTC, datetime

from nanoid import generate as nanoid_generate
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def generate_nanoid() -> str:
    """Generate a nanoid string ID (21 chars, URL-safe)."""
    return nanoid_generate()


def utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampMixin(SQLModel):
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        description="Timestamp when the record was created",
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        sa_column_kwargs={"onupdate": utcnow},
        description="Timestamp when the record was last updated",
    )
