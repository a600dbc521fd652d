"""User model."""

from sqlmodel import Field, SQLModel

from authgate.models.base import TimestampMixin, generate_nanoid


class User(TimestampMixin, SQLModel, table=True):
    """A human identity, keyed by email address."""

    __tablename__ = "users"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    # Only absent transiently; GitHub-only identities get a placeholder address
    email: str | None = Field(default=None, unique=True, index=True, max_length=255)
    password_hash: str | None = Field(default=None, max_length=255)
    email_verified: bool = Field(default=False)
    name: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=2048)


class UserRead(SQLModel):
    """Schema for reading a user."""

    id: str
    email: str | None
    email_verified: bool
    name: str | None
    avatar_url: str | None
