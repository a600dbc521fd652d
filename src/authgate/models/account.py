"""Provider-linked account model."""

from enum import Enum

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from authgate.models.base import TimestampMixin, generate_nanoid


class AuthProvider(str, Enum):
    """External identity providers an account can be linked to."""

    GITHUB = "github"


class Account(TimestampMixin, SQLModel, table=True):
    """Link between a user and one external provider identity."""

    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("provider", "provider_account_id", name="uq_accounts_provider_account"),
    )

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE", max_length=21)
    provider: AuthProvider
    provider_account_id: str = Field(max_length=255)
    access_token: str | None = Field(default=None)
