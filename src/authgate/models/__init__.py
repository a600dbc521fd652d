"""SQLModel database models."""

from authgate.models.account import Account, AuthProvider
from authgate.models.base import TimestampMixin, generate_nanoid
from authgate.models.user import User, UserRead
from authgate.models.verification_token import VerificationToken

__all__ = [
    "Account",
    "AuthProvider",
    "TimestampMixin",
    "User",
    "UserRead",
    "VerificationToken",
    "generate_nanoid",
]
