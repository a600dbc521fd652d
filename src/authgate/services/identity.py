"""Persistence for users and their linked provider accounts."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from authgate.errors import ConflictError, NotFoundError
from authgate.models import Account, AuthProvider, User

logger = logging.getLogger(__name__)


class IdentityRepository(ABC):
    """Abstract store for User and Account records."""

    @abstractmethod
    async def find_user_by_email(self, email: str) -> User | None:
        pass

    @abstractmethod
    async def find_user_by_id(self, user_id: str) -> User | None:
        pass

    @abstractmethod
    async def create_user(self, **attrs: Any) -> User:
        pass

    @abstractmethod
    async def update_user(self, user_id: str, **attrs: Any) -> User:
        pass

    @abstractmethod
    async def find_account(self, provider: AuthProvider, provider_account_id: str) -> Account | None:
        pass

    @abstractmethod
    async def create_account(self, **attrs: Any) -> Account:
        pass

    @abstractmethod
    async def update_account(self, account_id: str, **attrs: Any) -> Account:
        pass

    @abstractmethod
    async def create_user_with_account(
        self, user_attrs: dict[str, Any], account_attrs: dict[str, Any]
    ) -> tuple[User, Account]:
        """Create a user and its first account together, or neither."""


class SQLIdentityRepository(IdentityRepository):
    """IdentityRepository backed by an async SQLAlchemy session.

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _flush(self, what: str) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            logger.info(f"Uniqueness violation writing {what}: {e.orig!r}")
            raise ConflictError(f"{what} already exists") from e

    async def find_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_user_by_id(self, user_id: str) -> User | None:
        return await self.session.get(User, user_id)

    async def create_user(self, **attrs: Any) -> User:
        user = User(**attrs)
        self.session.add(user)
        await self._flush("user")
        return user

    async def update_user(self, user_id: str, **attrs: Any) -> User:
        user = await self.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        for key, value in attrs.items():
            setattr(user, key, value)
        self.session.add(user)
        await self._flush("user")
        return user

    async def find_account(self, provider: AuthProvider, provider_account_id: str) -> Account | None:
        result = await self.session.execute(
            select(Account).where(
                Account.provider == provider,
                Account.provider_account_id == provider_account_id,
            )
        )
        return result.scalar_one_or_none()

    async def create_account(self, **attrs: Any) -> Account:
        account = Account(**attrs)
        self.session.add(account)
        await self._flush("account")
        return account

    async def update_account(self, account_id: str, **attrs: Any) -> Account:
        account = await self.session.get(Account, account_id)
        if account is None:
            raise NotFoundError("Account not found")
        for key, value in attrs.items():
            setattr(account, key, value)
        self.session.add(account)
        await self._flush("account")
        return account

    async def create_user_with_account(
        self, user_attrs: dict[str, Any], account_attrs: dict[str, Any]
    ) -> tuple[User, Account]:
        # Both rows share the caller's transaction; a failure on either rolls back both
        user = await self.create_user(**user_attrs)
        account = await self.create_account(user_id=user.id, **account_attrs)
        return user, account
