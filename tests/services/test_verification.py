"""Verification token store tests."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from authgate.errors import ErrorKind, VerificationTokenExpired, VerificationTokenNotFound
from authgate.models import VerificationToken
from authgate.services.verification import VerificationTokenStore, generate_verification_token


async def tokens_for(session: AsyncSession, email: str) -> list[VerificationToken]:
    result = await session.execute(select(VerificationToken).where(VerificationToken.email == email))
    return list(result.scalars().all())


def test_generated_tokens_are_long_and_unique():
    tokens = {generate_verification_token() for _ in range(100)}

    assert len(tokens) == 100
    # 36-char UUID followed by a 32-char hex UUID
    assert all(len(token) == 68 for token in tokens)


class TestIssue:
    """Tests for issuing tokens."""

    @pytest.mark.asyncio
    async def test_issue_sets_24_hour_expiry(self, session: AsyncSession):
        store = VerificationTokenStore(session)
        before = datetime.now(UTC)

        verification = await store.issue("a@b.com")

        assert verification.email == "a@b.com"
        assert before + timedelta(hours=24) <= verification.expires_at
        assert verification.expires_at <= datetime.now(UTC) + timedelta(hours=24)

    @pytest.mark.asyncio
    async def test_issue_supersedes_previous_tokens(self, session: AsyncSession):
        store = VerificationTokenStore(session)

        first = await store.issue("a@b.com")
        second = await store.issue("a@b.com")
        await session.commit()

        live = await tokens_for(session, "a@b.com")
        assert [t.token for t in live] == [second.token]
        assert first.token != second.token

    @pytest.mark.asyncio
    async def test_issue_leaves_other_emails_alone(self, session: AsyncSession):
        store = VerificationTokenStore(session)

        await store.issue("a@b.com")
        await store.issue("c@d.com")
        await session.commit()

        assert len(await tokens_for(session, "a@b.com")) == 1
        assert len(await tokens_for(session, "c@d.com")) == 1


class TestConsume:
    """Tests for consuming tokens."""

    @pytest.mark.asyncio
    async def test_consume_returns_email_and_deletes(self, session: AsyncSession):
        store = VerificationTokenStore(session)
        verification = await store.issue("a@b.com")
        await session.commit()

        email = await store.consume(verification.token)
        await session.commit()

        assert email == "a@b.com"
        assert await tokens_for(session, "a@b.com") == []

    @pytest.mark.asyncio
    async def test_consume_unknown_token(self, session: AsyncSession):
        store = VerificationTokenStore(session)

        with pytest.raises(VerificationTokenNotFound) as exc_info:
            await store.consume("does-not-exist")

        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_consume_expired_token_deletes_it(self, session: AsyncSession):
        """An expired token fails once as expired, then as missing."""
        session.add(
            VerificationToken(
                token="expired-token",
                email="a@b.com",
                expires_at=datetime.now(UTC) - timedelta(minutes=1),
            )
        )
        await session.commit()
        store = VerificationTokenStore(session)

        with pytest.raises(VerificationTokenExpired) as exc_info:
            await store.consume("expired-token")
        assert exc_info.value.kind == ErrorKind.BAD_REQUEST

        assert await tokens_for(session, "a@b.com") == []
        with pytest.raises(VerificationTokenNotFound):
            await store.consume("expired-token")

    @pytest.mark.asyncio
    async def test_custom_lifetime(self, session: AsyncSession):
        store = VerificationTokenStore(session, lifetime=timedelta(seconds=-1))
        verification = await store.issue("a@b.com")
        await session.commit()

        with pytest.raises(VerificationTokenExpired):
            await store.consume(verification.token)
