"""Pytest configuration and fixtures."""

import json
import os
from collections.abc import AsyncGenerator, Callable
from typing import Any
from unittest.mock import AsyncMock, patch

# Configure the app before importing it
os.environ["ENVIRONMENT"] = "test"
os.environ["SESSION_SECRET"] = "test-session-secret-0123456789abcdef"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["APP_URL"] = "http://localhost:3000"
os.environ["GITHUB_CLIENT_ID"] = "test-client-id"
os.environ["GITHUB_CLIENT_SECRET"] = "test-client-secret"

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from authgate.config import settings
from authgate.constants import GITHUB_EMAILS_URL, GITHUB_TOKEN_URL, GITHUB_USER_URL
from authgate.database import get_session
from authgate.main import app
from authgate.models import User
from authgate.services.accounts import AuthService
from authgate.services.auth import TokenMinter, get_token_minter
from authgate.services.email import ConsoleEmailBackend, EmailService
from authgate.services.github import GitHubOAuthClient, get_github_client
from authgate.services.passwords import PasswordHasher, get_password_hasher

TEST_PASSWORD = "Test123!@#"


@pytest.fixture(autouse=True)
def mock_queue():
    """Mock the SAQ queue to avoid Redis connections in tests."""
    with patch("authgate.tasks.queue.queue.enqueue", new_callable=AsyncMock) as mock_enqueue:
        yield mock_enqueue


@pytest.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        settings.database_url_test,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session bound to the test engine."""
    factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with factory() as session:
        yield session


@pytest.fixture
def hasher() -> PasswordHasher:
    return get_password_hasher()


@pytest.fixture
def minter() -> TokenMinter:
    return get_token_minter()


class FakeGitHub:
    """In-memory stand-in for GitHub's OAuth and REST endpoints."""

    def __init__(self):
        self.profile: dict[str, Any] = {
            "id": 12345,
            "login": "octocat",
            "name": "The Octocat",
            "email": None,
            "avatar_url": "https://avatars.githubusercontent.com/u/12345",
        }
        self.emails: list[dict[str, Any]] = [
            {"email": "a@b.com", "primary": True, "verified": True, "visibility": "private"},
        ]
        self.token_error: dict[str, str] | None = None
        self.profile_status = 200
        self.emails_status = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if url == GITHUB_TOKEN_URL:
            if self.token_error is not None:
                return httpx.Response(200, json=self.token_error)
            code = json.loads(request.content)["code"]
            return httpx.Response(
                200,
                json={"access_token": f"gho_{code}", "token_type": "bearer", "scope": "user:email"},
            )
        if url == GITHUB_USER_URL:
            if self.profile_status != 200:
                return httpx.Response(self.profile_status, json={"message": "Bad credentials"})
            return httpx.Response(200, json=self.profile)
        if url == GITHUB_EMAILS_URL:
            if self.emails_status != 200:
                return httpx.Response(self.emails_status, json={"message": "Not Found"})
            return httpx.Response(200, json=self.emails)
        return httpx.Response(404)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
async def github_client(fake_github: FakeGitHub) -> AsyncGenerator[GitHubOAuthClient, None]:
    """GitHub client whose HTTP calls are answered by FakeGitHub."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler)) as http_client:
        yield GitHubOAuthClient(
            client_id="test-client-id",
            client_secret="test-client-secret",
            http_client=http_client,
        )


@pytest.fixture
def mailer() -> EmailService:
    return EmailService(backend=ConsoleEmailBackend())


@pytest.fixture
def dispatch_email() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def auth_service(
    session: AsyncSession,
    hasher: PasswordHasher,
    minter: TokenMinter,
    github_client: GitHubOAuthClient,
    mailer: EmailService,
    dispatch_email: AsyncMock,
) -> AuthService:
    return AuthService(
        session,
        hasher=hasher,
        minter=minter,
        github=github_client,
        mailer=mailer,
        dispatch_email=dispatch_email,
    )


@pytest.fixture
def make_user(session: AsyncSession, hasher: PasswordHasher) -> Callable[..., Any]:
    """Factory for users created directly in the database."""

    async def _make_user(
        email: str | None = "a@b.com",
        password: str | None = TEST_PASSWORD,
        email_verified: bool = True,
        **attrs: Any,
    ) -> User:
        user = User(
            email=email,
            password_hash=hasher.hash(password) if password else None,
            email_verified=email_verified,
            **attrs,
        )
        session.add(user)
        await session.commit()
        return user

    return _make_user


@pytest.fixture
async def client(
    session: AsyncSession, github_client: GitHubOAuthClient
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_github_client] = lambda: github_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(minter: TokenMinter) -> Callable[[User], dict[str, str]]:
    """Build authorization headers carrying a session for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {minter.issue(user.id)}"}

    return _headers
