"""GitHub OAuth code exchange and profile lookup."""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import httpx

from authgate.config import Settings, settings
from authgate.constants import (
    GITHUB_EMAILS_URL,
    GITHUB_OAUTH_URL,
    GITHUB_TOKEN_URL,
    GITHUB_USER_URL,
)
from authgate.errors import OAuthExchangeError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class GitHubProfile:
    """The subset of a GitHub user profile we keep."""

    provider_id: str
    login: str
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.login


@dataclass
class GitHubEmail:
    """One entry from GitHub's /user/emails listing."""

    email: str
    primary: bool = False
    verified: bool = False


@dataclass
class GitHubIdentity:
    """Result of a completed OAuth handshake."""

    profile: GitHubProfile
    access_token: str
    primary_email: str | None
    emails: list[GitHubEmail] = field(default_factory=list)


def select_primary_email(emails: Sequence[GitHubEmail], fallback: str | None) -> str | None:
    """Pick the address to bind the identity to.

    Preference: primary and verified, then the first verified, then the
    profile's own email field (which may be None).
    """
    for entry in emails:
        if entry.primary and entry.verified:
            return entry.email
    for entry in emails:
        if entry.verified:
            return entry.email
    return fallback


class GitHubOAuthClient:
    """Performs the three GitHub calls behind an OAuth login."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str | None = None,
        scope: str = "read:user user:email",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = scope
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(cls, config: Settings) -> "GitHubOAuthClient":
        return cls(
            client_id=config.github_client_id,
            client_secret=config.github_client_secret,
            redirect_uri=config.github_redirect_uri or None,
            scope=config.github_scope,
            timeout=config.github_timeout,
        )

    @asynccontextmanager
    async def _client(self) -> AsyncGenerator[httpx.AsyncClient, None]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    def _api_headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }

    def authorize_url(self, state: str) -> str:
        """Build the GitHub authorize URL the browser is sent to."""
        params = {
            "client_id": self.client_id,
            "scope": self.scope,
            "state": state,
        }
        if self.redirect_uri:
            params["redirect_uri"] = self.redirect_uri
        return f"{GITHUB_OAUTH_URL}?{httpx.QueryParams(params)}"

    async def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token.

        Raises:
            OAuthExchangeError: GitHub returned an error or no access token
            UpstreamError: GitHub could not be reached or returned garbage
        """
        async with self._client() as client:
            try:
                response = await client.post(
                    GITHUB_TOKEN_URL,
                    json={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                    },
                    headers={"Accept": "application/json"},
                )
                data: dict[str, Any] = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"GitHub token exchange failed: {e!r}")
                raise UpstreamError("Failed to exchange code for token") from e

        access_token = data.get("access_token")
        if data.get("error") or not access_token:
            logger.info(f"GitHub rejected authorization code: {data.get('error')}")
            raise OAuthExchangeError(data.get("error_description"))
        return access_token

    async def fetch_profile(self, access_token: str) -> GitHubProfile:
        """Fetch the authenticated user's profile.

        Raises:
            UpstreamError: the request failed or returned a non-success status
        """
        async with self._client() as client:
            try:
                response = await client.get(GITHUB_USER_URL, headers=self._api_headers(access_token))
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Failed to fetch GitHub user profile: {e!r}")
                raise UpstreamError("Failed to fetch GitHub user profile") from e

        return GitHubProfile(
            provider_id=str(data["id"]),
            login=data.get("login") or "",
            name=data.get("name"),
            email=data.get("email"),
            avatar_url=data.get("avatar_url"),
        )

    async def fetch_emails(self, access_token: str) -> list[GitHubEmail]:
        """Fetch the user's email addresses.

        Best effort: the listing needs the user:email scope and may be refused,
        in which case an empty list is returned.
        """
        async with self._client() as client:
            try:
                response = await client.get(GITHUB_EMAILS_URL, headers=self._api_headers(access_token))
                response.raise_for_status()
                entries = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Could not fetch GitHub emails, using profile email: {e!r}")
                return []

        return [
            GitHubEmail(
                email=entry["email"],
                primary=bool(entry.get("primary")),
                verified=bool(entry.get("verified")),
            )
            for entry in entries
            if isinstance(entry, dict) and entry.get("email")
        ]

    async def authenticate(self, code: str) -> GitHubIdentity:
        """Run the full handshake: code to token, token to profile and emails."""
        access_token = await self.exchange_code(code)
        profile = await self.fetch_profile(access_token)
        emails = await self.fetch_emails(access_token)
        return GitHubIdentity(
            profile=profile,
            access_token=access_token,
            primary_email=select_primary_email(emails, profile.email),
            emails=emails,
        )


@lru_cache
def get_github_client() -> GitHubOAuthClient:
    """Get the process-wide GitHub client configured from settings."""
    if not settings.github_configured:
        logger.warning("GitHub OAuth is not configured; code exchanges will be rejected")
    return GitHubOAuthClient.from_settings(settings)
