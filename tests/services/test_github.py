"""GitHub OAuth client tests."""

import httpx
import pytest

from authgate.constants import GITHUB_OAUTH_URL
from authgate.errors import ErrorKind, OAuthExchangeError, UpstreamError
from authgate.services.github import GitHubEmail, GitHubOAuthClient, select_primary_email
from tests.conftest import FakeGitHub


class TestSelectPrimaryEmail:
    """Tests for choosing the email a GitHub identity binds to."""

    def test_primary_and_verified_wins(self):
        emails = [
            GitHubEmail("x@x.com", primary=False, verified=True),
            GitHubEmail("y@y.com", primary=True, verified=True),
        ]

        assert select_primary_email(emails, "profile@x.com") == "y@y.com"

    def test_falls_back_to_first_verified(self):
        emails = [
            GitHubEmail("x@x.com", primary=False, verified=True),
            GitHubEmail("y@y.com", primary=True, verified=False),
        ]

        assert select_primary_email(emails, None) == "x@x.com"

    def test_falls_back_to_profile_email(self):
        emails = [GitHubEmail("y@y.com", primary=True, verified=False)]

        assert select_primary_email(emails, "profile@x.com") == "profile@x.com"

    def test_nothing_available(self):
        assert select_primary_email([], None) is None


class TestAuthorizeUrl:
    def test_includes_client_and_state(self):
        client = GitHubOAuthClient(
            client_id="abc",
            client_secret="secret",
            redirect_uri="http://localhost:3000/auth/github/callback",
        )

        url = httpx.URL(client.authorize_url("state-1"))

        assert str(url).startswith(GITHUB_OAUTH_URL)
        assert url.params["client_id"] == "abc"
        assert url.params["state"] == "state-1"
        assert url.params["scope"] == "read:user user:email"
        assert url.params["redirect_uri"] == "http://localhost:3000/auth/github/callback"
        assert "client_secret" not in url.params

    def test_omits_missing_redirect_uri(self):
        client = GitHubOAuthClient(client_id="abc", client_secret="secret")

        url = httpx.URL(client.authorize_url("state-1"))

        assert "redirect_uri" not in url.params


class TestAuthenticate:
    """Tests for the code-to-identity handshake."""

    @pytest.mark.asyncio
    async def test_full_handshake(self, github_client: GitHubOAuthClient, fake_github: FakeGitHub):
        identity = await github_client.authenticate("code-1")

        assert identity.access_token == "gho_code-1"
        assert identity.profile.provider_id == "12345"
        assert identity.profile.login == "octocat"
        assert identity.profile.display_name == "The Octocat"
        assert identity.primary_email == "a@b.com"

        token_request, profile_request, emails_request = fake_github.requests
        assert token_request.headers["Accept"] == "application/json"
        assert profile_request.headers["Authorization"] == "Bearer gho_code-1"
        assert emails_request.headers["Authorization"] == "Bearer gho_code-1"

    @pytest.mark.asyncio
    async def test_display_name_falls_back_to_login(
        self, github_client: GitHubOAuthClient, fake_github: FakeGitHub
    ):
        fake_github.profile["name"] = None

        identity = await github_client.authenticate("code-1")

        assert identity.profile.display_name == "octocat"

    @pytest.mark.asyncio
    async def test_rejected_code(self, github_client: GitHubOAuthClient, fake_github: FakeGitHub):
        fake_github.token_error = {
            "error": "bad_verification_code",
            "error_description": "The code passed is incorrect or expired.",
        }

        with pytest.raises(OAuthExchangeError) as exc_info:
            await github_client.authenticate("stale")

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert exc_info.value.message == "The code passed is incorrect or expired."
        assert len(fake_github.requests) == 1

    @pytest.mark.asyncio
    async def test_missing_access_token(self, github_client: GitHubOAuthClient, fake_github: FakeGitHub):
        fake_github.token_error = {"token_type": "bearer"}

        with pytest.raises(OAuthExchangeError) as exc_info:
            await github_client.exchange_code("code-1")

        assert exc_info.value.message == "Failed to exchange code for token"

    @pytest.mark.asyncio
    async def test_token_endpoint_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = GitHubOAuthClient(client_id="abc", client_secret="secret", http_client=http_client)

            with pytest.raises(UpstreamError) as exc_info:
                await client.exchange_code("code-1")

        assert exc_info.value.kind == ErrorKind.INTERNAL_SERVER_ERROR

    @pytest.mark.asyncio
    async def test_profile_failure(self, github_client: GitHubOAuthClient, fake_github: FakeGitHub):
        fake_github.profile_status = 401

        with pytest.raises(UpstreamError) as exc_info:
            await github_client.authenticate("code-1")

        assert exc_info.value.message == "Failed to fetch GitHub user profile"

    @pytest.mark.asyncio
    async def test_emails_failure_uses_profile_email(
        self, github_client: GitHubOAuthClient, fake_github: FakeGitHub
    ):
        fake_github.emails_status = 404
        fake_github.profile["email"] = "public@b.com"

        identity = await github_client.authenticate("code-1")

        assert identity.emails == []
        assert identity.primary_email == "public@b.com"

    @pytest.mark.asyncio
    async def test_no_email_anywhere(self, github_client: GitHubOAuthClient, fake_github: FakeGitHub):
        fake_github.emails = []

        identity = await github_client.authenticate("code-1")

        assert identity.primary_email is None
