"""Signup, login, email verification and GitHub login flows.

``AuthService`` coordinates the identity repository, verification tokens,
password hashing, session tokens and the GitHub client. It keeps no state
between requests; each instance works within one database session.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from authgate.constants import PLACEHOLDER_EMAIL_TEMPLATE, RESEND_MESSAGE, SIGNUP_MESSAGE
from authgate.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
)
from authgate.models import AuthProvider, User
from authgate.services.auth import TokenMinter
from authgate.services.email import EmailService
from authgate.services.github import GitHubIdentity, GitHubOAuthClient
from authgate.services.identity import IdentityRepository, SQLIdentityRepository
from authgate.services.passwords import PasswordHasher
from authgate.services.verification import VerificationTokenStore

logger = logging.getLogger(__name__)

EmailDispatcher = Callable[[str, str], Awaitable[None]]


@dataclass
class SignupResult:
    message: str
    email: str


def placeholder_email(provider_account_id: str) -> str:
    return PLACEHOLDER_EMAIL_TEMPLATE.format(provider_account_id=provider_account_id)


class AuthService:
    """Authentication flows for one request."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        hasher: PasswordHasher,
        minter: TokenMinter,
        github: GitHubOAuthClient,
        mailer: EmailService,
        dispatch_email: EmailDispatcher,
        identities: IdentityRepository | None = None,
        tokens: VerificationTokenStore | None = None,
    ):
        self.session = session
        self.hasher = hasher
        self.minter = minter
        self.github = github
        self.mailer = mailer
        self.dispatch_email = dispatch_email
        self.identities = identities or SQLIdentityRepository(session)
        self.tokens = tokens or VerificationTokenStore(session)

    async def signup(self, email: str, password: str) -> SignupResult:
        """Register a password user; they must verify their email before logging in."""
        if await self.identities.find_user_by_email(email):
            raise ConflictError("user already exists, try signing-in")

        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        try:
            await self.identities.create_user(
                email=email,
                password_hash=password_hash,
                email_verified=False,
            )
        except ConflictError as e:
            # Lost a race with a concurrent signup for the same email
            raise ConflictError("user already exists, try signing-in") from e

        verification = await self.tokens.issue(email)
        await self.session.commit()
        logger.info(f"Created unverified user for {email}")

        # Fire-and-forget: delivery problems must not fail the signup
        await self.dispatch_email(email, verification.token)

        return SignupResult(message=SIGNUP_MESSAGE, email=email)

    async def verify_email(self, token: str) -> str:
        """Consume a verification token, mark the user verified and start a session."""
        email = await self.tokens.consume(token)

        user = await self.identities.find_user_by_email(email)
        if user is None:
            raise NotFoundError("User not found")

        await self.identities.update_user(user.id, email_verified=True)
        await self.session.commit()
        logger.info(f"Verified email for user {user.id}")

        return self.minter.issue(user.id)

    async def resend_verification(self, email: str) -> str:
        """Issue a fresh verification token and deliver it.

        Unknown emails receive the same response as a successful resend.
        Unlike signup, delivery is awaited and a failure is reported.
        """
        user = await self.identities.find_user_by_email(email)
        if user is None:
            return RESEND_MESSAGE

        if user.email_verified:
            raise BadRequestError("Email is already verified")

        verification = await self.tokens.issue(email)
        await self.session.commit()

        sent = await self.mailer.send_verification_email(to=email, token=verification.token)
        if not sent:
            raise UpstreamError("Failed to send verification email")

        return RESEND_MESSAGE

    async def login(self, email: str, password: str) -> str:
        """Check a password login and start a session."""
        user = await self.identities.find_user_by_email(email)
        # OAuth-only users have no password; report them the same as unknown users
        if user is None or not user.password_hash:
            raise NotFoundError("user not found")

        if not user.email_verified:
            raise ForbiddenError("Please verify your email before logging in")

        matched = await asyncio.to_thread(self.hasher.verify, password, user.password_hash)
        if not matched:
            raise UnauthorizedError("Invalid Credentials")

        return self.minter.issue(user.id)

    async def github_auth(self, code: str) -> str:
        """Log in with a GitHub authorization code, linking or creating the user."""
        identity = await self.github.authenticate(code)
        user = await self.reconcile_github_identity(identity)
        await self.session.commit()
        return self.minter.issue(user.id)

    async def reconcile_github_identity(self, identity: GitHubIdentity) -> User:
        """Map a GitHub identity onto exactly one user.

        An existing account link always wins over matching by email, so a
        linked identity never re-runs the email match.
        """
        profile = identity.profile
        primary_email = identity.primary_email

        account = await self.identities.find_account(AuthProvider.GITHUB, profile.provider_id)
        if account is not None:
            user = await self.identities.find_user_by_id(account.user_id)
            if user is None:
                raise NotFoundError("User not found")

            updates: dict[str, str | None] = {
                "name": profile.display_name,
                "avatar_url": profile.avatar_url,
            }
            if primary_email and not user.email:
                updates["email"] = primary_email
            user = await self.identities.update_user(user.id, **updates)
            await self.identities.update_account(account.id, access_token=identity.access_token)
            logger.info(f"GitHub login for linked user {user.id}")
            return user

        existing = await self.identities.find_user_by_email(primary_email) if primary_email else None
        if existing is not None:
            await self.identities.create_account(
                user_id=existing.id,
                provider=AuthProvider.GITHUB,
                provider_account_id=profile.provider_id,
                access_token=identity.access_token,
            )
            user = await self.identities.update_user(
                existing.id,
                name=existing.name or profile.display_name,
                avatar_url=existing.avatar_url or profile.avatar_url,
            )
            logger.info(f"Linked GitHub identity {profile.provider_id} to user {user.id}")
            return user

        user, _ = await self.identities.create_user_with_account(
            {
                "email": primary_email or placeholder_email(profile.provider_id),
                "name": profile.display_name,
                "avatar_url": profile.avatar_url,
                # A GitHub-verified address needs no verification email
                "email_verified": primary_email is not None,
            },
            {
                "provider": AuthProvider.GITHUB,
                "provider_account_id": profile.provider_id,
                "access_token": identity.access_token,
            },
        )
        logger.info(f"Created user {user.id} from GitHub identity {profile.provider_id}")
        return user

    async def current_user(self, user_id: str) -> User:
        user = await self.identities.find_user_by_id(user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        return user
