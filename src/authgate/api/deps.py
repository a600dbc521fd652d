"""FastAPI dependencies for dependency injection."""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.database import get_session
from authgate.services.accounts import AuthService
from authgate.services.auth import TokenMinter, get_token_minter
from authgate.services.email import email_service
from authgate.services.github import GitHubOAuthClient, get_github_client
from authgate.services.passwords import PasswordHasher, get_password_hasher
from authgate.tasks.email import dispatch_verification_email

logger = logging.getLogger(__name__)

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]
TokenMinterDep = Annotated[TokenMinter, Depends(get_token_minter)]
PasswordHasherDep = Annotated[PasswordHasher, Depends(get_password_hasher)]
GitHubClientDep = Annotated[GitHubOAuthClient, Depends(get_github_client)]

# Security scheme; missing credentials are handled by the context, not here
security = HTTPBearer(auto_error=False)


@dataclass
class SessionUser:
    """Claims carried by a valid session token."""

    user_id: str


@dataclass
class AuthContext:
    """Per-request authentication context; user is None when unauthenticated."""

    user: SessionUser | None = None


def get_auth_context(
    minter: TokenMinterDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthContext:
    """Map a bearer token to a session user.

    Invalid or missing tokens never fail here; routes that need a user
    depend on require_user instead.
    """
    if not credentials:
        return AuthContext()

    user_id = minter.verify(credentials.credentials)
    if user_id is None:
        logger.debug("Ignoring invalid bearer token")
        return AuthContext()
    return AuthContext(user=SessionUser(user_id=user_id))


AuthContextDep = Annotated[AuthContext, Depends(get_auth_context)]


def require_user(context: AuthContextDep) -> SessionUser:
    """Get the session user or raise 401."""
    if context.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context.user


CurrentUser = Annotated[SessionUser, Depends(require_user)]


def get_auth_service(
    session: SessionDep,
    hasher: PasswordHasherDep,
    minter: TokenMinterDep,
    github: GitHubClientDep,
) -> AuthService:
    """Build the auth flows for this request."""
    return AuthService(
        session,
        hasher=hasher,
        minter=minter,
        github=github,
        mailer=email_service,
        dispatch_email=dispatch_verification_email,
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
