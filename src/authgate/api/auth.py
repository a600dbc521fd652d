"""Authentication endpoints."""

from secrets import token_urlsafe

from fastapi import APIRouter

from authgate.api.deps import AuthServiceDep, CurrentUser, GitHubClientDep
from authgate.models import UserRead
from authgate.schemas import (
    GitHubAuthorizeResponse,
    GitHubAuthRequest,
    LoginRequest,
    MessageResponse,
    ResendVerificationRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    VerifyEmailRequest,
)

router = APIRouter()


@router.post("/signup", response_model=SignupResponse)
async def signup(request: SignupRequest, auth: AuthServiceDep):
    """
    Register with email and password.

    No session is issued; a verification link is emailed instead.
    """
    result = await auth.signup(request.email, request.password)
    return SignupResponse(message=result.message, email=result.email)


@router.post("/verify-email", response_model=TokenResponse)
async def verify_email(request: VerifyEmailRequest, auth: AuthServiceDep):
    """Consume a verification link token and return a session token."""
    token = await auth.verify_email(request.token)
    return TokenResponse(token=token)


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(request: ResendVerificationRequest, auth: AuthServiceDep):
    """
    Send a new verification link.

    Responds identically whether or not the email is registered.
    """
    message = await auth.resend_verification(request.email)
    return MessageResponse(message=message)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, auth: AuthServiceDep):
    """Log in with email and password."""
    token = await auth.login(request.email, request.password)
    return TokenResponse(token=token)


@router.get("/github/authorize", response_model=GitHubAuthorizeResponse)
async def github_authorize(github: GitHubClientDep, state: str | None = None):
    """Build the GitHub authorize URL.

    The client keeps the returned state and compares it with the one GitHub
    sends back to its callback.
    """
    state = state or token_urlsafe(24)
    return GitHubAuthorizeResponse(url=github.authorize_url(state), state=state)


@router.post("/github", response_model=TokenResponse)
async def github_auth(request: GitHubAuthRequest, auth: AuthServiceDep):
    """Exchange a GitHub authorization code for a session token."""
    token = await auth.github_auth(request.code)
    return TokenResponse(token=token)


@router.get("/me", response_model=UserRead)
async def get_current_user_info(user: CurrentUser, auth: AuthServiceDep):
    """Get the authenticated user's profile."""
    return UserRead.model_validate(await auth.current_user(user.user_id))
