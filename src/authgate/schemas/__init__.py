"""Pydantic schemas for API requests/responses."""

from authgate.schemas.auth import (
    GitHubAuthorizeResponse,
    GitHubAuthRequest,
    LoginRequest,
    ResendVerificationRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    VerifyEmailRequest,
)
from authgate.schemas.common import ErrorResponse, MessageResponse

__all__ = [
    "ErrorResponse",
    "GitHubAuthRequest",
    "GitHubAuthorizeResponse",
    "LoginRequest",
    "MessageResponse",
    "ResendVerificationRequest",
    "SignupRequest",
    "SignupResponse",
    "TokenResponse",
    "VerifyEmailRequest",
]
