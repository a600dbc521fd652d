"""Request and response schemas for the auth endpoints."""

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# At least one lower-case, one upper-case, one digit and one special character
PASSWORD_POLICY = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]).{8,}$"
)
PASSWORD_POLICY_MESSAGE = (
    "password must contain at least one upper-case letter, one lower-case letter, "
    "a number, and a special-character"
)


class CredentialsRequest(BaseModel):
    """Email and password, shared by signup and login."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=8, max_length=24)

    @field_validator("email", mode="before")
    @classmethod
    def check_email_length(cls, value: object) -> object:
        if isinstance(value, str) and not 5 <= len(value) <= 40:
            raise ValueError("email should have between 5 and 40 characters")
        return value

    @field_validator("password")
    @classmethod
    def check_password_policy(cls, value: str) -> str:
        if not PASSWORD_POLICY.match(value):
            raise ValueError(PASSWORD_POLICY_MESSAGE)
        return value


class SignupRequest(CredentialsRequest):
    """Request body for signup."""


class LoginRequest(CredentialsRequest):
    """Request body for password login."""


class SignupResponse(BaseModel):
    """Signup deliberately returns no session; the email must be verified first."""

    message: str
    email: EmailStr


class VerifyEmailRequest(BaseModel):
    """Request body for email verification."""

    token: str = Field(min_length=1)


class ResendVerificationRequest(BaseModel):
    """Request body for resending a verification email."""

    email: EmailStr


class GitHubAuthRequest(BaseModel):
    """Authorization code returned by GitHub's OAuth redirect."""

    code: str = Field(min_length=1)
    state: str | None = None


class GitHubAuthorizeResponse(BaseModel):
    """URL the client should redirect to, and the state it must check on return."""

    url: str
    state: str


class TokenResponse(BaseModel):
    """Response containing a session JWT."""

    token: str
