"""Shared constants used across the application."""

# GitHub OAuth endpoints
GITHUB_OAUTH_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"
GITHUB_EMAILS_URL = "https://api.github.com/user/emails"

# Synthetic address for GitHub identities that disclose no usable email
PLACEHOLDER_EMAIL_TEMPLATE = "github_{provider_account_id}@placeholder.local"

# Path on the frontend that consumes verification links
VERIFY_EMAIL_PATH = "/auth/verify-email"

# User-facing messages
SIGNUP_MESSAGE = "Please check your email to verify your account"
RESEND_MESSAGE = "If an account exists, a verification email has been sent"
