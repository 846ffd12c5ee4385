"""Admin session gate."""

from bubblegraph.auth.session import (
    AuthError,
    InvalidCredentialsError,
    Session,
    SessionExpiredError,
    SessionNotFoundError,
    SessionProvider,
    credential_hash,
)

__all__ = [
    "AuthError",
    "InvalidCredentialsError",
    "Session",
    "SessionExpiredError",
    "SessionNotFoundError",
    "SessionProvider",
    "credential_hash",
]
