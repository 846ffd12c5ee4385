"""Single-admin session gate.

Login compares sha256("username:password") against one configured digest and
issues a bearer token valid for a fixed window. This is a convenience gate
for a personal site with a single shared secret, not an authentication
system: there is one credential, no rate limiting, and no persistence.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bubblegraph.config import AuthSettings

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)


class AuthError(Exception):
    """Base exception for session gate failures."""

    pass


class InvalidCredentialsError(AuthError):
    """Raised when a login does not match the configured credential."""

    pass


class SessionNotFoundError(AuthError):
    """Raised when a token does not belong to any live session."""

    pass


class SessionExpiredError(AuthError):
    """Raised when a token's session has passed its expiry."""

    pass


def credential_hash(username: str, password: str) -> str:
    """Hex sha256 digest of ``username:password``."""
    return hashlib.sha256(f"{username}:{password}".encode()).hexdigest()


@dataclass(frozen=True)
class Session:
    """A capability token with a bounded validity window."""

    token: str
    issued_at: datetime
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return self.issued_at <= now < self.expires_at

    def remaining(self, now: datetime) -> timedelta:
        return max(timedelta(0), self.expires_at - now)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionProvider:
    """Issues, validates and revokes admin sessions.

    Owners call ``init()`` before use and ``teardown()`` on shutdown; every
    consumer validates its token through ``validate()`` instead of trusting
    the token's mere presence.

    Example:
        >>> provider = SessionProvider(credential_hash("admin", "secret"))
        >>> provider.init()
        >>> session = provider.login("admin", "secret")
        >>> provider.validate(session.token) == session
        True
    """

    def __init__(
        self,
        expected_hash: str | None,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Session ttl must be positive")
        self._expected_hash = expected_hash.lower() if expected_hash else None
        self.ttl = ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._active = False

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> SessionProvider:
        expected = settings.credential_hash.get_secret_value() if settings.credential_hash else None
        return cls(expected, ttl=timedelta(hours=settings.session_ttl_hours))

    @property
    def active(self) -> bool:
        return self._active

    @property
    def login_enabled(self) -> bool:
        return self._expected_hash is not None

    def init(self) -> None:
        """Start accepting logins."""
        self._active = True
        logger.debug(
            "Session provider initialized (login %s)",
            "enabled" if self.login_enabled else "disabled",
        )

    def teardown(self) -> None:
        """Revoke every session and stop accepting logins. Idempotent."""
        with self._lock:
            revoked = len(self._sessions)
            self._sessions.clear()
        self._active = False
        if revoked:
            logger.info("Session provider torn down, revoked %d sessions", revoked)

    def login(self, username: str, password: str) -> Session:
        """Check credentials and issue a new session.

        Raises:
            InvalidCredentialsError: If the provider is inactive, login is
                disabled, or the credential does not match.
        """
        if not self._active or self._expected_hash is None:
            raise InvalidCredentialsError("Login is not available")
        supplied = credential_hash(username, password)
        if not hmac.compare_digest(supplied, self._expected_hash):
            logger.warning("Rejected admin login attempt")
            raise InvalidCredentialsError("Invalid credentials")

        now = self._clock()
        session = Session(
            token=secrets.token_urlsafe(32),
            issued_at=now,
            expires_at=now + self.ttl,
        )
        with self._lock:
            self._sessions[session.token] = session
        logger.info("Admin session issued, expires %s", session.expires_at.isoformat())
        return session

    def validate(self, token: str) -> Session:
        """Return the live session for ``token``.

        Raises:
            SessionNotFoundError: Unknown token (or provider inactive).
            SessionExpiredError: Token expired; the session is evicted.
        """
        with self._lock:
            session = self._sessions.get(token) if self._active else None
            if session is None:
                raise SessionNotFoundError("No such session")
            if not session.is_valid(self._clock()):
                del self._sessions[token]
                raise SessionExpiredError("Session expired")
            return session

    def logout(self, token: str) -> bool:
        """Revoke a session. Returns False if it did not exist."""
        with self._lock:
            removed = self._sessions.pop(token, None) is not None
        if removed:
            logger.info("Admin session revoked")
        return removed

    def purge_expired(self) -> int:
        """Evict expired sessions; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [t for t, s in self._sessions.items() if not s.is_valid(now)]
            for token in expired:
                del self._sessions[token]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
