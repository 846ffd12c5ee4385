"""API endpoints for the admin session gate.

Login exchanges a username/password for a bearer token. Write endpoints
elsewhere depend on ``require_session``, which validates the token on every
request.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field

from bubblegraph.auth import AuthError, InvalidCredentialsError, Session
from bubblegraph.server.state import get_session_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Request body for admin login."""

    username: str = Field(min_length=1, description="Admin username")
    password: str = Field(min_length=1, description="Admin password")


class SessionResponse(BaseModel):
    """An issued session."""

    token: str = Field(description="Bearer token for write requests")
    issued_at: datetime = Field(description="When the session was issued")
    expires_at: datetime = Field(description="When the session stops being accepted")


class SessionStatusResponse(BaseModel):
    authenticated: bool
    expires_at: datetime | None = None


class LogoutResponse(BaseModel):
    success: bool
    message: str


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_session(authorization: str | None = Header(default=None)) -> Session:
    """Dependency that resolves the caller's live session or answers 401."""
    token = bearer_token(authorization)
    if token is None:
        raise _unauthorized("Missing bearer token")
    try:
        return get_session_provider().validate(token)
    except AuthError as e:
        raise _unauthorized(str(e)) from e


@router.post(
    "/login",
    response_model=SessionResponse,
    responses={
        200: {"description": "Session issued"},
        401: {"description": "Invalid credentials or login disabled"},
    },
)
async def login(request: LoginRequest) -> SessionResponse:
    """Check credentials and issue a session.

    Raises:
        HTTPException: 401 if the credentials do not match.
    """
    provider = get_session_provider()
    try:
        session = provider.login(request.username, request.password)
    except InvalidCredentialsError as e:
        raise _unauthorized("Invalid credentials") from e

    return SessionResponse(
        token=session.token,
        issued_at=session.issued_at,
        expires_at=session.expires_at,
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    session: Session = Depends(require_session),  # noqa: B008
) -> LogoutResponse:
    """Revoke the caller's session."""
    get_session_provider().logout(session.token)
    return LogoutResponse(success=True, message="Logged out")


@router.get("/session", response_model=SessionStatusResponse)
async def session_status(
    authorization: str | None = Header(default=None),
) -> SessionStatusResponse:
    """Report whether the supplied token is a live session. Never fails."""
    token = bearer_token(authorization)
    if token is None:
        return SessionStatusResponse(authenticated=False)
    try:
        session = get_session_provider().validate(token)
    except AuthError:
        return SessionStatusResponse(authenticated=False)
    return SessionStatusResponse(authenticated=True, expires_at=session.expires_at)
