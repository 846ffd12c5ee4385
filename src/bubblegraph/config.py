"""Settings loading for layouts and the admin session gate.

Pydantic-based settings read from environment variables and a .env file.
The credential hash is a SecretStr and never appears in logs or reprs.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class LayoutSettings(BaseSettings):
    """Viewport and frame-loop settings.

    Environment Variables:
        LAYOUT_VIEWPORT_WIDTH: Initial viewport width in pixels (default: 1280)
        LAYOUT_VIEWPORT_HEIGHT: Initial viewport height in pixels (default: 800)
        LAYOUT_PADDING: Gap kept between circles and the viewport edge (default: 10)
        LAYOUT_CLICK_DISTANCE: Pointer travel in pixels that turns a click into a drag (default: 4)
        LAYOUT_FRAME_RATE: Simulation frames per second (default: 60)
        LAYOUT_STREAM_RATE: Frames per second pushed to WebSocket clients (default: 30)
        LAYOUT_SEED: Seed for initial placement and jiggle (default: unset, random)
        LAYOUT_DEMO_CONTENT: Load sample knowledge content on startup (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="LAYOUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    viewport_width: float = Field(default=1280.0, gt=0, description="Initial viewport width")
    viewport_height: float = Field(default=800.0, gt=0, description="Initial viewport height")
    padding: float = Field(default=10.0, ge=0, description="Edge padding in pixels")
    click_distance: float = Field(
        default=4.0,
        ge=0,
        le=50,
        description="Pointer travel (px) beyond which a gesture counts as a drag",
    )
    frame_rate: float = Field(default=60.0, gt=0, le=240, description="Simulation FPS")
    stream_rate: float = Field(default=30.0, gt=0, le=120, description="WebSocket FPS")
    seed: int | None = Field(default=None, description="Random seed for placement")
    demo_content: bool = Field(
        default=False, description="Seed the knowledge graph with sample content on startup"
    )


class AuthSettings(BaseSettings):
    """Admin gate settings.

    Environment Variables:
        AUTH_CREDENTIAL_HASH: sha256 hex digest of "username:password"
        AUTH_SESSION_TTL_HOURS: Session lifetime in hours (default: 24)

    Example:
        >>> settings = AuthSettings()  # Loads from environment
        >>> settings = AuthSettings(_env_file=".env")  # Explicit .env file
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    credential_hash: SecretStr | None = Field(
        default=None,
        description="sha256 hex digest of 'username:password'",
    )
    session_ttl_hours: float = Field(
        default=24.0,
        gt=0,
        le=24 * 30,
        description="Session lifetime in hours",
    )

    @field_validator("credential_hash", mode="before")
    @classmethod
    def normalize_hash(cls, v: object) -> object:
        """Lowercase and strip the digest; empty strings mean unset."""
        if isinstance(v, str):
            v = v.strip().lower()
            if not v:
                return None
            if len(v) != 64 or any(c not in "0123456789abcdef" for c in v):
                raise ValueError("credential_hash must be a 64 character sha256 hex digest")
        return v

    def __repr__(self) -> str:
        """Safe representation that never exposes the credential hash."""
        return (
            f"AuthSettings("
            f"credential_hash={'*****' if self.credential_hash else 'not set'}, "
            f"session_ttl_hours={self.session_ttl_hours}"
            f")"
        )


@lru_cache
def get_layout_settings() -> LayoutSettings:
    """Cached layout settings; call ``get_layout_settings.cache_clear()`` to reload."""
    settings = LayoutSettings()
    logger.info(
        "Loaded layout settings: viewport=%.0fx%.0f fps=%.0f click_distance=%.1f",
        settings.viewport_width,
        settings.viewport_height,
        settings.frame_rate,
        settings.click_distance,
    )
    return settings


@lru_cache
def get_auth_settings() -> AuthSettings:
    """Cached auth settings; call ``get_auth_settings.cache_clear()`` to reload."""
    settings = AuthSettings()
    logger.info("Loaded auth settings: %r", settings)
    if settings.credential_hash is None:
        logger.warning("AUTH_CREDENTIAL_HASH is not set; admin login is disabled")
    return settings
