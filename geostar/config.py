"""
Service configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Only DATABASE_URL is required at startup. Vendor credentials may be absent;
the job endpoints report that condition at request time instead.

CHANGELOG:
- 2026-10-09: Add FETCH_INTERVAL_S for the in-process scheduler (STORY-011)
- 2026-10-04: Make session TTL configurable via SESSION_MAX_AGE_S (STORY-004)
- 2026-10-02: Initial creation (STORY-001)

TODO:
- None
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_TIMEZONE = "America/Los_Angeles"
DEFAULT_SESSION_MAX_AGE_S = 12 * 60 * 60


class Settings(BaseSettings):
    """Configuration for the GeoStar energy sync service.

    Attributes:
        database_url: SQLAlchemy async database URL.
        geostar_email: Portal login email. Empty means not configured.
        geostar_password: Portal login password. Empty means not configured.
        geostar_base_url: Portal base URL (must be HTTPS).
        timezone: IANA timezone used for civil-date boundaries.
        session_max_age_s: Age in seconds after which a stored portal
            session is considered expired without probing it.
        fetch_interval_s: Seconds between in-process daily fetch runs.
            0 disables the in-process scheduler.
        log_level: Root log level.
        api_host: Bind address for the API server.
        api_port: Bind port for the API server.
    """

    database_url: str
    geostar_email: str = ""
    geostar_password: str = ""
    geostar_base_url: str = "https://symphony.mygeostar.com"
    timezone: str = DEFAULT_TIMEZONE
    session_max_age_s: int = DEFAULT_SESSION_MAX_AGE_S
    fetch_interval_s: int = 0
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def has_credentials(self) -> bool:
        """True when both portal credentials are configured."""
        return bool(self.geostar_email and self.geostar_password)

    @field_validator("geostar_base_url")
    @classmethod
    def base_url_must_be_https(cls, v: str) -> str:
        """Reject non-HTTPS portal URLs; credentials are posted to it."""
        if not v.lower().startswith("https://"):
            raise ValueError(
                f"GEOSTAR_BASE_URL must use HTTPS (got: '{v[:30]}')"
            )
        return v.rstrip("/")

    @field_validator("timezone")
    @classmethod
    def timezone_must_exist(cls, v: str) -> str:
        """Validate that TIMEZONE names a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            raise ValueError(f"TIMEZONE '{v}' is not a known IANA timezone") from None
        return v

    @field_validator("session_max_age_s")
    @classmethod
    def session_max_age_must_be_positive(cls, v: int) -> int:
        """Validate the session TTL is positive."""
        if v <= 0:
            raise ValueError("SESSION_MAX_AGE_S must be > 0")
        return v

    @field_validator("fetch_interval_s")
    @classmethod
    def fetch_interval_must_be_non_negative(cls, v: int) -> int:
        """Validate the scheduler interval is non-negative."""
        if v < 0:
            raise ValueError("FETCH_INTERVAL_S must be >= 0")
        return v

    @field_validator("api_port")
    @classmethod
    def api_port_must_be_valid(cls, v: int) -> int:
        """Validate the API port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("API_PORT must be between 1 and 65535")
        return v

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
