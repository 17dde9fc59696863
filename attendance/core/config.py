"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Optional, Union
from zoneinfo import ZoneInfo
import os

from attendance.core.constants import (
    DEFAULT_TOKEN_TTL_HOURS,
    DEFAULT_NEARBY_RADIUS_METERS,
    DEFAULT_DAYS_AHEAD,
)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Database
    DATABASE_URL: str = "sqlite:///attendance.db"
    DB_POOL_SIZE: int = 15
    DB_MAX_OVERFLOW: int = 25

    # Local time used for admission windows, lateness and token expiry
    TIMEZONE: str = "America/New_York"

    # Check-in tokens: the current key encrypts, previous keys still decrypt
    CHECKIN_TOKEN_KEY: Optional[str] = None
    CHECKIN_TOKEN_PREVIOUS_KEYS: Union[List[str], str] = []
    CHECKIN_TOKEN_TTL_HOURS: int = DEFAULT_TOKEN_TTL_HOURS
    # QR codes encode "{CHECKIN_URL_BASE}?token=..." when set, the bare token otherwise
    CHECKIN_URL_BASE: Optional[str] = None

    @field_validator('CHECKIN_TOKEN_PREVIOUS_KEYS', mode='before')
    @classmethod
    def parse_previous_keys(cls, v):
        """Parse previous token keys from comma-separated string or list."""
        if isinstance(v, str):
            return [key.strip() for key in v.split(',') if key.strip()]
        return v

    # Geofence
    NEARBY_SEARCH_RADIUS_METERS: int = DEFAULT_NEARBY_RADIUS_METERS

    # Recurring session generation
    MATERIALIZE_DAYS_AHEAD: int = DEFAULT_DAYS_AHEAD
    MATERIALIZE_CRON_HOUR: int = 0
    MATERIALIZE_CRON_MINUTE: int = 0

    # Environment
    ENVIRONMENT: str = "development"  # development, staging, production

    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)

    def get_token_keys(self) -> List[str]:
        """Token keys in rotation order (current key first)."""
        keys = [self.CHECKIN_TOKEN_KEY] if self.CHECKIN_TOKEN_KEY else []
        return keys + list(self.CHECKIN_TOKEN_PREVIOUS_KEYS)

    def validate_production_config(self) -> None:
        """Validate that production-critical settings are properly configured."""
        if self.ENVIRONMENT == "production":
            issues = []

            if not self.CHECKIN_TOKEN_KEY:
                issues.append("CHECKIN_TOKEN_KEY must be set (see attendance.core.security.generate_token_key)")

            if self.DATABASE_URL.startswith("sqlite"):
                issues.append("DATABASE_URL should point at a server database, not SQLite")

            if self.CHECKIN_TOKEN_TTL_HOURS <= 0:
                issues.append("CHECKIN_TOKEN_TTL_HOURS must be positive")

            if issues:
                raise ValueError(
                    "Production configuration errors:\n" +
                    "\n".join(f"  - {issue}" for issue in issues)
                )


settings = Settings()

# Validate production configuration on startup
if os.getenv("ENVIRONMENT") == "production":
    settings.validate_production_config()
