"""Tests for application settings."""
from zoneinfo import ZoneInfo

import pytest

from attendance.core.config import Settings


@pytest.mark.unit
class TestSettings:
    """Test settings parsing."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.TIMEZONE == "America/New_York"
        assert settings.CHECKIN_TOKEN_TTL_HOURS == 24
        assert settings.NEARBY_SEARCH_RADIUS_METERS == 5000
        assert settings.MATERIALIZE_DAYS_AHEAD == 7

    def test_timezone_property(self):
        settings = Settings(TIMEZONE="Africa/Lagos")
        assert settings.tz == ZoneInfo("Africa/Lagos")

    def test_previous_keys_from_comma_separated_string(self):
        settings = Settings(CHECKIN_TOKEN_PREVIOUS_KEYS="key-one, key-two,,")
        assert settings.CHECKIN_TOKEN_PREVIOUS_KEYS == ["key-one", "key-two"]

    def test_token_keys_current_first(self):
        settings = Settings(CHECKIN_TOKEN_KEY="current", CHECKIN_TOKEN_PREVIOUS_KEYS=["old"])
        assert settings.get_token_keys() == ["current", "old"]

    def test_token_keys_empty_without_key(self):
        settings = Settings(CHECKIN_TOKEN_KEY=None, CHECKIN_TOKEN_PREVIOUS_KEYS=[])
        assert settings.get_token_keys() == []


@pytest.mark.unit
class TestProductionValidation:
    """Test production configuration checks."""

    def test_development_is_not_validated(self):
        settings = Settings(ENVIRONMENT="development", CHECKIN_TOKEN_KEY=None)
        settings.validate_production_config()

    def test_production_reports_every_issue(self):
        settings = Settings(
            ENVIRONMENT="production",
            CHECKIN_TOKEN_KEY=None,
            DATABASE_URL="sqlite:///attendance.db",
            CHECKIN_TOKEN_TTL_HOURS=0,
        )
        with pytest.raises(ValueError) as exc_info:
            settings.validate_production_config()

        message = str(exc_info.value)
        assert "CHECKIN_TOKEN_KEY" in message
        assert "DATABASE_URL" in message
        assert "CHECKIN_TOKEN_TTL_HOURS" in message

    def test_valid_production_config(self):
        settings = Settings(
            ENVIRONMENT="production",
            CHECKIN_TOKEN_KEY="configured",
            DATABASE_URL="postgresql://attendance@db/attendance",
            CHECKIN_TOKEN_TTL_HOURS=24,
        )
        settings.validate_production_config()
