"""Unit tests for settings."""

import logging

import pytest
from pydantic import ValidationError

from yayonay.config import EngagementSettings, ObservabilitySettings, Settings
from yayonay.util.logging import level_for
from yayonay.util.observability import should_send


class TestEngagementSettings:
    """Tests for EngagementSettings."""

    def test_defaults(self):
        settings = EngagementSettings()

        assert settings.cooldown_days == 7
        assert settings.tzinfo.key == "UTC"

    def test_unknown_timezone_is_rejected(self):
        with pytest.raises(ValidationError):
            EngagementSettings(timezone="Mars/Olympus_Mons")


class TestSettings:
    """Tests for environment loading."""

    def test_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("ENGAGEMENT__COOLDOWN_DAYS", "3")
        monkeypatch.setenv("ENGAGEMENT__TIMEZONE", "Europe/Berlin")

        settings = Settings()

        assert settings.engagement.cooldown_days == 3
        assert settings.engagement.tzinfo.key == "Europe/Berlin"


class TestObservabilitySettings:
    """Tests for Logfire sending and log levels."""

    def test_token_turns_sending_on(self):
        assert should_send(ObservabilitySettings(logfire_token="tok")) is True

    def test_explicit_setting_wins_over_token(self):
        observability = ObservabilitySettings(logfire_token="tok", send_to_logfire=False)

        assert should_send(observability) is False

    def test_console_only_by_default(self):
        assert should_send(ObservabilitySettings()) is False

    def test_log_level_follows_environment(self):
        assert level_for(Settings(environment="production")) == logging.WARNING
        assert level_for(Settings(environment="test")) == logging.INFO
        assert level_for(Settings(environment="production", debug=True)) == logging.DEBUG
