"""Tests for application settings."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from glucos.config import Settings, settings, validate_timezone


class TestSettings:
    """Tests for settings defaults and bounds."""

    def test_retention_defaults(self):
        config = Settings()
        assert config.glucose_retention_limit == 1000
        assert config.meal_retention_limit == 1000
        assert config.medication_retention_limit == 1000

    def test_non_positive_limit_rejected(self):
        with pytest.raises(ValidationError):
            Settings(glucose_retention_limit=0)

    def test_initial_bgl_must_be_in_sensor_range(self):
        with pytest.raises(ValidationError):
            Settings(generator_initial_bgl=500)

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("GENERATOR_INTERVAL_MINUTES", "15")
        assert Settings().generator_interval_minutes == 15


class TestValidateTimezone:
    """Tests for the startup time zone check."""

    def test_known_zone_passes(self):
        with patch.object(settings, "patient_timezone", "Europe/London"):
            validate_timezone()

    def test_unknown_zone_exits(self, capsys):
        with patch.object(settings, "patient_timezone", "Mars/Olympus_Mons"):
            with pytest.raises(SystemExit) as exc_info:
                validate_timezone()

        assert exc_info.value.code == 1
        assert "Mars/Olympus_Mons" in capsys.readouterr().err
