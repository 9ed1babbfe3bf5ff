"""Tests for configuration validation."""

import pytest
from pydantic import ValidationError

from src.core.config import Constants, Settings


def test_defaults() -> None:
    """Test settings defaults without any environment."""
    settings = Settings(_env_file=None)

    assert settings.timezone == "UTC"
    assert settings.enable_scheduler is True
    assert settings.materialize_job_hour == 0
    assert settings.is_production is True


def test_environment_overrides(monkeypatch) -> None:
    """Test settings are read from environment variables."""
    monkeypatch.setenv("TIMEZONE", "Asia/Tokyo")
    monkeypatch.setenv("ENABLE_SCHEDULER", "false")
    monkeypatch.setenv("ENVIRONMENT", "development")

    settings = Settings(_env_file=None)

    assert settings.timezone == "Asia/Tokyo"
    assert settings.enable_scheduler is False
    assert settings.is_production is False


def test_job_hour_out_of_range_rejected() -> None:
    """Test the nightly job hour must be a clock hour."""
    with pytest.raises(ValidationError, match="materialize_job_hour"):
        Settings(_env_file=None, materialize_job_hour=24)


def test_priority_ranks() -> None:
    """High sorts before medium before low, unknown after all of them."""
    ranks = Constants.PRIORITY_RANK

    assert ranks["high"] < ranks["medium"] < ranks["low"] < Constants.UNKNOWN_PRIORITY_RANK
