"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from trending_monitor.config import AppConfig


def test_defaults_without_environment():
    """An empty environment yields the documented defaults."""

    config = AppConfig.from_env(env={})

    assert config.source.trending_url == "https://github.com/trending"
    assert config.source.request_timeout == 30.0
    assert config.source.health_timeout == 5.0
    assert config.source.cache_ttl == 3600.0
    assert config.reports.output_dir == Path("reports")
    assert config.reports.keep_count == 7
    assert config.schedule.timezone == "Asia/Shanghai"
    assert config.schedule.report_cron == "30 8 * * *"
    assert config.schedule.reminder_cron == "30 9 * * *"
    assert config.schedule.reminder_webhook_url is None


def test_environment_and_overrides():
    """Explicit overrides win over environment variables, which win over defaults."""

    env = {
        "TRENDING_URL": "https://github.com/trending?since=weekly",
        "TRENDING_CACHE_TTL": "120",
        "REPORTS_DIR": "/var/reports",
        "REPORT_KEEP_COUNT": "3",
        "SCHEDULE_TIMEZONE": "Europe/Berlin",
    }

    config = AppConfig.from_env(env=env, overrides={"keep_count": 10})

    assert config.source.trending_url.endswith("since=weekly")
    assert config.source.cache_ttl == 120.0
    assert config.reports.output_dir == Path("/var/reports")
    assert config.reports.keep_count == 10
    assert config.schedule.zone.key == "Europe/Berlin"


def test_unknown_timezone_is_rejected():
    """A zone name unknown to the tz database fails validation."""

    with pytest.raises(ValidationError):
        AppConfig.from_env(env={"SCHEDULE_TIMEZONE": "Mars/Olympus_Mons"})


def test_non_positive_keep_count_is_rejected():
    """A retention count below one fails validation."""

    with pytest.raises(ValidationError):
        AppConfig.from_env(env={"REPORT_KEEP_COUNT": "-1"})


def test_zero_override_is_validated_instead_of_replaced():
    """An explicit zero override is rejected rather than falling back to the environment."""

    with pytest.raises(ValidationError):
        AppConfig.from_env(env={"REPORT_KEEP_COUNT": "3"}, overrides={"keep_count": 0})

    with pytest.raises(ValidationError):
        AppConfig.from_env(env={}, overrides={"cache_ttl": 0})


def test_none_override_defers_to_environment():
    """A ``None`` override counts as unset."""

    config = AppConfig.from_env(env={"REPORT_KEEP_COUNT": "4"}, overrides={"keep_count": None, "request_timeout": None})

    assert config.reports.keep_count == 4
    assert config.source.request_timeout == 30.0
