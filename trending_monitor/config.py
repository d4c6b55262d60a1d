"""Application configuration helpers."""

from __future__ import annotations

import os
from datetime import timezone
from pathlib import Path
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, field_validator


UTC = timezone.utc

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class SourceSettings(BaseModel):
    """Where the trending page lives and how to fetch it."""

    trending_url: str = Field(default="https://github.com/trending")
    base_url: str = Field(
        default="https://github.com",
        description="Origin used to resolve relative repository links and probe reachability.",
    )
    request_timeout: PositiveFloat = Field(default=30.0, description="Timeout for the trending page fetch in seconds.")
    health_timeout: PositiveFloat = Field(default=5.0, description="Timeout for the reachability probe in seconds.")
    cache_ttl: PositiveFloat = Field(default=3600.0, description="Seconds a fetched snapshot is served without refetching.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT)


class ReportSettings(BaseModel):
    """Where reports are written and how many are retained."""

    output_dir: Path = Field(default=Path("reports"))
    keep_count: PositiveInt = Field(default=7, description="Number of most recent reports kept by pruning.")


class ScheduleSettings(BaseModel):
    """Daily trigger times, evaluated in a named time zone."""

    timezone: str = Field(default="Asia/Shanghai")
    report_cron: str = Field(default="30 8 * * *")
    reminder_cron: str = Field(default="30 9 * * *")
    reminder_webhook_url: str | None = Field(default=None, description="Optional endpoint notified by the reminder.")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone: {value!r}") from exc
        return value

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _number(overrides: dict[str, Any], key: str, env: Mapping[str, str], env_key: str, default: float) -> Any:
    # An explicit override of 0 is passed through to validation.
    value = overrides.get(key)
    if value is None:
        value = env.get(env_key) or default
    return value


class AppConfig(BaseModel):
    """Root configuration container."""

    source: SourceSettings = Field(default_factory=SourceSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None, overrides: dict[str, Any] | None = None) -> "AppConfig":
        """Construct a configuration object from environment variables."""

        env = env if env is not None else os.environ
        overrides = overrides or {}

        source = SourceSettings(
            trending_url=overrides.get("trending_url") or env.get("TRENDING_URL") or "https://github.com/trending",
            base_url=overrides.get("base_url") or env.get("TRENDING_BASE_URL") or "https://github.com",
            request_timeout=float(_number(overrides, "request_timeout", env, "TRENDING_REQUEST_TIMEOUT", 30.0)),
            health_timeout=float(_number(overrides, "health_timeout", env, "TRENDING_HEALTH_TIMEOUT", 5.0)),
            cache_ttl=float(_number(overrides, "cache_ttl", env, "TRENDING_CACHE_TTL", 3600.0)),
            user_agent=overrides.get("user_agent") or env.get("TRENDING_USER_AGENT") or DEFAULT_USER_AGENT,
        )

        reports = ReportSettings(
            output_dir=Path(overrides.get("output_dir") or env.get("REPORTS_DIR") or "reports"),
            keep_count=int(_number(overrides, "keep_count", env, "REPORT_KEEP_COUNT", 7)),
        )

        schedule = ScheduleSettings(
            timezone=overrides.get("timezone") or env.get("SCHEDULE_TIMEZONE") or "Asia/Shanghai",
            report_cron=overrides.get("report_cron") or env.get("REPORT_CRON") or "30 8 * * *",
            reminder_cron=overrides.get("reminder_cron") or env.get("REMINDER_CRON") or "30 9 * * *",
            reminder_webhook_url=overrides.get("reminder_webhook_url") or env.get("REMINDER_WEBHOOK_URL") or None,
        )

        return cls(source=source, reports=reports, schedule=schedule)


__all__ = [
    "AppConfig",
    "SourceSettings",
    "ReportSettings",
    "ScheduleSettings",
    "DEFAULT_USER_AGENT",
    "UTC",
]
