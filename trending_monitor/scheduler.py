"""Daily report and reminder triggers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable
from zoneinfo import ZoneInfo

import httpx
from croniter import croniter

from .cache import Clock, utc_now
from .config import AppConfig
from .report import generate_report
from .service import TrendingService
from .storage import ReportStore

LOGGER = logging.getLogger(__name__)


class CronExpressionError(ValueError):
    """Raised for malformed five-field cron expressions."""


@dataclass(slots=True, frozen=True)
class CronSchedule:
    """A five-field cron expression evaluated as wall-clock time in ``zone``."""

    expression: str
    zone: ZoneInfo

    @classmethod
    def parse(cls, expression: str, zone: ZoneInfo | str) -> "CronSchedule":
        if len(expression.split()) != 5:
            raise CronExpressionError(f"Expected 5 fields in cron expression, got {expression!r}")
        try:
            croniter(expression)
        except (ValueError, KeyError) as exc:
            raise CronExpressionError(f"Invalid cron expression {expression!r}: {exc}") from exc
        return cls(expression=expression, zone=zone if isinstance(zone, ZoneInfo) else ZoneInfo(zone))

    def next_after(self, moment: datetime) -> datetime:
        """First matching minute strictly after ``moment``, as an aware datetime in ``zone``."""

        return croniter(self.expression, moment.astimezone(self.zone)).get_next(datetime)


class Scheduler:
    """Runs the daily report job and the daily reminder.

    The report job is single-flight: a trigger that arrives while a run is
    in progress is skipped.
    """

    def __init__(
        self,
        config: AppConfig,
        service: TrendingService,
        store: ReportStore,
        *,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._config = config
        self._service = service
        self._store = store
        self._http_client = http_client
        self._clock = clock
        zone = config.schedule.zone
        self.report_schedule = CronSchedule.parse(config.schedule.report_cron, zone)
        self.reminder_schedule = CronSchedule.parse(config.schedule.reminder_cron, zone)
        self._is_running = False
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._loop(self.report_schedule, self.generate_daily_report), name="daily-report"),
            asyncio.create_task(self._loop(self.reminder_schedule, self.send_daily_reminder), name="daily-reminder"),
        ]
        LOGGER.info(
            "Scheduler started (report: %r, reminder: %r, zone: %s)",
            self.report_schedule.expression,
            self.reminder_schedule.expression,
            self._config.schedule.timezone,
        )

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def run_forever(self) -> None:
        self.start()
        try:
            await asyncio.gather(*self._tasks)
        finally:
            await self.stop()

    async def _loop(self, schedule: CronSchedule, job: Callable[[], Awaitable[object]]) -> None:
        last_fire: datetime | None = None
        while True:
            now = self._clock()
            # Never fire the same minute twice, even if the sleep woke early.
            fire_at = schedule.next_after(max(now, last_fire) if last_fire else now)
            delay = max((fire_at - now).total_seconds(), 0.0)
            LOGGER.debug("Next %r run at %s", schedule.expression, fire_at.isoformat())
            await asyncio.sleep(delay)
            last_fire = fire_at
            await job()

    async def generate_daily_report(self) -> Path | None:
        """Fetch, render, save and prune. Returns the written path, if any."""

        if self._is_running:
            LOGGER.info("Report generation already in progress; skipping this run")
            return None

        self._is_running = True
        try:
            LOGGER.info("Starting daily trending report")
            result = await self._service.get_projects()
            if not result.projects:
                LOGGER.info("No trending projects available; no report written")
                return None
            LOGGER.info("Got %s projects (%s); rendering report", len(result.projects), result.source.value)
            day = self._clock().astimezone(self._config.schedule.zone)
            path = await asyncio.to_thread(generate_report, self._store, result.projects, day)
            await asyncio.to_thread(self._store.prune, self._config.reports.keep_count)
            return path
        except Exception:
            LOGGER.exception("Daily trending report failed")
            return None
        finally:
            self._is_running = False

    async def send_daily_reminder(self) -> None:
        try:
            LOGGER.info("Daily reminder: the latest GitHub trending report is ready")
            url = self._config.schedule.reminder_webhook_url
            if url:
                await self._post_reminder(url)
        except Exception:
            LOGGER.exception("Sending daily reminder failed")

    async def _post_reminder(self, url: str) -> None:
        reports = await asyncio.to_thread(self._store.list)
        payload = {
            "text": "The latest GitHub trending report is ready.",
            "latestReport": reports[0].file_name if reports else None,
        }
        if self._http_client is not None:
            response = await self._http_client.post(url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(url, json=payload)
        response.raise_for_status()


__all__ = ["CronExpressionError", "CronSchedule", "Scheduler"]
