"""Command line interface for the trending monitor."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Optional

import typer

from .cache import ProjectCache
from .config import AppConfig
from .report import generate_report
from .scheduler import Scheduler
from .service import TrendingService
from .storage import InvalidReportNameError, ReportNotFoundError, ReportStore
from .trending_client import TrendingPageClient

app = typer.Typer(add_completion=False)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _load_config(reports_dir: Path | None = None) -> AppConfig:
    overrides = {"output_dir": reports_dir} if reports_dir else {}
    return AppConfig.from_env(overrides=overrides)


def _build_service(config: AppConfig, client: TrendingPageClient) -> TrendingService:
    cache = ProjectCache(ttl=timedelta(seconds=config.source.cache_ttl))
    return TrendingService(client, cache)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command("trending")
def trending(log_level: str = typer.Option("INFO", help="Logging level")) -> None:
    """Print the current trending projects as JSON."""

    configure_logging(log_level)
    config = _load_config()

    async def runner() -> None:
        async with TrendingPageClient(config.source) as client:
            result = await _build_service(config, client).get_projects()
        _echo_json({"source": result.source.value, "projects": result.to_list()})

    asyncio.run(runner())


@app.command("health")
def health(log_level: str = typer.Option("INFO", help="Logging level")) -> None:
    """Check whether the trending source is reachable."""

    configure_logging(log_level)
    config = _load_config()

    async def runner() -> None:
        async with TrendingPageClient(config.source) as client:
            status = await _build_service(config, client).health_check()
        _echo_json(status.to_dict())
        if not status.healthy:
            raise typer.Exit(code=1)

    asyncio.run(runner())


@app.command("generate-report")
def generate_report_command(
    day: Optional[str] = typer.Option(None, help="Report date as YYYY-MM-DD (default: today)"),
    reports_dir: Optional[Path] = typer.Option(None, help="Directory reports are written to"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Fetch trending projects and write a markdown report."""

    configure_logging(log_level)
    config = _load_config(reports_dir)
    try:
        report_day = date.fromisoformat(day) if day else None
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid date: {day}") from exc

    async def runner() -> Path:
        async with TrendingPageClient(config.source) as client:
            result = await _build_service(config, client).get_projects()
        return generate_report(ReportStore(config.reports.output_dir), result.projects, report_day)

    path = asyncio.run(runner())
    typer.echo(f"Report written to {path}")


@app.command("list-reports")
def list_reports(
    reports_dir: Optional[Path] = typer.Option(None, help="Directory reports are read from"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """List stored reports, newest first."""

    configure_logging(log_level)
    config = _load_config(reports_dir)
    _echo_json([report.to_dict() for report in ReportStore(config.reports.output_dir).list()])


@app.command("read-report")
def read_report(
    file_name: str = typer.Argument(..., help="Report file name, e.g. trending-2024-01-15.md"),
    reports_dir: Optional[Path] = typer.Option(None, help="Directory reports are read from"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Print a stored report."""

    configure_logging(log_level)
    config = _load_config(reports_dir)
    try:
        content = ReportStore(config.reports.output_dir).read(file_name)
    except InvalidReportNameError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except ReportNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(content, nl=False)


@app.command("prune-reports")
def prune_reports(
    keep: Optional[int] = typer.Option(None, min=0, help="Number of reports to keep"),
    reports_dir: Optional[Path] = typer.Option(None, help="Directory reports are read from"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Delete all but the most recent reports."""

    configure_logging(log_level)
    config = _load_config(reports_dir)
    keep_count = config.reports.keep_count if keep is None else keep
    deleted = ReportStore(config.reports.output_dir).prune(keep_count)
    typer.echo(f"Deleted {len(deleted)} reports")


@app.command("run")
def run(
    generate_now: bool = typer.Option(False, help="Generate a report immediately on startup"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Run the daily report and reminder schedule until interrupted."""

    configure_logging(log_level)
    config = _load_config()

    async def runner() -> None:
        async with TrendingPageClient(config.source) as client:
            scheduler = Scheduler(config, _build_service(config, client), ReportStore(config.reports.output_dir))
            if generate_now:
                await scheduler.generate_daily_report()
            await scheduler.run_forever()

    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        typer.echo("Scheduler stopped")


__all__ = ["app"]
