"""Markdown rendering of trending snapshots."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from .models import ProjectRecord

if TYPE_CHECKING:
    from .storage import ReportStore

LOGGER = logging.getLogger(__name__)

REPORT_FILE_TEMPLATE = "trending-{day}.md"
NO_LANGUAGES = "None"
TOP_LANGUAGES = 5
SOURCE_URL = "https://github.com/trending"

_ONE_DECIMAL = Decimal("0.1")


def format_number(value: int) -> str:
    """Abbreviate ``value`` with a K/M suffix, rounded half-up to one decimal."""

    if value >= 1_000_000:
        return f"{(Decimal(value) / 1_000_000).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)}M"
    if value >= 1_000:
        return f"{(Decimal(value) / 1_000).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)}K"
    return str(value)


def _calendar_day(value: date | datetime) -> date:
    # Keep the caller's local calendar date; never convert to UTC first.
    return value.date() if isinstance(value, datetime) else value


def format_file_date(value: date | datetime) -> str:
    day = _calendar_day(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def format_date_display(value: date | datetime) -> str:
    """Long form such as ``"Monday, January 15, 2024"``."""

    day = _calendar_day(value)
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def file_name_for(value: date | datetime) -> str:
    return REPORT_FILE_TEMPLATE.format(day=format_file_date(value))


def language_stats(projects: Sequence[ProjectRecord], limit: int = TOP_LANGUAGES) -> list[tuple[str, int]]:
    """Most frequent languages, ties kept in first-seen order."""

    counts = Counter(project.language for project in projects if project.language)
    # Counter preserves insertion order and sorted() is stable.
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]


def format_language_stats(stats: Sequence[tuple[str, int]]) -> str:
    if not stats:
        return NO_LANGUAGES
    return ", ".join(f"{language}({count})" for language, count in stats)


def _timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


def build_summary(projects: Sequence[ProjectRecord], rendered_at: datetime) -> str:
    total_stars = sum(project.stars for project in projects)
    total_forks = sum(project.forks for project in projects)
    return "\n".join(
        [
            "## 📊 Summary",
            "",
            f"- **Total projects**: {len(projects)}",
            f"- **Total stars**: {format_number(total_stars)}",
            f"- **Total forks**: {format_number(total_forks)}",
            f"- **Top languages**: {format_language_stats(language_stats(projects))}",
            "",
            f"> Report generated at: {_timestamp(rendered_at)}",
        ]
    )


def build_project_list(projects: Sequence[ProjectRecord]) -> str:
    lines = ["## 🚀 Trending Projects", ""]
    for index, project in enumerate(projects, start=1):
        lines += [f"### {index}. {project.name}", ""]
        if project.description:
            lines += [f"**Description**: {project.description}", ""]
        lines += [f"**Link**: [{project.name}]({project.url})", ""]
        lines += [
            "**Stats**:",
            f"- ⭐ Stars: {format_number(project.stars)}",
            f"- 🍴 Forks: {format_number(project.forks)}",
        ]
        if project.language:
            lines.append(f"- 💻 Language: {project.language}")
        if project.updated_at:
            lines.append(f"- 🕐 Updated: {project.updated_at}")
        lines += ["", "---", ""]
    return "\n".join(lines)


def build_footer(day: date | datetime, rendered_at: datetime) -> str:
    return "\n".join(
        [
            "---",
            "",
            "## 📝 About",
            "",
            "This report was generated automatically by the GitHub trending monitor.",
            "",
            f"- **Data source**: [GitHub Trending]({SOURCE_URL})",
            f"- **Generated at**: {_timestamp(rendered_at)}",
            f"- **Report date**: {format_date_display(day)}",
            "",
            "> 💡 **Tip**: projects are listed in the order GitHub ranks them as trending.",
            "",
            "---",
            "",
            "*Powered by GitHub Trending Monitor*",
        ]
    )


def build_document(
    projects: Sequence[ProjectRecord],
    day: date | datetime,
    *,
    rendered_at: datetime | None = None,
) -> str:
    """Render the full markdown report for ``projects`` dated ``day``."""

    if rendered_at is None:
        # Stamp the report in the same zone its date was taken in.
        zone = day.tzinfo if isinstance(day, datetime) else None
        rendered_at = datetime.now(zone)
    sections = [
        f"# GitHub Trending Report - {format_date_display(day)}",
        build_summary(projects, rendered_at),
        build_project_list(projects),
        build_footer(day, rendered_at),
    ]
    return "\n\n".join(sections)


def generate_report(
    store: "ReportStore",
    projects: Sequence[ProjectRecord],
    day: date | datetime | None = None,
) -> Path:
    """Render and persist a report, replacing any report for the same date.

    Write failures propagate to the caller.
    """

    day = day or datetime.now()
    content = build_document(projects, day)
    path = store.save(content, day)
    LOGGER.info("Markdown report written to %s", path)
    return path


__all__ = [
    "build_document",
    "file_name_for",
    "format_date_display",
    "format_file_date",
    "format_language_stats",
    "format_number",
    "generate_report",
    "language_stats",
    "NO_LANGUAGES",
]
