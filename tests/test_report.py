"""Tests for markdown report rendering and generation."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from trending_monitor.models import ProjectRecord
from trending_monitor.report import (
    build_document,
    file_name_for,
    format_date_display,
    format_language_stats,
    format_number,
    generate_report,
    language_stats,
)
from trending_monitor.storage import ReportStore


PROJECTS = [
    ProjectRecord(
        name="test/repo1",
        url="https://github.com/test/repo1",
        description="Test project 1",
        stars=1000,
        forks=100,
        language="JavaScript",
        updated_at="2024-01-01",
        rank=1,
    ),
    ProjectRecord(
        name="test/repo2",
        url="https://github.com/test/repo2",
        description="",
        stars=2000,
        forks=200,
        language="Python",
        updated_at="",
        rank=7,
    ),
]
RENDERED_AT = datetime(2024, 1, 15, 8, 30, 5)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1_500_000, "1.5M"),
        (1_000_000, "1.0M"),
        (2500, "2.5K"),
        (1050, "1.1K"),
        (999_949, "999.9K"),
        (999, "999"),
        (0, "0"),
    ],
)
def test_format_number(value, expected):
    """Counts abbreviate to K and M with one half-up decimal."""

    assert format_number(value) == expected


def test_file_name_uses_local_calendar_date():
    """The file name is derived from the calendar date alone."""

    assert file_name_for(date(2024, 1, 5)) == "trending-2024-01-05.md"
    late_evening = datetime(2024, 1, 5, 23, 30, tzinfo=timezone(timedelta(hours=-8)))
    assert file_name_for(late_evening) == "trending-2024-01-05.md"


def test_format_date_display():
    """Dates render in long English form."""

    assert format_date_display(date(2024, 1, 15)) == "Monday, January 15, 2024"


def test_language_stats_orders_by_count_then_first_seen():
    """Ties in language counts keep first-seen order."""

    projects = [
        ProjectRecord(name=f"o/r{index}", url="u", language=language)
        for index, language in enumerate(["Go", "Rust", "Rust", "C", "Go", "", "Zig", "Lua", "Nim"])
    ]

    stats = language_stats(projects)

    assert stats == [("Go", 2), ("Rust", 2), ("C", 1), ("Zig", 1), ("Lua", 1)]
    assert format_language_stats(stats) == "Go(2), Rust(2), C(1), Zig(1), Lua(1)"
    assert format_language_stats([]) == "None"


def test_build_document_contents():
    """The rendered document contains every section in order."""

    content = build_document(PROJECTS, date(2024, 1, 15), rendered_at=RENDERED_AT)

    assert content.startswith("# GitHub Trending Report - Monday, January 15, 2024\n\n")
    assert "- **Total projects**: 2" in content
    assert "- **Total stars**: 3.0K" in content
    assert "- **Total forks**: 300" in content
    assert "- **Top languages**: JavaScript(1), Python(1)" in content
    assert "### 1. test/repo1" in content
    assert "### 2. test/repo2" in content
    assert content.index("### 1. test/repo1") < content.index("### 2. test/repo2")
    assert "**Description**: Test project 1" in content
    assert content.count("**Description**") == 1
    assert "**Link**: [test/repo2](https://github.com/test/repo2)" in content
    assert "- 🕐 Updated: 2024-01-01" in content
    assert content.count("🕐 Updated") == 1
    assert "- **Generated at**: 2024-01-15 08:30:05" in content
    assert "- **Report date**: Monday, January 15, 2024" in content


def test_build_document_without_languages():
    """A report with no languages shows the None sentinel."""

    projects = [ProjectRecord(name="a/b", url="https://github.com/a/b")]

    content = build_document(projects, date(2024, 1, 15), rendered_at=RENDERED_AT)

    assert "- **Top languages**: None" in content
    assert "💻 Language" not in content


def test_build_document_stamps_generation_time_in_day_zone():
    """An aware report date puts the generation timestamp in the same zone."""

    zone = ZoneInfo("Pacific/Kiritimati")
    day = datetime.now(zone)

    content = build_document(PROJECTS, day)

    line = next(line for line in content.splitlines() if line.startswith("- **Generated at**: "))
    stamped = datetime.strptime(line.removeprefix("- **Generated at**: "), "%Y-%m-%d %H:%M:%S")
    assert abs(stamped.replace(tzinfo=zone) - datetime.now(zone)) < timedelta(minutes=1)
    assert f"- **Report date**: {format_date_display(day)}" in content


def test_generate_report_writes_file(tmp_path):
    """Generating a report saves it under the dated file name."""

    store = ReportStore(tmp_path)

    path = generate_report(store, PROJECTS, date(2024, 1, 15))

    assert path == tmp_path / "trending-2024-01-15.md"
    assert "test/repo1" in path.read_text(encoding="utf-8")


def test_generate_report_propagates_write_errors(tmp_path, monkeypatch):
    """Write failures surface to the caller of a manual run."""

    store = ReportStore(tmp_path)

    def failing_save(content, day):
        raise PermissionError("read-only")

    monkeypatch.setattr(store, "save", failing_save)

    with pytest.raises(PermissionError):
        generate_report(store, PROJECTS, date(2024, 1, 15))
