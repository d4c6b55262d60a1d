"""Flat-directory persistence for markdown reports."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from pathlib import Path

from .models import ReportMetadata
from .report import file_name_for

LOGGER = logging.getLogger(__name__)

REPORT_NAME_PATTERN = re.compile(r"^trending-\d{4}-\d{2}-\d{2}\.md$")


class ReportNotFoundError(FileNotFoundError):
    """Raised when a requested report does not exist."""


class InvalidReportNameError(ValueError):
    """Raised when a report name is not of the form ``trending-YYYY-MM-DD.md``."""


def validate_report_name(file_name: str) -> str:
    """Return ``file_name`` unchanged if it is a plain report name.

    Rejects anything with separators, parent references or a foreign
    extension before it can reach the filesystem.
    """

    if not isinstance(file_name, str) or not REPORT_NAME_PATTERN.fullmatch(file_name):
        raise InvalidReportNameError(f"Invalid report name: {file_name!r}")
    return file_name


class ReportStore:
    """Stores one markdown file per calendar date in ``directory``."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, content: str, day: date | datetime) -> Path:
        """Write ``content`` as the report for ``day``, overwriting any existing one."""

        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._directory / file_name_for(day)
        path.write_text(content, encoding="utf-8", newline="")
        return path

    def list(self) -> list[ReportMetadata]:
        """Reports sorted newest first; empty if the directory cannot be read."""

        try:
            names = sorted(
                (entry.name for entry in self._directory.iterdir() if REPORT_NAME_PATTERN.fullmatch(entry.name)),
                reverse=True,
            )
            return [ReportMetadata.from_path(self._directory / name) for name in names]
        except FileNotFoundError:
            return []
        except OSError:
            LOGGER.warning("Listing reports in %s failed", self._directory, exc_info=True)
            return []

    def read(self, file_name: str) -> str:
        validate_report_name(file_name)
        path = self._directory / file_name
        try:
            with path.open(encoding="utf-8", newline="") as handle:
                return handle.read()
        except FileNotFoundError as exc:
            raise ReportNotFoundError(f"Report does not exist: {file_name}") from exc

    def prune(self, keep_count: int) -> list[str]:
        """Delete every report beyond the ``keep_count`` most recent.

        Returns the names actually deleted; failures are logged and skipped.
        """

        reports = self.list()
        deleted: list[str] = []
        for report in reports[keep_count:]:
            try:
                report.file_path.unlink()
            except OSError:
                LOGGER.warning("Could not delete old report %s", report.file_name, exc_info=True)
                continue
            LOGGER.info("Deleted old report %s", report.file_name)
            deleted.append(report.file_name)
        if deleted:
            LOGGER.info("Pruning finished; kept the %s most recent reports", keep_count)
        return deleted


__all__ = [
    "InvalidReportNameError",
    "ReportNotFoundError",
    "ReportStore",
    "REPORT_NAME_PATTERN",
    "validate_report_name",
]
