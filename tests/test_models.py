"""Tests for the record types and their serialized forms."""

from __future__ import annotations

from datetime import date, datetime, timezone

from trending_monitor.config import UTC
from trending_monitor.models import HealthStatus, ProjectRecord, ReportMetadata
from trending_monitor.storage import ReportStore


def test_project_record_defaults_and_serialization():
    """Records fill optional fields and serialize with camelCase keys."""

    record = ProjectRecord(name="acme/demo", url="https://github.com/acme/demo", rank=1)

    assert record.to_dict() == {
        "name": "acme/demo",
        "url": "https://github.com/acme/demo",
        "description": "",
        "stars": 0,
        "forks": 0,
        "language": "",
        "updatedAt": "today",
        "rank": 1,
    }


def test_health_status_includes_error_only_when_unhealthy():
    """Only an unhealthy status carries an error message."""

    moment = datetime(2024, 1, 10, tzinfo=timezone.utc)

    assert HealthStatus(healthy=True, timestamp=moment).to_dict() == {
        "status": "healthy",
        "timestamp": "2024-01-10T00:00:00+00:00",
    }
    assert HealthStatus(healthy=False, timestamp=moment, error="timeout").to_dict()["error"] == "timeout"


def test_report_metadata_from_path(tmp_path):
    """Metadata is read from the file system with UTC timestamps."""

    path = ReportStore(tmp_path).save("hello", date(2024, 1, 10))

    metadata = ReportMetadata.from_path(path)

    assert metadata.file_name == "trending-2024-01-10.md"
    assert metadata.file_path == path
    assert metadata.size == 5
    assert metadata.modified_at.tzinfo == UTC
    assert metadata.created_at.tzinfo == UTC
