import json
from datetime import datetime, timezone

import pytest

from parkboard.data_loader import dump_reports, load_reports_from_file, read_rows
from parkboard.models import LocationKind, ReportStatus


def write_log(path, rows):
    path.write_text(json.dumps(rows), encoding="utf-8")


def test_missing_file_is_empty(tmp_path):
    result = load_reports_from_file(str(tmp_path / "nope.json"))
    assert result.reports == []
    assert read_rows(str(tmp_path / "nope.json")) == []


def test_blank_file_is_empty(tmp_path):
    path = tmp_path / "reports.json"
    path.write_text("  \n", encoding="utf-8")
    assert load_reports_from_file(str(path)).reports == []


def test_legacy_rows(tmp_path):
    path = tmp_path / "available_parking.json"
    write_log(
        path,
        [
            {
                "id": "1717243200000",
                "location": "other",
                "spots": 2,
                "address": "Pier 39",
                "coordinates": {"lat": 37.8087, "lng": -122.4098},
                "timestamp": "2024-06-01T12:00:00.000Z",
            },
            {
                "location": "current",
                "spots": 1,
                "address": "Ferry Building",
                "coordinates": {"lat": 37.7955, "lng": -122.3937},
                "timestamp": "2024-06-01T12:05:00",
            },
        ],
    )

    result = load_reports_from_file(str(path))
    first, second = result.reports

    assert result.source == str(path)
    assert first.id == "1717243200000"
    assert first.location_kind is LocationKind.OTHER
    assert first.status is ReportStatus.ACTIVE
    assert first.reported_at == datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert second.id == "legacy-1"
    assert second.reported_at.tzinfo is not None


def test_unusable_rows_skipped(tmp_path):
    path = tmp_path / "reports.json"
    write_log(
        path,
        [
            "not an object",
            {"address": "no coordinates", "spots": 1, "timestamp": "2024-06-01T12:00:00Z"},
            {"address": "no time", "spots": 1, "coordinates": {"lat": 1, "lng": 1}},
            {
                "address": "ok",
                "spot_count": 1,
                "coordinates": {"lat": 1, "lng": 1},
                "reported_at": "2024-06-01T12:00:00+00:00",
                "status": "taken",
            },
        ],
    )

    reports = load_reports_from_file(str(path)).reports
    assert [r.address for r in reports] == ["ok"]
    assert reports[0].status is ReportStatus.TAKEN


def test_object_at_top_level_rejected(tmp_path):
    path = tmp_path / "reports.json"
    write_log(path, {"reports": []})
    with pytest.raises(ValueError):
        load_reports_from_file(str(path))


def test_dump_uses_iso_timestamps(tmp_path):
    path = tmp_path / "reports.json"
    write_log(
        path,
        [
            {
                "id": "a",
                "location_kind": "current",
                "spot_count": 3,
                "address": "Castro St",
                "coordinates": {"lat": 37.76, "lng": -122.435},
                "reported_at": "2024-06-01T12:00:00+00:00",
                "status": "active",
            }
        ],
    )
    (row,) = dump_reports(load_reports_from_file(str(path)).reports)
    assert set(row) == {
        "id", "location_kind", "spot_count", "address", "coordinates", "reported_at", "status",
    }
    assert row["reported_at"].startswith("2024-06-01T12:00:00")
    assert row["spot_count"] == 3
