from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

from pydantic import ValidationError as PydanticValidationError

from parkboard.models import ParkingReport, ReportStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    reports: list[ParkingReport]
    source: str


def _row_get(row: dict, keys: Iterable[str]) -> object | None:
    for k in keys:
        if k in row and row[k] not in (None, ""):
            return row[k]
    return None


def _parse_timestamp(v: object) -> datetime | None:
    if isinstance(v, datetime):
        ts = v
    elif isinstance(v, str):
        s = v.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _normalize_report(row: dict, idx: int) -> ParkingReport | None:
    reported_at = _parse_timestamp(_row_get(row, ["reported_at", "timestamp"]))
    if reported_at is None:
        return None

    try:
        return ParkingReport(
            id=str(_row_get(row, ["id", "_id"]) or f"legacy-{idx}"),
            location_kind=_row_get(row, ["location_kind", "location"]) or "other",
            spot_count=_row_get(row, ["spot_count", "spots"]),
            address=_row_get(row, ["address"]),
            coordinates=row.get("coordinates"),
            reported_at=reported_at,
            status=_row_get(row, ["status"]) or ReportStatus.ACTIVE,
        )
    except PydanticValidationError:
        return None


def read_rows(path: str) -> list[Any]:
    """Raw rows of a flat report log. A missing or empty file has none."""
    if not os.path.exists(path):
        return []

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    if not content.strip():
        return []

    obj = json.loads(content)
    if not isinstance(obj, list):
        raise ValueError(f"Unsupported JSON structure in {path} (expected an array)")
    return obj


def load_reports_from_file(path: str) -> LoadResult:
    """Read a flat report log: one JSON array of report objects.

    Rows that cannot be turned into a report are skipped.
    """
    reports: list[ParkingReport] = []
    for idx, row in enumerate(read_rows(path)):
        r = _normalize_report(row, idx) if isinstance(row, dict) else None
        if r is None:
            logger.warning("Skipping unreadable report row %d in %s", idx, path)
            continue
        reports.append(r)
    return LoadResult(reports=reports, source=path)


def dump_reports(reports: Iterable[ParkingReport]) -> list[dict[str, Any]]:
    return [r.model_dump(mode="json") for r in reports]
