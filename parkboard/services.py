from __future__ import annotations

import logging
from typing import Any, Mapping

from parkboard.geo import DistanceUnit, distance_between
from parkboard.models import (
    ParkingReport,
    RankedReport,
    ReportDraft,
    ReportStatus,
    SearchResponse,
    parse_point,
    parse_radius,
)
from parkboard.store import ReportStore

logger = logging.getLogger(__name__)

DEFAULT_RESULT_LIMIT = 10


def rank_reports(
    reports: list[ParkingReport],
    lat: float,
    lng: float,
    radius: float,
    unit: DistanceUnit,
    limit: int = DEFAULT_RESULT_LIMIT,
) -> list[RankedReport]:
    """Freshest first, nearest among equally fresh, within ``radius``.

    ``radius`` and the returned distances are both in ``unit``.
    """
    rows: list[dict[str, Any]] = []
    for r in reports:
        if r.status != ReportStatus.ACTIVE:
            continue
        d = distance_between(lat, lng, r.coordinates.lat, r.coordinates.lng, unit)
        if d > radius:
            continue
        rows.append({"report": r, "distance": d})

    # Two stable passes: the second key decides, the first breaks its ties.
    rows.sort(key=lambda row: row["distance"])
    rows.sort(key=lambda row: row["report"].reported_at, reverse=True)
    rows = rows[: max(0, int(limit))]

    return [
        RankedReport(**row["report"].model_dump(), distance=float(row["distance"]))
        for row in rows
    ]


class AvailabilityIndex:
    """Answers "what's open near me" from a store snapshot.

    Holds no state of its own; every query rescans the store.
    """

    def __init__(
        self,
        store: ReportStore,
        unit: DistanceUnit = DistanceUnit.MI,
        default_radius: float = 0.5,
        limit: int = DEFAULT_RESULT_LIMIT,
    ) -> None:
        self.store = store
        self.unit = DistanceUnit(unit)
        self.default_radius = float(default_radius)
        self.limit = limit

    def query(self, lat: object, lng: object, radius: object = None) -> list[RankedReport]:
        lat_v, lng_v = parse_point(lat, lng)
        radius_v = parse_radius(radius, self.default_radius)
        return self._query(lat_v, lng_v, radius_v)

    def _query(self, lat: float, lng: float, radius: float) -> list[RankedReport]:
        reports = self.store.scan_active()
        ranked = rank_reports(reports, lat, lng, radius, self.unit, self.limit)
        logger.debug(
            "Query (%.5f, %.5f) r=%s%s: %d active, %d returned",
            lat, lng, radius, self.unit.value, len(reports), len(ranked),
        )
        return ranked

    def search(self, lat: object, lng: object, radius: object = None) -> SearchResponse:
        lat_v, lng_v = parse_point(lat, lng)
        radius_v = parse_radius(radius, self.default_radius)
        spots = self._query(lat_v, lng_v, radius_v)

        message = None
        if not spots:
            message = f"No parking spots found within {radius_v:g} {self.unit.value}"
        return SearchResponse(
            spots=spots,
            total=len(spots),
            radius=radius_v,
            unit=self.unit,
            message=message,
        )


def ingest_report(store: ReportStore, payload: ReportDraft | Mapping[str, Any] | None) -> ParkingReport:
    report = store.append(payload)
    logger.info(
        "Stored report %s: %d spot(s) at (%.5f, %.5f)",
        report.id,
        report.spot_count,
        report.coordinates.lat,
        report.coordinates.lng,
    )
    return report
