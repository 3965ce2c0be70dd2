"""Shared fakes and utilities for tests."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any

from parkboard.geo import DistanceUnit

# Union Square, San Francisco
ORIGIN = (37.7880, -122.4075)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 6, 1, 12, 0, 0, 250000, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_draft(lat: float = ORIGIN[0], lng: float = ORIGIN[1], **overrides: Any) -> dict[str, Any]:
    draft: dict[str, Any] = {
        "location_kind": "current",
        "spot_count": 2,
        "address": "333 Post St, San Francisco, CA",
        "coordinates": {"lat": lat, "lng": lng},
    }
    draft.update(overrides)
    return draft


def point_north_of(
    lat: float,
    lng: float,
    distance: float,
    unit: DistanceUnit = DistanceUnit.MI,
) -> tuple[float, float]:
    return lat + math.degrees(distance / unit.earth_radius), lng
