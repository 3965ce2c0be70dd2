from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from parkboard.errors import ValidationError
from parkboard.geo import DistanceUnit


class LocationKind(str, Enum):
    CURRENT = "current"
    OTHER = "other"


class ReportStatus(str, Enum):
    ACTIVE = "active"
    TAKEN = "taken"


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class ReportDraft(BaseModel):
    """What a reporter sends. Server-owned fields are ignored if present."""

    model_config = ConfigDict(str_strip_whitespace=True)

    # "location" / "spots" are the names the legacy reporting form posts.
    location_kind: LocationKind = Field(
        validation_alias=AliasChoices("location_kind", "location")
    )
    spot_count: int = Field(
        ge=1, strict=True, validation_alias=AliasChoices("spot_count", "spots")
    )
    address: str = Field(min_length=1)
    coordinates: Coordinates


class ParkingReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    location_kind: LocationKind
    spot_count: int
    address: str
    coordinates: Coordinates
    reported_at: datetime
    status: ReportStatus = ReportStatus.ACTIVE


class RankedReport(ParkingReport):
    distance: float


class SearchResponse(BaseModel):
    spots: list[RankedReport]
    total: int
    radius: float
    unit: DistanceUnit
    message: str | None = None


_FIELD_MESSAGES = {
    "location_kind": "location_kind must be 'current' or 'other'",
    "spot_count": "spot_count must be a whole number of at least 1",
    "address": "address must not be empty",
    "coordinates": (
        "Invalid coordinates: latitude must be between -90 and 90 "
        "and longitude between -180 and 180"
    ),
}


def _translate(exc: PydanticValidationError) -> ValidationError:
    errors = exc.errors()

    missing = list(
        dict.fromkeys(
            str(e["loc"][0])
            for e in errors
            if e["loc"] and (e["type"] == "missing" or e.get("input") is None)
        )
    )
    if missing:
        if missing == ["coordinates"]:
            return ValidationError("Missing coordinates", field="coordinates")
        return ValidationError(
            f"Missing required fields: {', '.join(missing)}", field=missing[0]
        )

    first = errors[0]
    field = str(first["loc"][0]) if first["loc"] else "body"
    return ValidationError(_FIELD_MESSAGES.get(field, first["msg"]), field=field)


def parse_draft(payload: ReportDraft | Mapping[str, Any] | None) -> ReportDraft:
    if isinstance(payload, ReportDraft):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError("Report must be a JSON object", field="body")
    try:
        return ReportDraft.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise _translate(exc) from None


def _try_parse_float(v: object) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        f = float(v)
    else:
        s = str(v).strip()
        if s == "":
            return None
        try:
            f = float(s)
        except ValueError:
            return None
    return f if math.isfinite(f) else None


def parse_point(lat: object, lng: object) -> tuple[float, float]:
    """Validate a query point given as numbers or raw query-string values.

    Zero is treated as "not supplied", matching what the search UI sends
    when it has no location yet.
    """
    lat_v = _try_parse_float(lat)
    lng_v = _try_parse_float(lng)
    if not lat_v or not lng_v:
        raise ValidationError("Latitude and longitude are required", field="coordinates")
    if not -90 <= lat_v <= 90:
        raise ValidationError("Latitude must be between -90 and 90", field="coordinates")
    if not -180 <= lng_v <= 180:
        raise ValidationError("Longitude must be between -180 and 180", field="coordinates")
    return lat_v, lng_v


def parse_radius(radius: object, default: float) -> float:
    if radius is None or (isinstance(radius, str) and not radius.strip()):
        return float(default)
    r = _try_parse_float(radius)
    if r is None or r <= 0:
        raise ValidationError("Invalid radius: must be a positive number", field="radius")
    return r
