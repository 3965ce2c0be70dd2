"""Address lookups against a Nominatim server.

Used by the reporting form to turn an address into coordinates and the
reporter's position into an address. Nothing here is on the ingest path.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from parkboard.config import Settings, settings as default_settings
from parkboard.errors import GeocodingError

logger = logging.getLogger(__name__)


def _format_subtitle(item: dict[str, Any]) -> str:
    addr = item.get("address") or {}
    house = (addr.get("house_number") or "").strip()
    road = (addr.get("road") or addr.get("pedestrian") or addr.get("footway") or "").strip()
    city = (addr.get("city") or addr.get("town") or addr.get("village") or "").strip()
    postcode = (addr.get("postcode") or "").strip()

    street = " ".join([p for p in [house, road] if p])
    parts = [p for p in [street, city, postcode] if p]
    if parts:
        return ", ".join(parts)

    display = (item.get("display_name") or "").strip()
    if display:
        # first 2 segments
        seg = [s.strip() for s in display.split(",") if s.strip()]
        return ", ".join(seg[:2])
    return ""


def _get(path: str, params: dict[str, Any], settings: Settings) -> Any:
    url = f"{settings.geocoder_url.rstrip('/')}/{path}"
    headers = {"User-Agent": settings.geocoder_user_agent}
    try:
        r = requests.get(url, params=params, headers=headers, timeout=settings.geocoder_timeout_s)
        r.raise_for_status()
        return r.json()
    except (requests.RequestException, ValueError) as e:
        logger.exception("Geocoder request to %s failed", url)
        raise GeocodingError("Address lookup failed") from e


def search_places(
    q: str,
    limit: int = 5,
    bounds: Optional[dict[str, float]] = None,
    settings: Settings = default_settings,
) -> list[dict[str, Any]]:
    q = (q or "").strip()
    if not q:
        return []

    limit = max(1, min(50, limit))
    params: dict[str, Any] = {
        "format": "jsonv2",
        "q": q,
        "limit": str(limit),
        "addressdetails": 1,
    }
    if bounds and None not in (
        bounds.get("min_lat"), bounds.get("min_lng"), bounds.get("max_lat"), bounds.get("max_lng")
    ):
        params["viewbox"] = f"{bounds['min_lng']},{bounds['max_lat']},{bounds['max_lng']},{bounds['min_lat']}"
        params["bounded"] = 1

    data = _get("search", params, settings)
    if not isinstance(data, list):
        return []

    out: list[dict[str, Any]] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            lat_v = float(item.get("lat"))
            lng_v = float(item.get("lon"))
        except (TypeError, ValueError):
            continue

        name = (item.get("name") or "").strip()
        display = (item.get("display_name") or "").strip()
        label = name or (display.split(",")[0].strip() if display else q)

        out.append(
            {
                "id": str(item.get("place_id") or item.get("osm_id") or label),
                "label": label,
                "subtitle": _format_subtitle(item),
                "address": display or label,
                "lat": lat_v,
                "lng": lng_v,
            }
        )
    return out


def reverse_geocode(
    lat: float,
    lng: float,
    settings: Settings = default_settings,
) -> Optional[dict[str, Any]]:
    """Best address for a point, or None when the geocoder knows nothing there."""
    params = {"format": "jsonv2", "lat": lat, "lon": lng, "addressdetails": 1}
    data = _get("reverse", params, settings)
    if not isinstance(data, dict) or "error" in data:
        return None

    display = (data.get("display_name") or "").strip()
    if not display:
        return None
    return {
        "label": (data.get("name") or "").strip() or display.split(",")[0].strip(),
        "subtitle": _format_subtitle(data),
        "address": display,
        "lat": lat,
        "lng": lng,
    }
