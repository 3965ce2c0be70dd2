"""
Parkboard: FastAPI entry point

Start with:  uvicorn parkboard.main:app --reload
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from parkboard.config import Settings, settings as default_settings
from parkboard.errors import GeocodingError, StorageError, ValidationError
from parkboard.geocoding import reverse_geocode, search_places
from parkboard.models import SearchResponse, parse_point
from parkboard.services import AvailabilityIndex, ingest_report
from parkboard.store import ReportStore, build_store

logging.basicConfig(
    level=default_settings.log_level.upper(),
    format="%(levelname)s: %(name)s — %(message)s",
)


def create_app(settings: Optional[Settings] = None, store: Optional[ReportStore] = None) -> FastAPI:
    settings = settings or default_settings
    store = store if store is not None else build_store(settings)
    index = AvailabilityIndex(
        store,
        unit=settings.distance_unit,
        default_radius=settings.default_radius,
        limit=settings.result_limit,
    )

    app = FastAPI(title="Parkboard API", version="0.1.0")
    app.state.settings = settings
    app.state.store = store
    app.state.index = index

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": exc.message, "field": exc.field})

    @app.exception_handler(RequestValidationError)
    async def handle_request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": "Malformed request", "field": "body"})

    @app.exception_handler(GeocodingError)
    async def handle_geocoding_error(request: Request, exc: GeocodingError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"message": exc.message})

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "backend": store.name,
            "unit": index.unit.value,
            "default_radius": index.default_radius,
        }

    @app.post("/api/parking/report", status_code=201)
    def report_parking(payload: Any = Body(default=None)) -> Any:
        """
        Report open curb spots.

        - **location_kind**: "current" or "other"
        - **spot_count**: number of open spots (at least 1)
        - **address**: free-text address
        - **coordinates**: {"lat": ..., "lng": ...}
        """
        try:
            report = ingest_report(store, payload)
        except StorageError:
            return JSONResponse(status_code=500, content={"message": "Failed to report parking spot"})
        return {
            "message": "Parking spot reported successfully",
            "report": report.model_dump(mode="json"),
        }

    @app.get("/api/parking/search", response_model=SearchResponse)
    def search_parking(
        lat: Optional[str] = None,
        lng: Optional[str] = None,
        radius: Optional[str] = None,
    ) -> Any:
        """
        Open spots near a point, freshest report first.

        - **lat, lng**: Center point coordinates (required)
        - **radius**: Optional maximum distance, in the configured unit
        """
        try:
            return index.search(lat, lng, radius)
        except StorageError:
            return JSONResponse(status_code=500, content={"message": "Failed to search parking spots"})

    @app.get("/api/geocode/search")
    def geocode_search(
        q: str = "",
        limit: int = 5,
        min_lat: Optional[float] = None,
        min_lng: Optional[float] = None,
        max_lat: Optional[float] = None,
        max_lng: Optional[float] = None,
    ) -> list[dict[str, Any]]:
        """
        Address candidates for the reporting form.

        - **min_lat, min_lng, max_lat, max_lng**: Optional box to keep results in (all four or none)
        """
        bounds = None
        if None not in (min_lat, min_lng, max_lat, max_lng):
            bounds = {"min_lat": min_lat, "min_lng": min_lng, "max_lat": max_lat, "max_lng": max_lng}
        return search_places(q, limit=limit, bounds=bounds, settings=settings)

    @app.get("/api/geocode/reverse")
    def geocode_reverse(lat: Optional[str] = None, lng: Optional[str] = None) -> Any:
        lat_v, lng_v = parse_point(lat, lng)
        place = reverse_geocode(lat_v, lng_v, settings=settings)
        if place is None:
            return JSONResponse(status_code=404, content={"message": "No address found for this location"})
        return place

    return app


app = create_app()
