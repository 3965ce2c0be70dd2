from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from parkboard.geo import DistanceUnit


class Settings(BaseModel):
    # "json" keeps every report in one flat file; "document" uses a database table.
    store_backend: str = Field(default="json", pattern="^(json|document)$")
    reports_path: str = "data/available_parking.json"
    database_url: str = "sqlite:///data/parkboard.db"

    # default_radius is expressed in distance_unit. For the 5 km variant use
    # distance_unit=km, default_radius=5.
    distance_unit: DistanceUnit = DistanceUnit.MI
    default_radius: float = Field(default=0.5, gt=0)
    result_limit: int = Field(default=10, ge=1)

    storage_timeout_s: float = Field(default=5.0, gt=0)

    geocoder_url: str = "https://nominatim.openstreetmap.org"
    geocoder_timeout_s: float = 10.0
    geocoder_user_agent: str = "Parkboard/0.1 (community parking board)"

    log_level: str = "INFO"

    # python -m backend.main
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        values: dict[str, str] = {}
        for name in cls.model_fields:
            raw = os.getenv(f"PARKBOARD_{name.upper()}", "").strip()
            if raw:
                values[name] = raw
        return cls.model_validate(values)


settings = Settings.from_env()
