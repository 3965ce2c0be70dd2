"""Database-backed report store: one row per report document."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import DateTime, Float, Integer, String, create_engine, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from parkboard.errors import StorageError
from parkboard.models import Coordinates, ParkingReport
from parkboard.store import ReportStore

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class ReportDocument(Base):
    __tablename__ = "reported_parking"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    location_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    spot_count: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    reported_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")

    @classmethod
    def from_report(cls, report: ParkingReport) -> "ReportDocument":
        return cls(
            id=report.id,
            location_kind=report.location_kind.value,
            spot_count=report.spot_count,
            address=report.address,
            lat=report.coordinates.lat,
            lng=report.coordinates.lng,
            reported_at=report.reported_at,
            status=report.status.value,
        )

    def to_report(self) -> ParkingReport:
        reported_at = self.reported_at
        # SQLite hands timestamps back without tzinfo.
        if reported_at.tzinfo is None:
            reported_at = reported_at.replace(tzinfo=timezone.utc)
        return ParkingReport(
            id=self.id,
            location_kind=self.location_kind,
            spot_count=self.spot_count,
            address=self.address,
            coordinates=Coordinates(lat=self.lat, lng=self.lng),
            reported_at=reported_at.astimezone(timezone.utc),
            status=self.status,
        )

    def __repr__(self) -> str:
        return f"<ReportDocument(id={self.id}, status={self.status})>"


def _engine_options(url: str, timeout_s: float) -> dict[str, Any]:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {"pool_timeout": timeout_s}

    options: dict[str, Any] = {
        "connect_args": {"timeout": timeout_s, "check_same_thread": False},
    }
    database = parsed.database
    if not database or database == ":memory:":
        options["poolclass"] = StaticPool
    else:
        directory = os.path.dirname(os.path.abspath(database))
        os.makedirs(directory, exist_ok=True)
    return options


class DocumentStore(ReportStore):
    name = "document"

    def __init__(self, url: str, timeout_s: float = 5.0, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        try:
            self.engine = create_engine(url, **_engine_options(url, timeout_s))
            Base.metadata.create_all(self.engine)
        except (SQLAlchemyError, OSError) as e:
            logger.exception("Failed to open report database")
            raise StorageError("Failed to open parking report storage") from e
        self._sessions = sessionmaker(self.engine, expire_on_commit=False)

    def _insert(self, report: ParkingReport) -> None:
        try:
            with self._sessions.begin() as session:
                session.add(ReportDocument.from_report(report))
        except SQLAlchemyError as e:
            logger.exception("Failed to insert report %s", report.id)
            raise StorageError("Failed to save parking report") from e

    def _scan(self) -> list[ParkingReport]:
        try:
            with self._sessions() as session:
                rows = session.scalars(select(ReportDocument)).all()
        except SQLAlchemyError as e:
            logger.exception("Failed to scan reports")
            raise StorageError("Failed to read parking reports") from e

        reports: list[ParkingReport] = []
        for row in rows:
            try:
                reports.append(row.to_report())
            except PydanticValidationError:
                logger.warning("Skipping unreadable report row %s", row.id)
        return reports

    def dispose(self) -> None:
        self.engine.dispose()
