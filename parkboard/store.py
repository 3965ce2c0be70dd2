"""Report stores.

A store owns the report collection and offers exactly two capabilities:
``append`` and ``scan_active``. Ranking and radius filtering live in the
availability index, so a backend only has to insert a record and hand back
every record it holds.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from parkboard.config import Settings
from parkboard.data_loader import dump_reports, load_reports_from_file, read_rows
from parkboard.errors import StorageError
from parkboard.models import ParkingReport, ReportDraft, ReportStatus, parse_draft

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_report_id() -> str:
    return uuid.uuid4().hex


class ReportStore(ABC):
    name = "abstract"

    def __init__(
        self,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_report_id,
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory

    def append(self, draft: ReportDraft | Mapping[str, Any]) -> ParkingReport:
        """Validate ``draft`` and persist it as a new active report.

        Raises ValidationError before anything is written, StorageError if
        the write fails. A failed write leaves the store unchanged.
        """
        draft = parse_draft(draft)
        report = ParkingReport(
            id=self._id_factory(),
            location_kind=draft.location_kind,
            spot_count=draft.spot_count,
            address=draft.address,
            coordinates=draft.coordinates,
            reported_at=self._clock(),
            status=ReportStatus.ACTIVE,
        )
        self._insert(report)
        return report

    def scan_active(self) -> list[ParkingReport]:
        return [r for r in self._scan() if r.status == ReportStatus.ACTIVE]

    @abstractmethod
    def _insert(self, report: ParkingReport) -> None:
        ...

    @abstractmethod
    def _scan(self) -> list[ParkingReport]:
        """Every stored record, in store order, as one consistent snapshot."""


class JsonLogStore(ReportStore):
    """All reports in a single JSON array, rewritten in full on each append.

    The rewrite goes to a temporary file that replaces the log in one
    ``os.replace``, so readers see either the old or the new array.
    """

    name = "json"

    def __init__(self, path: str, timeout_s: float = 5.0, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.path = path
        self.timeout_s = timeout_s
        self._write_lock = threading.Lock()

    def _scan(self) -> list[ParkingReport]:
        try:
            return load_reports_from_file(self.path).reports
        except (OSError, ValueError) as e:
            logger.exception("Failed to read report log %s", self.path)
            raise StorageError("Failed to read parking reports") from e

    def _insert(self, report: ParkingReport) -> None:
        if not self._write_lock.acquire(timeout=self.timeout_s):
            raise StorageError("Timed out waiting to save parking report")
        try:
            try:
                rows = read_rows(self.path)
            except (OSError, ValueError) as e:
                logger.exception("Failed to read report log %s", self.path)
                raise StorageError("Failed to save parking report") from e
            # Rows are carried over untouched, including ones _scan skips.
            rows.extend(dump_reports([report]))
            self._replace(rows)
        finally:
            self._write_lock.release()

    def _replace(self, rows: list[Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path: str | None = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".reports-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(rows, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.exception("Failed to write report log %s", self.path)
            raise StorageError("Failed to save parking report") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)


def build_store(settings: Settings) -> ReportStore:
    if settings.store_backend == "document":
        from parkboard.document_store import DocumentStore

        return DocumentStore(settings.database_url, timeout_s=settings.storage_timeout_s)
    return JsonLogStore(settings.reports_path, timeout_s=settings.storage_timeout_s)
