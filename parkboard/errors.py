from __future__ import annotations


class ParkboardError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ParkboardError):
    """Bad or missing input. Never retried."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class StorageError(ParkboardError):
    """I/O or connectivity failure in a report store.

    The message is safe to show to users; the underlying cause is chained.
    """


class GeocodingError(ParkboardError):
    pass
