"""Error taxonomy shared by the store, the normalizer and the HTTP layer."""

from __future__ import annotations


class ReportError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    title = "Internal error"

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ReportError):
    """A request is missing required fields."""

    status_code = 400
    title = "Bad request"


class NotFoundError(ReportError):
    """No report exists with the requested id."""

    status_code = 404
    title = "Not found"


class SerializationError(ReportError):
    """A session document cannot be rendered as JSON text (cyclic or non-JSON values)."""

    title = "Serialization failure"


class StorageError(ReportError):
    """The reports file could not be read or written."""

    title = "Storage failure"
