"""Domain errors raised by the incident services and mapped to HTTP responses."""

from typing import Any


class ServiceError(Exception):
    """Base class for errors that carry their own HTTP status and payload."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(ServiceError):
    """Malformed or out-of-range client input."""

    status_code = 400

    def __init__(self, field: str, message: str, allowed: list[str] | None = None):
        super().__init__(message)
        self.field = field
        self.allowed = allowed

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"message": self.message, "field": self.field}
        if self.allowed is not None:
            payload["allowed"] = self.allowed
        return payload


class BadIdentifierError(ServiceError):
    """Identifier whose syntax can never match a stored incident."""

    status_code = 400
    message = "Invalid incident ID format"

    def __init__(self, identifier: str):
        super().__init__()
        self.identifier = identifier

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message, "incidentId": self.identifier}


class NotFoundError(ServiceError):
    """Well-formed identifier with no matching incident."""

    status_code = 404
    message = "Incident not found"

    def __init__(self, identifier: str):
        super().__init__()
        self.identifier = identifier

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message, "incidentId": self.identifier}


class StoreUnavailableError(ServiceError):
    """The database could not be reached or did not answer in time."""

    status_code = 503
    message = "Incident store unavailable, please retry"
    retry_after_seconds = 5

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message, "retryable": True}


class GeocodingError(Exception):
    """Reverse geocoding provider failure. Never fatal to ingestion."""

    pass
