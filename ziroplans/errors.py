# -------------------------------------------------------------
# Error taxonomy shared by every pipeline stage
# -------------------------------------------------------------
from typing import Optional


class TripPlannerError(Exception):
    """Base class: carries the envelope code and HTTP status for the API layer."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(TripPlannerError):
    """Bad trip input. Caller's fault, never retried."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message, details=f"field: {field}")
        self.field = field


class AuthenticationError(TripPlannerError):
    code = "UNAUTHORIZED"
    status_code = 401


class NotFoundError(TripPlannerError):
    code = "NOT_FOUND"
    status_code = 404


class GenerationError(TripPlannerError):
    """Transport or provider failure while calling the generative model."""

    code = "GENERATION_ERROR"


class MalformedOutputError(TripPlannerError):
    """Generator output is not JSON, even after fence stripping."""

    code = "MALFORMED_OUTPUT"
    RAW_PREVIEW_CHARS = 500

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = (raw_text or "")[: self.RAW_PREVIEW_CHARS]
        super().__init__(message, details=self.raw_text or None)


class SchemaViolationError(TripPlannerError):
    """Parsed JSON does not conform to the itinerary shape."""

    code = "SCHEMA_VIOLATION"

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}", details=f"path: {path}")
        self.path = path


class StoreError(TripPlannerError):
    code = "DB_ERROR"


class PlacesError(TripPlannerError):
    code = "PLACES_ERROR"
