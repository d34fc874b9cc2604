from datetime import date
from typing import Any, Generic, List, Literal, Optional, TypeVar
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


TRAVEL_STYLES = ("luxury", "backpacking", "family", "romantic", "adventure", "spiritual")
TravelStyle = Literal["luxury", "backpacking", "family", "romantic", "adventure", "spiritual"]

T = TypeVar("T")


# ============================================================
# 🎒 Trip Request (validated input, immutable)
# ============================================================
class TripRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    origin: str
    origin_place_id: Optional[str] = None
    destination: str
    destination_place_id: Optional[str] = None
    start_date: date
    end_date: date
    budget: float
    travel_style: TravelStyle
    number_of_travelers: int

    @property
    def total_days(self) -> int:
        """Inclusive day count between start and end date."""
        return (self.end_date - self.start_date).days + 1


# ============================================================
# 📍 Place autocomplete
# ============================================================
class PlaceSuggestion(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    place_id: str
    description: str
    main_text: str
    secondary_text: str = ""


# ============================================================
# 📦 API envelope
# ============================================================
class ApiError(BaseModel):
    code: str
    message: str
    details: Optional[str] = None


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[ApiError] = None


class SavedTrip(BaseModel):
    id: str


class DeletedTrip(BaseModel):
    id: str
    deleted: bool


class HealthStatus(BaseModel):
    status: str = "ok"


def error_body(code: str, message: str, details: Optional[Any] = None) -> dict:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = str(details)
    return {"success": False, "error": error}
