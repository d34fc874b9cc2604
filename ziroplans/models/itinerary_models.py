import datetime as dt
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


SLOT_CATEGORIES = ("attraction", "restaurant", "transport", "hotel", "activity")
SlotCategory = Literal["attraction", "restaurant", "transport", "hotel", "activity"]


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )


# ------------------------------------------------------------
#  Day-wise Plan
# ------------------------------------------------------------
class TimeSlot(CamelModel):
    time: str = ""
    place_name: str = Field(..., min_length=1)
    description: str = ""
    estimated_duration: str = ""
    estimated_cost: float = Field(..., ge=0)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    google_maps_link: str = ""
    travel_time_from_previous: str = ""
    category: SlotCategory

    @field_validator(
        "time", "description", "estimated_duration", "google_maps_link", "travel_time_from_previous",
        mode="before",
    )
    @classmethod
    def blank_if_none(cls, value):
        # generators emit null for text they have nothing to say about
        return "" if value is None else value


class DayItinerary(CamelModel):
    day_number: int
    date: dt.date
    theme: str = ""
    time_slots: List[TimeSlot] = Field(..., min_length=1)
    # Reconciled to the sum of slot costs by the plan validator
    daily_cost_estimate: Optional[float] = Field(default=None, ge=0)

    @field_validator("theme", mode="before")
    @classmethod
    def blank_theme(cls, value):
        return "" if value is None else value


# ------------------------------------------------------------
#  Cost Breakdown
# ------------------------------------------------------------
class BudgetBreakdown(CamelModel):
    flights: float = Field(..., ge=0)
    accommodation: float = Field(..., ge=0)
    food: float = Field(..., ge=0)
    local_transport: float = Field(..., ge=0)
    entry_tickets: float = Field(..., ge=0)
    miscellaneous: float = Field(..., ge=0)
    total: Optional[float] = None

    def parts_sum(self) -> float:
        return round(
            self.flights
            + self.accommodation
            + self.food
            + self.local_transport
            + self.entry_tickets
            + self.miscellaneous,
            2,
        )


class RouteOptimizationSummary(CamelModel):
    clustering_strategy: str = ""
    distance_matrix_usage: str = ""
    visit_order_optimization: str = ""
    total_optimized_distance: str = ""

    @field_validator(
        "clustering_strategy", "distance_matrix_usage", "visit_order_optimization", "total_optimized_distance",
        mode="before",
    )
    @classmethod
    def blank_if_none(cls, value):
        return "" if value is None else value


class Advisory(CamelModel):
    code: str
    message: str


# ------------------------------------------------------------
#  Generator output (what the model is asked to return)
# ------------------------------------------------------------
class GeneratedPlan(CamelModel):
    estimated_total_budget: Optional[float] = Field(default=None, ge=0)
    itinerary: List[DayItinerary] = Field(..., min_length=1)
    budget_breakdown: BudgetBreakdown
    route_optimization: RouteOptimizationSummary = Field(default_factory=RouteOptimizationSummary)


# ------------------------------------------------------------
#  Final persisted artifact
# ------------------------------------------------------------
class TripPlan(GeneratedPlan):
    id: str
    user_id: str
    origin: str
    destination: str
    start_date: dt.date
    end_date: dt.date
    total_days: int
    travel_style: str
    number_of_travelers: int
    advisories: List[Advisory] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
