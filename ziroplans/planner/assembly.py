import random
import string
from datetime import datetime, timezone
from typing import List, Optional

from ziroplans.models.itinerary_models import Advisory, GeneratedPlan, TripPlan
from ziroplans.schemas.trip_schema import TripRequest


ID_ALPHABET = string.ascii_lowercase + string.digits
ID_SEGMENTS = (8, 4, 4)


def generate_trip_id(rng: Optional[random.Random] = None) -> str:
    """
    e.g. `a1b2c3d4-e5f6-g7h8`. Not cryptographically unique and never checked
    against the store; a collision is an accepted risk.
    """
    rng = rng or random
    return "-".join("".join(rng.choices(ID_ALPHABET, k=n)) for n in ID_SEGMENTS)


def assemble_trip_plan(
    request: TripRequest,
    plan: GeneratedPlan,
    user_id: str,
    advisories: Optional[List[Advisory]] = None,
    trip_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> TripPlan:
    """Stamp the validated, enriched plan with identity and the request's own fields."""
    return TripPlan(
        id=trip_id or generate_trip_id(),
        user_id=user_id,
        origin=request.origin,
        destination=request.destination,
        start_date=request.start_date,
        end_date=request.end_date,
        total_days=request.total_days,
        travel_style=request.travel_style,
        number_of_travelers=request.number_of_travelers,
        estimated_total_budget=plan.estimated_total_budget,
        itinerary=plan.itinerary,
        budget_breakdown=plan.budget_breakdown,
        route_optimization=plan.route_optimization,
        advisories=list(advisories or []),
        created_at=created_at or datetime.now(timezone.utc),
    )
