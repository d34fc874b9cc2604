import math
from datetime import date, datetime
from typing import Any, Dict, Optional

from ziroplans.errors import ValidationError
from ziroplans.schemas.trip_schema import TRAVEL_STYLES, TripRequest


MIN_BUDGET = 100
MAX_BUDGET = 10_000_000
MAX_TRAVELERS = 20
MAX_TRIP_DAYS = 30
MAX_PLACE_LENGTH = 200


def _text(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def _number(value: Any) -> Optional[float]:
    # bool is an int subclass; a checkbox value is not a budget
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    # float() accepts "NaN" and "inf"; neither is a budget
    return number if math.isfinite(number) else None


def _iso_date(payload: Dict[str, Any], key: str, label: str) -> date:
    raw = payload.get(key)
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError(key, f"{label} is required")
    raw = raw.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    # full ISO timestamps are accepted and truncated to their date
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        raise ValidationError(key, f"{label} must be a valid date (YYYY-MM-DD)")


def validate_trip_request(payload: Dict[str, Any]) -> TripRequest:
    """
    Validate raw trip-form input and build an immutable TripRequest.

    Rules run in a fixed order and the first failure wins, so the caller
    always gets exactly one message naming the offending field:
      origin -> destination -> startDate -> endDate -> date order
      -> budget -> numberOfTravelers -> travelStyle
    Range limits borrowed from the trip form come last.
    """
    if not isinstance(payload, dict):
        raise ValidationError("body", "Trip request must be a JSON object")

    origin = _text(payload, "origin")
    if len(origin) < 2:
        raise ValidationError("origin", "origin is required (at least 2 characters)")

    destination = _text(payload, "destination")
    if len(destination) < 2:
        raise ValidationError("destination", "destination is required (at least 2 characters)")

    start_date = _iso_date(payload, "startDate", "startDate")
    end_date = _iso_date(payload, "endDate", "endDate")
    if end_date < start_date:
        raise ValidationError("endDate", "endDate must be on or after startDate")

    budget = _number(payload.get("budget"))
    if budget is None or budget < MIN_BUDGET:
        raise ValidationError("budget", f"budget must be at least {MIN_BUDGET}")

    travelers = payload.get("numberOfTravelers")
    if isinstance(travelers, float) and travelers.is_integer():
        travelers = int(travelers)
    if isinstance(travelers, bool) or not isinstance(travelers, int) or travelers < 1:
        raise ValidationError("numberOfTravelers", "numberOfTravelers must be at least 1")

    travel_style = payload.get("travelStyle")
    if travel_style not in TRAVEL_STYLES:
        raise ValidationError(
            "travelStyle", f"travelStyle must be one of: {', '.join(TRAVEL_STYLES)}"
        )

    # Form-level limits
    if len(origin) > MAX_PLACE_LENGTH:
        raise ValidationError("origin", "origin is too long")
    if len(destination) > MAX_PLACE_LENGTH:
        raise ValidationError("destination", "destination is too long")
    if budget > MAX_BUDGET:
        raise ValidationError("budget", "budget seems unrealistic")
    if travelers > MAX_TRAVELERS:
        raise ValidationError("numberOfTravelers", f"numberOfTravelers cannot exceed {MAX_TRAVELERS}")
    if (end_date - start_date).days + 1 > MAX_TRIP_DAYS:
        raise ValidationError("endDate", f"trip duration cannot exceed {MAX_TRIP_DAYS} days")

    return TripRequest(
        origin=origin,
        origin_place_id=_text(payload, "originPlaceId") or None,
        destination=destination,
        destination_place_id=_text(payload, "destinationPlaceId") or None,
        start_date=start_date,
        end_date=end_date,
        budget=budget,
        travel_style=travel_style,
        number_of_travelers=travelers,
    )
