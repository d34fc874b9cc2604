from typing import List, TypeVar

from ziroplans.models.itinerary_models import DayItinerary, GeneratedPlan, TimeSlot


PIN_LINK = "https://www.google.com/maps/search/?api=1&query={lat},{lng}"
DIRECTIONS_LINK = (
    "https://www.google.com/maps/dir/?api=1"
    "&origin={origin_lat},{origin_lng}"
    "&destination={dest_lat},{dest_lng}"
    "&travelmode={mode}"
)
TRAVEL_MODE = "driving"

PlanT = TypeVar("PlanT", bound=GeneratedPlan)


def format_coordinate(value: float) -> str:
    """Shortest round-trip repr, without a trailing `.0` (15.0 -> "15")."""
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def pin_link(slot: TimeSlot) -> str:
    return PIN_LINK.format(
        lat=format_coordinate(slot.latitude),
        lng=format_coordinate(slot.longitude),
    )


def directions_link(previous: TimeSlot, slot: TimeSlot, mode: str = TRAVEL_MODE) -> str:
    return DIRECTIONS_LINK.format(
        origin_lat=format_coordinate(previous.latitude),
        origin_lng=format_coordinate(previous.longitude),
        dest_lat=format_coordinate(slot.latitude),
        dest_lng=format_coordinate(slot.longitude),
        mode=mode,
    )


def _enrich_day(day: DayItinerary) -> DayItinerary:
    slots: List[TimeSlot] = []
    for index, slot in enumerate(day.time_slots):
        if index == 0:
            link = pin_link(slot)
        else:
            # transport slots keep the generator's travel-time text as-is
            link = directions_link(day.time_slots[index - 1], slot)
        slots.append(slot.model_copy(update={"google_maps_link": link}))
    return day.model_copy(update={"time_slots": slots})


def enrich_with_map_links(plan: PlanT) -> PlanT:
    """
    Rewrite every slot's googleMapsLink from coordinates alone.

    First slot of a day -> location pin; later slots -> driving directions
    from the previous slot. Links depend only on coordinates, so running
    this twice gives the same result. Returns a new plan.
    """
    return plan.model_copy(update={"itinerary": [_enrich_day(d) for d in plan.itinerary]})
