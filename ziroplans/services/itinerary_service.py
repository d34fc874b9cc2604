import logging
from typing import Any, Dict, Optional

from langchain_core.language_models import BaseChatModel

from ziroplans.config import settings
from ziroplans.db.trip_store import TripStore, get_trip_store
from ziroplans.llm.itinerary_chain import generate_itinerary_text
from ziroplans.models.itinerary_models import TripPlan
from ziroplans.planner.assembly import assemble_trip_plan
from ziroplans.planner.geo_enrichment import enrich_with_map_links
from ziroplans.planner.input_validator import validate_trip_request
from ziroplans.planner.plan_validator import parse_generator_output, validate_plan

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# 🚀 Core Service: Trip Generation Pipeline
# ------------------------------------------------------------------
async def generate_trip(
    payload: Dict[str, Any],
    user_id: str,
    model: Optional[BaseChatModel] = None,
    store: Optional[TripStore] = None,
    persist: Optional[bool] = None,
) -> TripPlan:
    """
    Run one trip request through the pipeline, strictly in order:

      validate input -> build prompt + call generator -> parse + validate
      + repair -> map links -> assemble -> (optionally) upsert to the store

    Every stage raises a TripPlannerError subclass on a hard failure; nothing
    is retried and nothing is written unless every earlier stage succeeded.
    """
    request = validate_trip_request(payload)
    logger.info(
        "Generating %d-day %s trip %s -> %s for %s",
        request.total_days, request.travel_style, request.origin, request.destination, user_id,
    )

    raw_text = await generate_itinerary_text(request, model=model)

    document = parse_generator_output(raw_text)
    validated = validate_plan(document, request)
    enriched = enrich_with_map_links(validated.plan)

    trip = assemble_trip_plan(request, enriched, user_id=user_id, advisories=validated.advisories)
    logger.info("Assembled trip %s (%d advisories)", trip.id, len(trip.advisories))

    if settings.PERSIST_TRIPS if persist is None else persist:
        trip = await (store or get_trip_store()).save(trip)

    return trip
