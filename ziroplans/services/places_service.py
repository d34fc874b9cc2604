import logging
from typing import List, Optional

import httpx

from ziroplans.config import settings
from ziroplans.errors import PlacesError
from ziroplans.schemas.trip_schema import PlaceSuggestion

logger = logging.getLogger(__name__)

AUTOCOMPLETE_URL = "https://maps.googleapis.com/maps/api/place/autocomplete/json"
MIN_QUERY_LENGTH = 2


async def get_place_autocomplete(
    query: str,
    client: Optional[httpx.AsyncClient] = None,
) -> List[PlaceSuggestion]:
    """
    City suggestions for the trip form. Queries shorter than two characters
    return [] without calling Google.
    """
    query = (query or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    params = {
        "input": query,
        "types": "(cities)",
        "key": settings.GOOGLE_MAPS_API_KEY,
    }
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=settings.PLACES_TIMEOUT_SECONDS)
    try:
        response = await client.get(AUTOCOMPLETE_URL, params=params)
    except httpx.HTTPError as e:
        logger.error("Google Places request failed: %s", e)
        raise PlacesError("Place autocomplete is unavailable", details=str(e)) from e
    finally:
        if owns_client:
            await client.aclose()

    if response.status_code != 200:
        raise PlacesError(f"Google Places API error: {response.status_code}")

    data = response.json()
    status = data.get("status")
    if status not in ("OK", "ZERO_RESULTS"):
        raise PlacesError(f"Google Places API status: {status}", details=data.get("error_message"))

    return [
        PlaceSuggestion(
            place_id=p["place_id"],
            description=p.get("description", ""),
            main_text=p.get("structured_formatting", {}).get("main_text", ""),
            secondary_text=p.get("structured_formatting", {}).get("secondary_text") or "",
        )
        for p in data.get("predictions") or []
    ]
