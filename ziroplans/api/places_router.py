from typing import List

from fastapi import APIRouter, Query

from ziroplans.schemas.trip_schema import ApiResponse, PlaceSuggestion
from ziroplans.services.places_service import get_place_autocomplete

router = APIRouter(prefix="/api/places", tags=["Places"])


@router.get("/autocomplete", response_model=ApiResponse[List[PlaceSuggestion]], response_model_exclude_none=True)
async def autocomplete(query: str = Query(default="")):
    suggestions = await get_place_autocomplete(query)
    return ApiResponse[List[PlaceSuggestion]](success=True, data=suggestions)
