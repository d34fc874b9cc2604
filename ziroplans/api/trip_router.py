from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Header
from langchain_core.language_models import BaseChatModel

from ziroplans.db.trip_store import TripStore, get_trip_store
from ziroplans.errors import NotFoundError
from ziroplans.models.itinerary_models import TripPlan
from ziroplans.schemas.trip_schema import ApiResponse, DeletedTrip, SavedTrip
from ziroplans.services.auth_service import resolve_user_id
from ziroplans.services.itinerary_service import generate_trip

router = APIRouter(prefix="/api/trips", tags=["Trips"])


async def current_user(authorization: Optional[str] = Header(default=None)) -> str:
    return await resolve_user_id(authorization)


def trip_store() -> TripStore:
    return get_trip_store()


def generation_model() -> Optional[BaseChatModel]:
    """None means: build the configured Gemini model per request."""
    return None


@router.post(
    "/generate",
    status_code=201,
    response_model=ApiResponse[TripPlan],
    response_model_exclude_none=True,
)
async def create_trip(
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(current_user),
    store: TripStore = Depends(trip_store),
    model: Optional[BaseChatModel] = Depends(generation_model),
):
    """
    Generate an AI itinerary for the submitted trip form.
    Validation -> Gemini -> plan validation/repair -> map links -> store.
    """
    trip = await generate_trip(payload, user_id, model=model, store=store)
    return ApiResponse[TripPlan](success=True, data=trip)


@router.post("", status_code=201, response_model=ApiResponse[SavedTrip], response_model_exclude_none=True)
async def save_trip(trip: TripPlan, store: TripStore = Depends(trip_store)):
    saved = await store.save(trip)
    return ApiResponse[SavedTrip](success=True, data=SavedTrip(id=saved.id))


@router.get("", response_model=ApiResponse[List[TripPlan]], response_model_exclude_none=True)
async def list_trips(user_id: str = Depends(current_user), store: TripStore = Depends(trip_store)):
    trips = await store.list_for_user(user_id)
    return ApiResponse[List[TripPlan]](success=True, data=trips)


@router.get("/{trip_id}", response_model=ApiResponse[TripPlan], response_model_exclude_none=True)
async def get_trip(trip_id: str, store: TripStore = Depends(trip_store)):
    trip = await store.get(trip_id)
    if trip is None:
        raise NotFoundError("Trip not found")
    return ApiResponse[TripPlan](success=True, data=trip)


@router.delete("/{trip_id}", response_model=ApiResponse[DeletedTrip], response_model_exclude_none=True)
async def delete_trip(
    trip_id: str,
    user_id: str = Depends(current_user),
    store: TripStore = Depends(trip_store),
):
    if not await store.delete(trip_id, user_id):
        raise NotFoundError("Trip not found")
    return ApiResponse[DeletedTrip](success=True, data=DeletedTrip(id=trip_id, deleted=True))
