import copy
import json
from datetime import date, timedelta

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from ziroplans.planner.input_validator import validate_trip_request


GOA_PAYLOAD = {
    "origin": "Mumbai",
    "originPlaceId": "ChIJwe1EZjDG5zsRaYxkjY_tpF0",
    "destination": "Goa",
    "destinationPlaceId": "ChIJQbc2YxC6vzsRkkDzYv-H-Oo",
    "startDate": "2025-06-01",
    "endDate": "2025-06-03",
    "budget": 15000,
    "travelStyle": "family",
    "numberOfTravelers": 2,
}

_SLOT_TIMES = ["09:00 AM", "11:00 AM", "01:00 PM", "03:00 PM", "05:00 PM", "07:00 PM"]

# (placeName, category, cost, lat, lng)
_GOA_DAYS = [
    [
        ("Dabolim Airport", "transport", 0, 15.3808, 73.8314),
        ("Taj Holiday Village", "hotel", 0, 15.5, 73.7667),
        ("Calangute Beach", "attraction", 0, 15.5439, 73.7553),
        ("Britto's", "restaurant", 1200, 15.5553, 73.7517),
    ],
    [
        ("Basilica of Bom Jesus", "attraction", 0, 15.5009, 73.9116),
        ("Se Cathedral", "attraction", 0, 15.5036, 73.9123),
        ("Fontainhas Heritage Walk", "activity", 800, 15.4989, 73.8278),
        ("Ritz Classic", "restaurant", 900, 15.4989, 73.8247),
        ("Mandovi River Cruise", "activity", 600, 15.5, 73.8),
    ],
    [
        ("Fort Aguada", "attraction", 0, 15.4924, 73.7736),
        ("Gunpowder", "restaurant", 1000, 15.5735, 73.7419),
        ("Anjuna Flea Market", "activity", 500, 15.5733, 73.7408),
        ("Dabolim Airport", "transport", 0, 15.3808, 73.8314),
    ],
]


def build_plan_document(start: date = date(2025, 6, 1), days=None):
    days = days if days is not None else _GOA_DAYS
    itinerary = []
    for index, slots in enumerate(days):
        time_slots = [
            {
                "time": _SLOT_TIMES[n],
                "placeName": name,
                "description": f"Visit {name}.",
                "estimatedDuration": "1-2 hours",
                "estimatedCost": cost,
                "latitude": lat,
                "longitude": lng,
                "googleMapsLink": "",
                "travelTimeFromPrevious": "" if n == 0 else "15 mins",
                "category": category,
            }
            for n, (name, category, cost, lat, lng) in enumerate(slots)
        ]
        itinerary.append({
            "dayNumber": index + 1,
            "date": (start + timedelta(days=index)).isoformat(),
            "theme": ["Arrival & Beaches", "Old Goa Heritage", "Forts & Departure"][index % 3],
            "timeSlots": time_slots,
            "dailyCostEstimate": sum(s["estimatedCost"] for s in time_slots),
        })

    return {
        "origin": "Mumbai",
        "destination": "Goa",
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(days=len(days) - 1)).isoformat(),
        "totalDays": len(days),
        "travelStyle": "family",
        "numberOfTravelers": 2,
        "estimatedTotalBudget": 15000,
        "itinerary": itinerary,
        "budgetBreakdown": {
            "flights": 6000,
            "accommodation": 4500,
            "food": 2000,
            "localTransport": 1000,
            "entryTickets": 500,
            "miscellaneous": 1000,
            "total": 15000,
        },
        "routeOptimization": {
            "clusteringStrategy": "North Goa beaches on day 1, Old Goa and Panaji on day 2.",
            "distanceMatrixUsage": "Travel times between all stops were compared pairwise.",
            "visitOrderOptimization": "Each next stop is the nearest unvisited one.",
            "totalOptimizedDistance": "95 km across all days",
        },
    }


@pytest.fixture
def goa_payload():
    return copy.deepcopy(GOA_PAYLOAD)


@pytest.fixture
def goa_request():
    return validate_trip_request(copy.deepcopy(GOA_PAYLOAD))


@pytest.fixture
def plan_document():
    return build_plan_document()


@pytest.fixture
def plan_factory():
    return build_plan_document


@pytest.fixture
def fake_model(plan_document):
    """Chat model that answers the itinerary prompt with the Goa plan."""
    return FakeListChatModel(responses=[json.dumps(plan_document)])
