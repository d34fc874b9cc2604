from typing import Any, Dict

from langchain_core.prompts import ChatPromptTemplate

from ziroplans.config import settings
from ziroplans.schemas.trip_schema import TripRequest


SYSTEM_INSTRUCTION = (
    "You are a precise travel planning AI that outputs only valid JSON. "
    "Never include markdown formatting, code blocks, or explanations outside the JSON."
)

# Field names and nesting must match ziroplans.models.itinerary_models.
OUTPUT_SCHEMA = """{
  "origin": "string",
  "destination": "string",
  "startDate": "YYYY-MM-DD",
  "endDate": "YYYY-MM-DD",
  "totalDays": number,
  "travelStyle": "string",
  "numberOfTravelers": number,
  "estimatedTotalBudget": number,
  "itinerary": [
    {
      "dayNumber": number,
      "date": "YYYY-MM-DD",
      "theme": "string",
      "timeSlots": [
        {
          "time": "HH:MM AM/PM",
          "placeName": "string",
          "description": "string",
          "estimatedDuration": "string",
          "estimatedCost": number,
          "latitude": number,
          "longitude": number,
          "googleMapsLink": "",
          "travelTimeFromPrevious": "string",
          "category": "attraction|restaurant|transport|hotel|activity"
        }
      ],
      "dailyCostEstimate": number
    }
  ],
  "budgetBreakdown": {
    "flights": number,
    "accommodation": number,
    "food": number,
    "localTransport": number,
    "entryTickets": number,
    "miscellaneous": number,
    "total": number
  },
  "routeOptimization": {
    "clusteringStrategy": "string (2-3 sentences explaining how places are clustered by area/neighborhood)",
    "distanceMatrixUsage": "string (2-3 sentences on how a distance matrix gives travel times between all point pairs)",
    "visitOrderOptimization": "string (2-3 sentences on the nearest-neighbor ordering of visits)",
    "totalOptimizedDistance": "string (e.g., '45 km across all days')"
  }
}"""

USER_TEMPLATE = """You are an expert travel planner AI. Generate a detailed, day-by-day travel itinerary for the following trip:

**Origin (Traveling From):** {origin}
**Destination:** {destination}
**Start Date:** {start_date}
**End Date:** {end_date}
**Total Days:** {total_days}
**Budget:** {currency_symbol}{budget} {currency_code} (total for all travelers)
**Travel Style:** {travel_style}
**Number of Travelers:** {number_of_travelers}

Generate a structured JSON response with the following requirements:

1. **Flight/Travel Details**: Include realistic flight or travel options from {origin} to {destination}:
   - Suggested airlines/transport modes (flight, train, bus)
   - Approximate travel duration
   - Estimated cost per person in {currency_code}
   - Include both outbound and return journeys in the itinerary

2. **Accommodation/Stay Details**: Recommend places to stay matching the "{travel_style}" style:
   - Hotel/hostel/resort name (real places)
   - Nightly rate estimate
   - Location and proximity to attractions

3. **Day-wise Itinerary**: Exactly {total_days} days, numbered 1 to {total_days}, dated {start_date} to {end_date}. For each day, provide 4-6 time slots with:
   - Specific time (e.g. "09:00 AM")
   - Real place name (actual attractions, restaurants, etc.)
   - Short description (1-2 sentences)
   - Estimated visit duration
   - Estimated cost per person in {currency_code}
   - Latitude and longitude coordinates
   - Category: attraction, restaurant, transport, hotel, or activity
   - Travel time from previous location

4. **Adventures & Activities**: Include unique experiences:
   - Local tours, adventure sports, cultural workshops
   - Food/market tours, nightlife, hidden gems
   - Nature excursions, water sports, hiking (if applicable)

5. **Budget Breakdown**: Provide realistic estimates for:
   - Flights/travel to & from destination (total for all travelers)
   - Accommodation (total for all days)
   - Food & dining (total)
   - Local transport (total)
   - Entry tickets (total)
   - Miscellaneous buffer (~10% of total)
   - Total equal to the sum of the six categories

6. **Route Optimization**: Explain:
   - How places are clustered by geographic proximity
   - How a distance matrix would optimize travel routes
   - How visit order is determined (nearest-neighbor heuristic)
   - Total optimized distance estimate

7. **Theme** each day (e.g., "Arrival & City Welcome", "Historical Old Town", "Adventure Day", "Beach & Relaxation", "Departure")

IMPORTANT:
- Day 1 must start with arrival from {origin} to {destination}
- The last day must include departure/return journey
- All costs must be in {currency_code} ({currency_symbol}) and realistic for the {travel_style} travel style
- Total budget breakdown should be close to {currency_symbol}{budget} {currency_code}
- Places must be real and exist at the destination
- Coordinates must be accurate
- Order places to minimize travel time within each day
- Consider opening hours and practicality

Respond ONLY with valid JSON matching this exact schema:
{output_schema}"""

itinerary_prompt = ChatPromptTemplate.from_messages(
    [
        ("system", SYSTEM_INSTRUCTION),
        ("human", USER_TEMPLATE),
    ]
)


def _format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


def build_prompt_inputs(request: TripRequest) -> Dict[str, Any]:
    """Template variables for `itinerary_prompt`; same request in, same dict out."""
    return {
        "origin": request.origin,
        "destination": request.destination,
        "start_date": request.start_date.isoformat(),
        "end_date": request.end_date.isoformat(),
        "total_days": request.total_days,
        "budget": _format_amount(request.budget),
        "currency_code": settings.CURRENCY_CODE,
        "currency_symbol": settings.CURRENCY_SYMBOL,
        "travel_style": request.travel_style,
        "number_of_travelers": request.number_of_travelers,
        "output_schema": OUTPUT_SCHEMA,
    }


def render_prompt(request: TripRequest) -> str:
    """The human-turn instruction block exactly as the model receives it."""
    messages = itinerary_prompt.format_messages(**build_prompt_inputs(request))
    return messages[-1].content
