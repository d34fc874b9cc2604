"""
Plan Validator / Repairer

The generator is an untrusted producer. This module is the only place its
output is allowed in, and it does exactly three things:

  1. parse   - strip one wrapping code fence, then json.loads
  2. check   - hard structural invariants, raised as SchemaViolationError
  3. repair  - recompute derivable sums and default descriptive strings

It never invents itinerary content. Soft expectations (budget close to the
request, 4-6 slots a day, a filled-in route summary) become advisories on
the result instead of failures.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from ziroplans.config import settings
from ziroplans.errors import MalformedOutputError, SchemaViolationError
from ziroplans.models.itinerary_models import Advisory, DayItinerary, GeneratedPlan
from ziroplans.schemas.trip_schema import TripRequest

logger = logging.getLogger(__name__)

MIN_SLOTS_PER_DAY = 4
MAX_SLOTS_PER_DAY = 6

_FENCE_RE = re.compile(r"^\s*```[A-Za-z0-9_-]*[ \t]*\r?\n?(.*?)\r?\n?[ \t]*```\s*$", re.DOTALL)


@dataclass
class ValidatedPlan:
    plan: GeneratedPlan
    advisories: List[Advisory] = field(default_factory=list)


# ------------------------------------------------------------
# Parsing
# ------------------------------------------------------------
def strip_code_fence(text: str) -> str:
    """Remove a single ```lang ... ``` wrapper; anything else is left untouched."""
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


def parse_generator_output(raw: str) -> Dict[str, Any]:
    if not raw or not raw.strip():
        raise MalformedOutputError("Generator output is empty", raw_text=raw or "")

    text = strip_code_fence(raw).strip()
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Unparseable generator output (first 200 chars): %r", raw[:200])
        raise MalformedOutputError(
            f"Generator output is not valid JSON: {e.msg} at line {e.lineno} column {e.colno}",
            raw_text=raw,
        ) from e

    if not isinstance(document, dict):
        raise MalformedOutputError("Generator output must be a JSON object", raw_text=raw)
    return document


# ------------------------------------------------------------
# Structural checks
# ------------------------------------------------------------
def format_path(loc: Sequence[Union[str, int]]) -> str:
    """('itinerary', 1, 'timeSlots', 0, 'category') -> itinerary[1].timeSlots[0].category"""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "$"


def _check_shape(document: Dict[str, Any]) -> GeneratedPlan:
    try:
        return GeneratedPlan.model_validate(document)
    except PydanticValidationError as e:
        first = e.errors()[0]
        raise SchemaViolationError(format_path(first["loc"]), first["msg"]) from e


def _check_days(plan: GeneratedPlan, request: TripRequest) -> None:
    total_days = request.total_days
    if len(plan.itinerary) != total_days:
        raise SchemaViolationError(
            "itinerary", f"expected {total_days} days, got {len(plan.itinerary)}"
        )

    for index, day in enumerate(plan.itinerary):
        expected = index + 1
        if day.day_number != expected:
            raise SchemaViolationError(
                f"itinerary[{index}].dayNumber",
                f"expected day {expected}, got {day.day_number}",
            )
        if not request.start_date <= day.date <= request.end_date:
            raise SchemaViolationError(
                f"itinerary[{index}].date",
                f"{day.date.isoformat()} is outside {request.start_date.isoformat()}..{request.end_date.isoformat()}",
            )
        aligned = request.start_date + timedelta(days=index)
        if day.date != aligned:
            raise SchemaViolationError(
                f"itinerary[{index}].date",
                f"day {expected} must be dated {aligned.isoformat()}, got {day.date.isoformat()}",
            )


# ------------------------------------------------------------
# Repairs + advisories
# ------------------------------------------------------------
def _reconcile_daily_costs(days: List[DayItinerary], advisories: List[Advisory]) -> List[DayItinerary]:
    repaired, touched = [], []
    for day in days:
        slots_sum = round(sum(s.estimated_cost for s in day.time_slots), 2)
        stated = day.daily_cost_estimate
        if stated is None or abs(stated - slots_sum) > settings.COST_TOLERANCE:
            day = day.model_copy(update={"daily_cost_estimate": slots_sum})
            touched.append(str(day.day_number))
        repaired.append(day)

    if touched:
        advisories.append(Advisory(
            code="DAILY_COST_RECOMPUTED",
            message=f"dailyCostEstimate recomputed from slot costs for day(s) {', '.join(touched)}",
        ))
    return repaired


def _slot_count_advisories(days: List[DayItinerary], advisories: List[Advisory]) -> None:
    unusual = [
        f"{d.day_number} ({len(d.time_slots)})"
        for d in days
        if not MIN_SLOTS_PER_DAY <= len(d.time_slots) <= MAX_SLOTS_PER_DAY
    ]
    if unusual:
        advisories.append(Advisory(
            code="SLOT_COUNT_UNUSUAL",
            message=f"expected {MIN_SLOTS_PER_DAY}-{MAX_SLOTS_PER_DAY} time slots per day; day(s) {', '.join(unusual)}",
        ))


def validate_plan(document: Dict[str, Any], request: TripRequest) -> ValidatedPlan:
    """
    Check a parsed generator document against the itinerary shape and the
    originating request, apply the bounded repair set, and collect advisories.

    Raises SchemaViolationError naming the first offending field path.
    """
    plan = _check_shape(document)
    _check_days(plan, request)

    advisories: List[Advisory] = []
    days = _reconcile_daily_costs(plan.itinerary, advisories)
    _slot_count_advisories(days, advisories)

    breakdown = plan.budget_breakdown
    parts_sum = breakdown.parts_sum()
    if breakdown.total is None or abs(breakdown.total - parts_sum) > settings.COST_TOLERANCE:
        logger.info("Recomputing budgetBreakdown.total: %s -> %s", breakdown.total, parts_sum)
        advisories.append(Advisory(
            code="TOTAL_RECOMPUTED",
            message=f"budgetBreakdown.total {breakdown.total} replaced by the sum of its parts ({parts_sum:g})",
        ))
        breakdown = breakdown.model_copy(update={"total": parts_sum})

    estimated_total = plan.estimated_total_budget
    if estimated_total is None:
        estimated_total = breakdown.total
        advisories.append(Advisory(
            code="ESTIMATED_TOTAL_DERIVED",
            message="estimatedTotalBudget missing; taken from budgetBreakdown.total",
        ))

    band = settings.BUDGET_TOLERANCE_RATIO * request.budget
    if abs(estimated_total - request.budget) > band:
        advisories.append(Advisory(
            code="BUDGET_OUT_OF_RANGE",
            message=(
                f"estimated total {estimated_total:g} is more than "
                f"{settings.BUDGET_TOLERANCE_RATIO:.0%} away from the requested budget {request.budget:g}"
            ),
        ))

    route = plan.route_optimization
    missing = [name for name, value in route.model_dump(by_alias=True).items() if not value.strip()]
    if missing:
        advisories.append(Advisory(
            code="ROUTE_SUMMARY_INCOMPLETE",
            message=f"route optimization summary is missing: {', '.join(missing)}",
        ))

    repaired = plan.model_copy(update={
        "itinerary": days,
        "budget_breakdown": breakdown,
        "estimated_total_budget": estimated_total,
    })
    for advisory in advisories:
        logger.info("Plan advisory %s: %s", advisory.code, advisory.message)
    return ValidatedPlan(plan=repaired, advisories=advisories)
