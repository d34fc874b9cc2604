"""
End-to-end pipeline tests for services/itinerary_service.py with a fake
chat model and an in-memory store.
"""
import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from ziroplans.errors import GenerationError, MalformedOutputError, SchemaViolationError, ValidationError
from ziroplans.services.itinerary_service import generate_trip


class MemoryTripStore:
    def __init__(self):
        self.saved = []

    async def save(self, plan):
        self.saved.append(plan)
        return plan


def _run(payload, model, store=None, persist=False):
    return asyncio.run(generate_trip(payload, "user_123", model=model, store=store, persist=persist))


class TestHappyPath:
    def test_mumbai_to_goa(self, goa_payload, fake_model):
        trip = _run(goa_payload, fake_model)
        assert trip.total_days == 3
        assert [d.day_number for d in trip.itinerary] == [1, 2, 3]
        assert [d.date.isoformat() for d in trip.itinerary] == ["2025-06-01", "2025-06-02", "2025-06-03"]
        assert abs(trip.budget_breakdown.total - trip.budget_breakdown.parts_sum()) <= 1
        assert trip.user_id == "user_123"

    def test_every_slot_gets_a_map_link(self, goa_payload, fake_model):
        trip = _run(goa_payload, fake_model)
        for day in trip.itinerary:
            assert "/maps/search/" in day.time_slots[0].google_maps_link
            assert all("/maps/dir/" in s.google_maps_link for s in day.time_slots[1:])

    def test_fenced_output_still_parses(self, goa_payload, plan_document):
        model = FakeListChatModel(responses=["```json\n" + json.dumps(plan_document) + "\n```"])
        assert len(_run(goa_payload, model).itinerary) == 3

    def test_wrong_total_is_repaired_not_failed(self, goa_payload, plan_document):
        plan_document["budgetBreakdown"]["total"] = 12345
        model = FakeListChatModel(responses=[json.dumps(plan_document)])
        trip = _run(goa_payload, model)
        assert trip.budget_breakdown.total == 15000
        assert "TOTAL_RECOMPUTED" in {a.code for a in trip.advisories}

    def test_single_day_trip(self, goa_payload, plan_factory):
        goa_payload["endDate"] = goa_payload["startDate"]
        document = plan_factory(days=[[
            ("Dabolim Airport", "transport", 0, 15.3808, 73.8314),
            ("Calangute Beach", "attraction", 0, 15.5439, 73.7553),
            ("Britto's", "restaurant", 1200, 15.5553, 73.7517),
            ("Dabolim Airport", "transport", 0, 15.3808, 73.8314),
        ]])
        model = FakeListChatModel(responses=[json.dumps(document)])
        trip = _run(goa_payload, model)
        assert trip.total_days == 1
        assert len(trip.itinerary) == 1


class TestPersistence:
    def test_saves_after_assembly(self, goa_payload, fake_model):
        store = MemoryTripStore()
        trip = _run(goa_payload, fake_model, store=store, persist=True)
        assert store.saved == [trip]

    def test_nothing_saved_on_schema_violation(self, goa_payload, plan_document):
        plan_document["itinerary"][2]["dayNumber"] = 4
        store = MemoryTripStore()
        with pytest.raises(SchemaViolationError):
            _run(goa_payload, FakeListChatModel(responses=[json.dumps(plan_document)]), store=store, persist=True)
        assert store.saved == []


class TestFailFast:
    def test_invalid_input_never_reaches_the_generator(self, goa_payload):
        goa_payload["origin"] = ""
        with patch("ziroplans.services.itinerary_service.generate_itinerary_text", new=AsyncMock()) as generate:
            with pytest.raises(ValidationError) as exc_info:
                _run(goa_payload, model=None)
        generate.assert_not_awaited()
        assert "origin" in exc_info.value.message

    def test_reversed_dates_never_reach_the_generator(self, goa_payload):
        goa_payload["startDate"], goa_payload["endDate"] = "2025-06-03", "2025-06-01"
        with patch("ziroplans.services.itinerary_service.generate_itinerary_text", new=AsyncMock()) as generate:
            with pytest.raises(ValidationError):
                _run(goa_payload, model=None)
        generate.assert_not_awaited()

    def test_prose_output_is_malformed(self, goa_payload):
        model = FakeListChatModel(responses=["Sorry, I can't plan that trip."])
        with pytest.raises(MalformedOutputError):
            _run(goa_payload, model)

    def test_generation_error_propagates_without_retry(self, goa_payload):
        generate = AsyncMock(side_effect=GenerationError("provider down"))
        with patch("ziroplans.services.itinerary_service.generate_itinerary_text", new=generate):
            with pytest.raises(GenerationError):
                _run(goa_payload, model=None)
        assert generate.await_count == 1
