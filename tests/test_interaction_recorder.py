"""
Tests for interaction recording
"""

from datetime import datetime, timedelta, timezone

import pytest

from hvc_service.clients.memory_store import InMemoryInteractionRepository, InMemoryPassengerRepository
from hvc_service.services.interaction_recorder import InteractionRecorder
from hvc_service.services.recovery_timeline import RecoveryTimelineBuilder
from hvc_service.types import Category, InteractionCreate, NotFoundError, PassengerCreate, ValidationError


class TestInteractionRecorder:

    @pytest.fixture
    def passengers(self):
        return InMemoryPassengerRepository()

    @pytest.fixture
    def interactions(self, passengers):
        return InMemoryInteractionRepository(passengers)

    @pytest.fixture
    def recorder(self, interactions, passengers):
        return InteractionRecorder(interactions, passengers)

    @pytest.mark.asyncio
    async def test_record_interaction(self, recorder, interactions, passengers):
        passenger = await passengers.create(PassengerCreate(
            name="Juan Perez", document_number="40123456", category=Category.GOLD, airport_id="LIM"
        ))

        stored = await recorder.record(InteractionCreate(
            passenger_id=passenger.id,
            agent_name="Ana",
            timestamp=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
            score=4,
            incident="Delayed flight",
            recovery_action="Lounge access"
        ))

        assert stored.id
        assert stored.score == 4
        assert await interactions.list_by_passenger(passenger.id) == [stored]

    @pytest.mark.asyncio
    async def test_unscored_interaction_allowed(self, recorder, passengers):
        passenger = await passengers.create(PassengerCreate(
            name="Maria Lopez", document_number="X1", category=Category.TOP, airport_id="LIM"
        ))
        stored = await recorder.record(InteractionCreate(passenger_id=passenger.id, agent_name="Ana"))
        assert stored.score is None

    @pytest.mark.asyncio
    async def test_unknown_passenger(self, recorder):
        with pytest.raises(NotFoundError):
            await recorder.record(InteractionCreate(passenger_id="missing", agent_name="Ana", score=9))

    @pytest.mark.asyncio
    async def test_out_of_range_score_rejected(self, recorder, interactions):
        bad = InteractionCreate.model_construct(passenger_id="p1", agent_name="Ana", score=11)

        with pytest.raises(ValidationError):
            await recorder.record(bad)

    @pytest.mark.asyncio
    async def test_default_timestamp_orders_after_earlier_interactions(self, recorder, interactions, passengers):
        passenger = await passengers.create(PassengerCreate(
            name="Carlos Ruiz", document_number="70111222", category=Category.BLACK, airport_id="LIM"
        ))
        await recorder.record(InteractionCreate(
            passenger_id=passenger.id,
            agent_name="Ana",
            timestamp=datetime.now(timezone.utc) - timedelta(hours=1),
            score=9
        ))
        latest = await recorder.record(InteractionCreate(passenger_id=passenger.id, agent_name="Luis", score=3))

        assert latest.timestamp.tzinfo is not None

        timeline = RecoveryTimelineBuilder().analyze(
            await interactions.list_by_passenger(passenger.id), passenger_id=passenger.id
        )
        assert [e.score for e in timeline.entries] == [9, 3]
        assert timeline.at_risk is True
