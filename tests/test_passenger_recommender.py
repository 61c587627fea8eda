"""
Tests for agent-facing profile recommendations
"""

from datetime import date

import pytest

from hvc_service.config import EngineConfig
from hvc_service.services.passenger_recommender import PassengerRecommender
from hvc_service.types import PassengerLikes

from conftest import make_interaction, make_passenger

TODAY = date(2024, 3, 20)


class TestPassengerRecommender:
    """Test risk, birthday, loyalty and preference notes"""

    @pytest.fixture
    def recommender(self):
        return PassengerRecommender(settings=EngineConfig())

    def test_at_risk_passenger(self, recommender):
        history = [make_interaction("i1", 9, day=1), make_interaction("i2", 3, day=2)]

        notes = recommender.recommend(make_passenger(), history, today=TODAY)

        assert notes[0].type == "danger"
        assert "3/10" in notes[0].message

    def test_birthday(self, recommender):
        passenger = make_passenger(birth_date=date(1985, 3, 20))
        notes = recommender.recommend(passenger, [], today=TODAY)
        assert [n.title for n in notes] == ["Birthday today"]

    def test_loyal_customer(self, recommender):
        history = [make_interaction(f"i{n}", 9, day=n) for n in range(1, 6)]
        notes = recommender.recommend(make_passenger(), history, today=TODAY)
        assert [n.title for n in notes] == ["Loyal customer"]

    def test_recent_incident_blocks_loyalty(self, recommender):
        history = [make_interaction(f"i{n}", 9, day=n) for n in range(1, 5)]
        history.append(make_interaction("i5", 9, day=5, incident="Lost bag"))
        assert recommender.recommend(make_passenger(), history, today=TODAY) == []

    def test_too_few_interactions_for_loyalty(self, recommender):
        history = [make_interaction(f"i{n}", 10, day=n) for n in range(1, 5)]
        assert recommender.recommend(make_passenger(), history, today=TODAY) == []

    def test_known_preferences(self, recommender):
        passenger = make_passenger(likes=PassengerLikes(drink=["Coffee"], seat=["aisle"]))
        notes = recommender.recommend(passenger, [], today=TODAY)

        assert len(notes) == 1
        assert notes[0].message == "drink: Coffee; seat: aisle"

    def test_empty_likes_skipped(self, recommender):
        passenger = make_passenger(likes=PassengerLikes())
        assert recommender.recommend(passenger, [], today=TODAY) == []
