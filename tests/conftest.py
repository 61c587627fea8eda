"""
Shared factories for HVC service tests
"""

from datetime import datetime, timezone

import pytest

from hvc_service.types import Category, Interaction, Passenger, PassengerLikes


def make_passenger(
    passenger_id="p1",
    name="Juan Perez",
    category=Category.GOLD,
    airport_id="LIM",
    document_number=None,
    **kwargs
):
    return Passenger(
        id=passenger_id,
        name=name,
        document_number=document_number or f"DOC-{passenger_id}",
        category=category,
        airport_id=airport_id,
        **kwargs
    )


def make_interaction(
    interaction_id,
    score,
    day=1,
    passenger_id="p1",
    recovery_action=None,
    incident=None,
    **kwargs
):
    return Interaction(
        id=interaction_id,
        passenger_id=passenger_id,
        agent_name="Ana",
        timestamp=datetime(2024, 3, day, 15, 0, tzinfo=timezone.utc),
        score=score,
        recovery_action=recovery_action,
        incident=incident,
        **kwargs
    )


@pytest.fixture
def passenger_with_likes():
    return make_passenger(
        passenger_id="vip",
        name="Maria Lopez",
        category=Category.SIGNATURE,
        likes=PassengerLikes(drink=["Pisco sour"], seat=["window"], contact_method=["WhatsApp"])
    )
