"""
Agent-facing profile recommendations (risk, birthday, loyalty, preferences)
"""

from datetime import date
from typing import Iterable, List, Optional

from ..config import EngineConfig, config
from ..types import Interaction, Passenger, ProfileRecommendation
from ..utils.dates import is_birthday, to_utc
from .interaction_classifier import GOOD_MIN
from .recovery_timeline import RecoveryTimelineBuilder


class PassengerRecommender:
    """Builds quick notes an agent sees when opening a passenger profile"""

    def __init__(self, timeline_builder: RecoveryTimelineBuilder = None, settings: EngineConfig = None):
        self.timeline_builder = timeline_builder or RecoveryTimelineBuilder()
        self.settings = settings or config.engine

    def recommend(
        self,
        passenger: Passenger,
        interactions: Iterable[Interaction],
        today: Optional[date] = None
    ) -> List[ProfileRecommendation]:
        # Newest first
        history = sorted(interactions, key=lambda i: to_utc(i.timestamp), reverse=True)
        timeline = self.timeline_builder.analyze(history, passenger_id=passenger.id)
        recommendations = []

        if timeline.at_risk:
            latest = timeline.entries[-1]
            recommendations.append(ProfileRecommendation(
                type="danger",
                icon="⚠️",
                title="Passenger at risk",
                message=(
                    f"Last score: {latest.score}/10. Consider a courtesy upgrade, "
                    "lounge access or personal attention from the supervisor."
                )
            ))

        if is_birthday(passenger.birth_date, today):
            recommendations.append(ProfileRecommendation(
                type="success",
                icon="🎂",
                title="Birthday today",
                message="Offer special greetings or a small courtesy detail and log the moment."
            ))

        if self._is_loyal(history):
            recommendations.append(ProfileRecommendation(
                type="info",
                icon="⭐",
                title="Loyal customer",
                message=f"{len(history)} trips with an excellent experience. Consider special recognition."
            ))

        if passenger.likes is not None and not passenger.likes.is_empty():
            parts = [
                f"{field}: {', '.join(values)}"
                for field, values in passenger.likes.model_dump().items()
                if values
            ]
            recommendations.append(ProfileRecommendation(
                type="info",
                icon="📋",
                title="Known preferences",
                message="; ".join(parts)
            ))

        return recommendations

    def _is_loyal(self, history: List[Interaction]) -> bool:
        window = self.settings.loyal_min_interactions
        if len(history) < window:
            return False

        recent = history[:window]
        if any((i.incident or "").strip() for i in recent):
            return False

        scores = [i.score for i in history if i.score is not None][:window]
        return bool(scores) and sum(scores) / len(scores) >= GOOD_MIN
