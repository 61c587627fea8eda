"""
Per-passenger satisfaction timeline and recovery detection
"""

from typing import Iterable, List, Optional

from ..types import Interaction, PassengerTimeline, RecoveryEvent, SatisfactionTier, TimelineEntry
from ..utils.dates import to_utc
from .interaction_classifier import classify


class RecoveryTimelineBuilder:
    """
    Builds chronological timelines from interactions.

    A passenger is at risk when the latest scored entry is a detractor.
    A recovery event is an adjacent pair where a detractor entry carrying a
    recovery action is immediately followed by a promoter entry.
    """

    def build_timeline(self, interactions: Iterable[Interaction]) -> List[TimelineEntry]:
        entries = [
            TimelineEntry(
                interaction_id=interaction.id,
                timestamp=interaction.timestamp,
                score=interaction.score,
                tier=classify(interaction.score),
                has_recovery_action=bool((interaction.recovery_action or "").strip()),
                incident=(interaction.incident or "").strip() or None,
                agent=interaction.agent_name
            )
            for interaction in interactions
            if interaction.score is not None
        ]
        # Stable sort keeps input order for equal timestamps
        entries.sort(key=lambda entry: to_utc(entry.timestamp))
        return entries

    def analyze(
        self,
        interactions: Iterable[Interaction],
        passenger_id: Optional[str] = None
    ) -> PassengerTimeline:
        interactions = list(interactions)
        entries = self.build_timeline(interactions)
        actions = {i.id: (i.recovery_action or "").strip() for i in interactions}

        events = [
            RecoveryEvent(detractor=current, promoter=following, recovery_action=actions.get(current.interaction_id))
            for current, following in zip(entries, entries[1:])
            if self.is_recovery(current, following)
        ]

        return PassengerTimeline(
            passenger_id=passenger_id,
            entries=entries,
            at_risk=self.is_at_risk(entries),
            recovery_events=events,
            detractor_episodes=sum(1 for e in entries if e.tier == SatisfactionTier.DETRACTOR)
        )

    @staticmethod
    def is_at_risk(entries: List[TimelineEntry]) -> bool:
        return bool(entries) and entries[-1].tier == SatisfactionTier.DETRACTOR

    @staticmethod
    def is_recovery(current: TimelineEntry, following: TimelineEntry) -> bool:
        return (
            current.tier == SatisfactionTier.DETRACTOR
            and current.has_recovery_action
            and following.tier == SatisfactionTier.PROMOTER
        )
