"""
Airport-wide satisfaction metrics and supervisor insights.

Aggregation works on a snapshot of interactions and passengers and never
mutates them.
"""

from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from ..config import EngineConfig, config
from ..types import (
    Insight, InsightPriority, Interaction, Metrics, Passenger, SatisfactionTier, TrendPoint
)
from ..utils.dates import local_date, to_utc
from ..utils.logger import get_logger
from .interaction_classifier import classify
from .recovery_timeline import RecoveryTimelineBuilder

PRIORITY_ORDER = {
    InsightPriority.CRITICAL: 0,
    InsightPriority.HIGH: 1,
    InsightPriority.MEDIUM: 2,
    InsightPriority.LOW: 3,
}


class MetricsAggregator:
    """Computes NPS, risk, recovery and trend metrics for an airport"""

    def __init__(self, timeline_builder: RecoveryTimelineBuilder = None, settings: EngineConfig = None):
        self.timeline_builder = timeline_builder or RecoveryTimelineBuilder()
        self.settings = settings or config.engine
        self.logger = get_logger("metrics_aggregator")

    def aggregate(
        self,
        interactions: Iterable[Interaction],
        passengers: Iterable[Passenger],
        now: Optional[datetime] = None,
        airport_id: Optional[str] = None
    ) -> Metrics:
        """
        Aggregate metrics over a snapshot.

        Args:
            interactions: Interactions to aggregate
            passengers: Passengers of the airport
            now: Reference time for the trailing trend window
            airport_id: Restrict both inputs to one airport's passengers

        Returns:
            Metrics with tier counts, NPS, risk and recovery figures, trend
            and prioritized insights
        """
        passengers = list(passengers)
        interactions = list(interactions)
        if airport_id is not None:
            passengers = [p for p in passengers if p.airport_id == airport_id]
            members = {p.id for p in passengers}
            interactions = [i for i in interactions if i.passenger_id in members]

        scored = [i for i in interactions if i.score is not None]
        tiers = Counter(classify(i.score) for i in scored)
        detractors = tiers[SatisfactionTier.DETRACTOR]
        promoters = tiers[SatisfactionTier.PROMOTER]

        at_risk = 0
        recoveries = 0
        episodes = 0
        for passenger_id, history in self._group_by_passenger(interactions).items():
            timeline = self.timeline_builder.analyze(history, passenger_id=passenger_id)
            at_risk += int(timeline.at_risk)
            recoveries += len(timeline.recovery_events)
            episodes += timeline.detractor_episodes

        metrics = Metrics(
            total_interactions=len(interactions),
            total_passengers=len(passengers),
            scored_interactions=len(scored),
            average_score=round(sum(i.score for i in scored) / len(scored), 1) if scored else 0.0,
            detractors=detractors,
            passives=tiers[SatisfactionTier.PASSIVE],
            promoters=promoters,
            nps=self.net_promoter_score(promoters, detractors, len(scored)),
            passengers_at_risk=at_risk,
            successful_recoveries=recoveries,
            detractor_episodes=episodes,
            recovery_rate=round(recoveries / max(1, episodes) * 100, 1),
            category_distribution=dict(Counter(p.category.value for p in passengers)),
            travel_reason_counts=dict(Counter(i.travel_reason for i in interactions if i.travel_reason)),
            services_used_counts=dict(Counter(s for i in interactions for s in i.services_used)),
            trend=self.daily_trend(scored, now),
        )
        metrics.insights = self.build_insights(metrics)

        self.logger.info(
            "metrics_aggregated",
            airport_id=airport_id,
            interactions=metrics.total_interactions,
            nps=metrics.nps,
            at_risk=metrics.passengers_at_risk
        )
        return metrics

    @staticmethod
    def net_promoter_score(promoters: int, detractors: int, total_scored: int) -> int:
        nps = round((promoters - detractors) / max(1, total_scored) * 100)
        return max(-100, min(100, nps))

    def daily_trend(self, scored: List[Interaction], now: Optional[datetime] = None) -> List[TrendPoint]:
        """Average score per calendar day inside the trailing window; empty days are skipped"""
        now = to_utc(now or datetime.now(timezone.utc))
        window_start = now - timedelta(days=self.settings.trend_window_days)

        buckets: Dict[date, List[int]] = defaultdict(list)
        for interaction in scored:
            if to_utc(interaction.timestamp) >= window_start:
                buckets[local_date(interaction.timestamp)].append(interaction.score)

        return [
            TrendPoint(date=day, average=round(sum(scores) / len(scores), 1), count=len(scores))
            for day, scores in sorted(buckets.items())
        ]

    def build_insights(self, metrics: Metrics) -> List[Insight]:
        s = self.settings
        insights: List[Insight] = []

        if metrics.scored_interactions and metrics.average_score < s.low_average_score:
            insights.append(Insight(
                priority=InsightPriority.CRITICAL,
                title="Low average satisfaction",
                message=f"Average score is {metrics.average_score}/10, below the {s.low_average_score} target."
            ))

        if metrics.passengers_at_risk > s.at_risk_alert_count:
            insights.append(Insight(
                priority=InsightPriority.HIGH,
                title="Passengers at risk",
                message=f"{metrics.passengers_at_risk} passengers ended their last interaction as detractors."
            ))

        if metrics.scored_interactions and metrics.nps < 0:
            insights.append(Insight(
                priority=InsightPriority.HIGH,
                title="Negative NPS",
                message=f"Detractors outnumber promoters (NPS {metrics.nps})."
            ))

        if metrics.detractor_episodes and metrics.recovery_rate < s.min_recovery_rate:
            insights.append(Insight(
                priority=InsightPriority.MEDIUM,
                title="Low recovery rate",
                message=f"Only {metrics.recovery_rate}% of detractor episodes were recovered."
            ))

        trend = metrics.trend
        if len(trend) >= 2 and trend[0].average - trend[-1].average >= s.trend_drop:
            insights.append(Insight(
                priority=InsightPriority.MEDIUM,
                title="Declining satisfaction",
                message=f"Daily average fell from {trend[0].average} to {trend[-1].average}."
            ))

        if metrics.scored_interactions and metrics.nps >= s.strong_nps:
            insights.append(Insight(
                priority=InsightPriority.LOW,
                title="Strong promoter base",
                message=f"NPS is {metrics.nps}; keep recognizing loyal passengers."
            ))

        insights.sort(key=lambda insight: PRIORITY_ORDER[insight.priority])
        return insights[:s.max_insights]

    @staticmethod
    def _group_by_passenger(interactions: List[Interaction]) -> Dict[str, List[Interaction]]:
        grouped: Dict[str, List[Interaction]] = defaultdict(list)
        for interaction in interactions:
            grouped[interaction.passenger_id].append(interaction)
        return grouped
