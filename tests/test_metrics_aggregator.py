"""
Tests for airport metrics and supervisor insights
"""

from datetime import date, datetime, timezone

import pytest

from hvc_service.config import EngineConfig
from hvc_service.services.metrics_aggregator import MetricsAggregator
from hvc_service.types import Category, InsightPriority, Metrics, TrendPoint

from conftest import make_interaction, make_passenger

NOW = datetime(2024, 3, 10, 18, 0, tzinfo=timezone.utc)


class TestMetricsAggregator:
    """Test counts, NPS, recovery rate and trend"""

    @pytest.fixture
    def aggregator(self):
        return MetricsAggregator(settings=EngineConfig())

    @pytest.fixture
    def passengers(self):
        return [
            make_passenger("p1", category=Category.GOLD),
            make_passenger("p2", category=Category.BLACK),
            make_passenger("p3", category=Category.GOLD, airport_id="CUZ"),
        ]

    def test_tier_counts_and_nps(self, aggregator, passengers):
        interactions = [
            make_interaction("i1", 4, day=1, passenger_id="p1", recovery_action="Upgrade"),
            make_interaction("i2", 9, day=2, passenger_id="p1"),
            make_interaction("i3", 10, day=3, passenger_id="p2"),
            make_interaction("i4", 8, day=4, passenger_id="p2"),
            make_interaction("i5", None, day=5, passenger_id="p2"),
        ]

        metrics = aggregator.aggregate(interactions, passengers, now=NOW, airport_id="LIM")

        assert metrics.total_interactions == 5
        assert metrics.total_passengers == 2
        assert metrics.scored_interactions == 4
        assert metrics.detractors == 1
        assert metrics.passives == 1
        assert metrics.promoters == 2
        assert metrics.nps == 25
        assert metrics.average_score == 7.8
        assert metrics.successful_recoveries == 1
        assert metrics.detractor_episodes == 1
        assert metrics.recovery_rate == 100.0
        assert metrics.passengers_at_risk == 0
        assert metrics.category_distribution == {"GOLD": 1, "BLACK": 1}

    def test_other_airport_excluded(self, aggregator, passengers):
        interactions = [make_interaction("i1", 2, passenger_id="p3")]
        metrics = aggregator.aggregate(interactions, passengers, now=NOW, airport_id="LIM")
        assert metrics.total_interactions == 0

    def test_nps_bounds(self, aggregator, passengers):
        detractors = [make_interaction(f"d{n}", 1, day=n, passenger_id="p1") for n in range(1, 4)]
        promoters = [make_interaction(f"p{n}", 10, day=n, passenger_id="p2") for n in range(1, 4)]

        assert aggregator.aggregate(detractors, passengers, now=NOW).nps == -100
        assert aggregator.aggregate(promoters, passengers, now=NOW).nps == 100

    def test_no_scored_interactions(self, aggregator, passengers):
        metrics = aggregator.aggregate([make_interaction("i1", None, passenger_id="p1")], passengers, now=NOW)

        assert metrics.nps == 0
        assert metrics.average_score == 0.0
        assert metrics.recovery_rate == 0.0
        assert metrics.trend == []
        assert metrics.insights == []

    def test_at_risk_counts_latest_detractors(self, aggregator, passengers):
        interactions = [
            make_interaction("i1", 9, day=1, passenger_id="p1"),
            make_interaction("i2", 3, day=2, passenger_id="p1"),
            make_interaction("i3", 3, day=1, passenger_id="p2"),
            make_interaction("i4", 9, day=2, passenger_id="p2"),
        ]
        metrics = aggregator.aggregate(interactions, passengers, now=NOW)

        assert metrics.passengers_at_risk == 1
        assert metrics.detractor_episodes == 2
        assert metrics.successful_recoveries == 0
        assert metrics.recovery_rate == 0.0

    def test_usage_counters(self, aggregator, passengers):
        interactions = [
            make_interaction("i1", 9, passenger_id="p1", travel_reason="business", services_used=["lounge", "fast track"]),
            make_interaction("i2", 9, passenger_id="p2", travel_reason="business", services_used=["lounge"]),
        ]
        metrics = aggregator.aggregate(interactions, passengers, now=NOW)

        assert metrics.travel_reason_counts == {"business": 2}
        assert metrics.services_used_counts == {"lounge": 2, "fast track": 1}


class TestDailyTrend:
    """Test per-day averages in the business time zone"""

    @pytest.fixture
    def aggregator(self):
        return MetricsAggregator(settings=EngineConfig())

    def test_days_averaged_and_sorted(self, aggregator):
        scored = [
            make_interaction("i1", 8, day=3),
            make_interaction("i2", 6, day=3),
            make_interaction("i3", 10, day=1),
        ]
        trend = aggregator.daily_trend(scored, now=NOW)

        assert trend == [
            TrendPoint(date=date(2024, 3, 1), average=10.0, count=1),
            TrendPoint(date=date(2024, 3, 3), average=7.0, count=2),
        ]

    def test_late_utc_evening_belongs_to_local_day(self, aggregator):
        late = make_interaction("i1", 9).model_copy(
            update={"timestamp": datetime(2024, 3, 5, 3, 0, tzinfo=timezone.utc)}
        )
        trend = aggregator.daily_trend([late], now=NOW)
        assert trend[0].date == date(2024, 3, 4)

    def test_outside_window_skipped(self, aggregator):
        old = make_interaction("i1", 9).model_copy(
            update={"timestamp": datetime(2023, 12, 1, 12, 0, tzinfo=timezone.utc)}
        )
        assert aggregator.daily_trend([old], now=NOW) == []


class TestInsights:
    """Test insight rules, ordering and cap"""

    @pytest.fixture
    def aggregator(self):
        return MetricsAggregator(settings=EngineConfig())

    def test_capped_and_ordered_by_priority(self, aggregator):
        metrics = Metrics(
            scored_interactions=10,
            average_score=5.0,
            passengers_at_risk=6,
            nps=-40,
            detractor_episodes=4,
            recovery_rate=25.0,
            trend=[
                TrendPoint(date=date(2024, 3, 1), average=7.0, count=2),
                TrendPoint(date=date(2024, 3, 2), average=4.0, count=3),
            ],
        )
        insights = aggregator.build_insights(metrics)

        assert len(insights) == 4
        assert [i.priority for i in insights] == [
            InsightPriority.CRITICAL,
            InsightPriority.HIGH,
            InsightPriority.HIGH,
            InsightPriority.MEDIUM,
        ]
        assert insights[0].title == "Low average satisfaction"

    def test_strong_nps(self, aggregator):
        metrics = Metrics(scored_interactions=4, average_score=9.5, nps=75)
        insights = aggregator.build_insights(metrics)

        assert [i.priority for i in insights] == [InsightPriority.LOW]
        assert insights[0].title == "Strong promoter base"

    def test_at_risk_threshold_is_exclusive(self, aggregator):
        metrics = Metrics(scored_interactions=10, average_score=8.0, nps=10, passengers_at_risk=5)
        assert aggregator.build_insights(metrics) == []
