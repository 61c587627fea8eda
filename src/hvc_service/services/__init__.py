"""
Services module initialization
"""

from .interaction_classifier import InteractionClassifier, classify, satisfaction_label
from .manifest_parser import ManifestParser, parse_manifest
from .passenger_matcher import NamePassengerMatcher
from .manifest_processor import ManifestProcessor
from .recovery_timeline import RecoveryTimelineBuilder
from .metrics_aggregator import MetricsAggregator
from .recovery_suggestions import RecoverySuggestionEngine, IncidentTemplates, ServiceStandards
from .passenger_recommender import PassengerRecommender
from .interaction_recorder import InteractionRecorder

__all__ = [
    'InteractionClassifier',
    'classify',
    'satisfaction_label',
    'ManifestParser',
    'parse_manifest',
    'NamePassengerMatcher',
    'ManifestProcessor',
    'RecoveryTimelineBuilder',
    'MetricsAggregator',
    'RecoverySuggestionEngine',
    'IncidentTemplates',
    'ServiceStandards',
    'PassengerRecommender',
    'InteractionRecorder',
]
