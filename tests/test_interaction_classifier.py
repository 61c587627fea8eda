"""
Tests for satisfaction tier classification
"""

import pytest

from hvc_service.services.interaction_classifier import (
    InteractionClassifier, classify, satisfaction_label
)
from hvc_service.types import SatisfactionTier


class TestClassify:
    """Test NPS tier boundaries"""

    @pytest.mark.parametrize("score", [1, 4, 6])
    def test_detractors(self, score):
        assert classify(score) == SatisfactionTier.DETRACTOR

    @pytest.mark.parametrize("score", [7, 8])
    def test_passives(self, score):
        assert classify(score) == SatisfactionTier.PASSIVE

    @pytest.mark.parametrize("score", [9, 10])
    def test_promoters(self, score):
        assert classify(score) == SatisfactionTier.PROMOTER

    def test_unscored(self):
        assert classify(None) is None


class TestSatisfactionLabel:
    """Test operator-facing labels"""

    def test_labels(self):
        assert satisfaction_label(10) == "Excellent"
        assert satisfaction_label(7) == "Good"
        assert satisfaction_label(5) == "Regular"
        assert satisfaction_label(2) == "Poor"
        assert satisfaction_label(None) is None

    def test_wrapper_delegates(self):
        classifier = InteractionClassifier()
        assert classifier.classify(6) == SatisfactionTier.DETRACTOR
        assert classifier.label(9) == "Excellent"
