"""
Satisfaction tier classification for interaction scores
"""

from typing import Optional

from ..types import SatisfactionTier

# Scores at or below this value are detractors
DETRACTOR_MAX = 6
# Scores at or above this value are promoters
PROMOTER_MIN = 9

EXCELLENT_MIN = 9
GOOD_MIN = 7
REGULAR_MIN = 5


def classify(score: Optional[int]) -> Optional[SatisfactionTier]:
    """
    Map a 1-10 satisfaction score to its NPS tier.

    Unscored interactions return None and are left out of every
    tier-based count.
    """
    if score is None:
        return None
    if score <= DETRACTOR_MAX:
        return SatisfactionTier.DETRACTOR
    if score >= PROMOTER_MIN:
        return SatisfactionTier.PROMOTER
    return SatisfactionTier.PASSIVE


def satisfaction_label(score: Optional[int]) -> Optional[str]:
    """Operator-facing label for a score"""
    if score is None:
        return None
    if score >= EXCELLENT_MIN:
        return "Excellent"
    if score >= GOOD_MIN:
        return "Good"
    if score >= REGULAR_MIN:
        return "Regular"
    return "Poor"


class InteractionClassifier:
    """Stateless wrapper so the classifier can be injected like other services"""

    def classify(self, score: Optional[int]) -> Optional[SatisfactionTier]:
        return classify(score)

    def label(self, score: Optional[int]) -> Optional[str]:
        return satisfaction_label(score)
