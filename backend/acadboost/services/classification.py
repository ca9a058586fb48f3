"""
AcadBoost - Score Classification
Single source of truth for turning a raw score into a level or difficulty label.

Thresholds:
    75-100 -> High / high
    40-74  -> Medium / medium
    0-39   -> Low / low
"""
from acadboost.models.subject import Difficulty, PerformanceLevel

HIGH_THRESHOLD = 75
MEDIUM_THRESHOLD = 40


def score_to_level(score: float) -> PerformanceLevel:
    """Classify a score as High, Medium or Low."""
    if score >= HIGH_THRESHOLD:
        return PerformanceLevel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return PerformanceLevel.MEDIUM
    return PerformanceLevel.LOW


def score_to_difficulty(score: float) -> Difficulty:
    """Difficulty label for a test, using the same thresholds as levels."""
    if score >= HIGH_THRESHOLD:
        return Difficulty.HIGH
    if score >= MEDIUM_THRESHOLD:
        return Difficulty.MEDIUM
    return Difficulty.LOW
