"""
AcadBoost - Synthetic Performance Generation
Builds plausible test histories and attendance for newly registered students.

Every generator takes an injectable random.Random so tests can pin outcomes.
"""
import math
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from acadboost.core.exceptions import ConfigurationError
from acadboost.models.subject import (
    SUBJECT_ORDER,
    Difficulty,
    PerformanceLevel,
    SubjectKey,
    parse_subject,
)
from acadboost.services.classification import score_to_difficulty, score_to_level


class PerformanceTier(str, Enum):
    """Generation-time bias bucket. Never persisted."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ProgressionPattern(str, Enum):
    """Shape of a 4-test score history."""
    IMPROVING = "improving"
    DECLINING = "declining"
    CONSISTENT = "consistent"
    FLUCTUATING = "fluctuating"


ScoreRange = tuple[int, int]

TESTS_PER_SUBJECT = 4


# =============================================================================
# Tier distribution catalog
# =============================================================================

@dataclass(frozen=True)
class TierDistribution:
    """How many of the six subjects land in each tier."""
    name: str
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low

    def expand(self) -> list[PerformanceTier]:
        """Unshuffled multiset of tier labels."""
        return (
            [PerformanceTier.HIGH] * self.high
            + [PerformanceTier.MEDIUM] * self.medium
            + [PerformanceTier.LOW] * self.low
        )


TIER_DISTRIBUTIONS: tuple[TierDistribution, ...] = (
    TierDistribution("mostly_high", high=5, medium=1, low=0),
    TierDistribution("high_medium", high=4, medium=2, low=0),
    TierDistribution("balanced_high_medium", high=3, medium=3, low=0),
    TierDistribution("mixed", high=2, medium=3, low=1),
    TierDistribution("mostly_medium", high=1, medium=4, low=1),
    TierDistribution("medium", high=0, medium=5, low=1),
    TierDistribution("mixed_low_medium", high=1, medium=2, low=3),
    TierDistribution("mostly_low", high=0, medium=2, low=4),
    TierDistribution("completely_mixed", high=2, medium=2, low=2),
)


def validate_distribution(distribution: TierDistribution) -> None:
    """
    Check that a template covers exactly the tracked subjects.

    Raises:
        ConfigurationError: If the counts are negative or don't sum to the subject count
    """
    expected = len(SUBJECT_ORDER)
    if min(distribution.high, distribution.medium, distribution.low) < 0:
        raise ConfigurationError(f"Tier distribution '{distribution.name}' has a negative count")
    if distribution.total != expected:
        raise ConfigurationError(
            f"Tier distribution '{distribution.name}' sums to {distribution.total}, expected {expected}"
        )


def validate_distributions(catalog: tuple[TierDistribution, ...]) -> None:
    """Validate every template in a catalog."""
    if not catalog:
        raise ConfigurationError("Tier distribution catalog is empty")
    for distribution in catalog:
        validate_distribution(distribution)


validate_distributions(TIER_DISTRIBUTIONS)


class ScoreTierSampler:
    """Assigns one performance tier to each subject."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        catalog: tuple[TierDistribution, ...] = TIER_DISTRIBUTIONS,
    ):
        validate_distributions(catalog)
        self.rng = rng or random.Random()
        self.catalog = catalog

    def choose_distribution(self) -> TierDistribution:
        return self.rng.choice(self.catalog)

    def sample(
        self, distribution: Optional[TierDistribution] = None
    ) -> dict[SubjectKey, PerformanceTier]:
        """
        Pick a template (or use the forced one), shuffle it and map it onto subjects.

        Returns:
            {subject: tier} for every subject, in subject order
        """
        if distribution is None:
            distribution = self.choose_distribution()
        else:
            validate_distribution(distribution)

        tiers = distribution.expand()
        self.rng.shuffle(tiers)

        assignment: dict[SubjectKey, PerformanceTier] = {}
        for index, subject in enumerate(SUBJECT_ORDER):
            assignment[subject] = tiers[index] if index < len(tiers) else PerformanceTier.MEDIUM
        return assignment


# =============================================================================
# Score progressions
# =============================================================================

TIER_BANDS: dict[PerformanceTier, ScoreRange] = {
    PerformanceTier.HIGH: (75, 100),
    PerformanceTier.MEDIUM: (40, 74),
    PerformanceTier.LOW: (0, 39),
}

# Inclusive (low, high) per test slot
PROGRESSION_RANGES: dict[ProgressionPattern, dict[PerformanceTier, tuple[ScoreRange, ...]]] = {
    ProgressionPattern.IMPROVING: {
        PerformanceTier.HIGH: ((60, 75), (70, 80), (75, 90), (80, 100)),
        PerformanceTier.MEDIUM: ((25, 40), (35, 50), (45, 60), (55, 74)),
        PerformanceTier.LOW: ((0, 20), (10, 25), (15, 30), (20, 39)),
    },
    ProgressionPattern.DECLINING: {
        PerformanceTier.HIGH: ((90, 100), (85, 95), (80, 90), (75, 85)),
        PerformanceTier.MEDIUM: ((65, 74), (55, 65), (45, 55), (40, 50)),
        PerformanceTier.LOW: ((30, 39), (20, 30), (10, 25), (0, 20)),
    },
    ProgressionPattern.CONSISTENT: {
        tier: (band,) * TESTS_PER_SUBJECT for tier, band in TIER_BANDS.items()
    },
    ProgressionPattern.FLUCTUATING: {
        PerformanceTier.HIGH: ((70, 100), (75, 100), (70, 95), (75, 100)),
        PerformanceTier.MEDIUM: ((35, 74), (40, 70), (40, 74), (45, 74)),
        PerformanceTier.LOW: ((0, 39), (5, 35), (0, 30), (5, 39)),
    },
}


class ProgressionGenerator:
    """
    Draws a 4-test score history for a tier.

    Each slot is an independent draw from a shifted range, so "improving"
    and "declining" are tendencies; neighbouring scores can go against them.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def choose_pattern(self) -> ProgressionPattern:
        return self.rng.choice(list(ProgressionPattern))

    def generate(
        self,
        tier: PerformanceTier,
        pattern: Optional[ProgressionPattern] = None,
    ) -> list[int]:
        pattern = pattern or self.choose_pattern()
        ranges = PROGRESSION_RANGES[pattern][PerformanceTier(tier)]
        return [self.rng.randint(low, high) for low, high in ranges]


# =============================================================================
# Attendance
# =============================================================================

CLASS_COUNT_RANGE: ScoreRange = (40, 60)

ATTENDANCE_BANDS: dict[PerformanceTier, ScoreRange] = {
    PerformanceTier.HIGH: (80, 100),
    PerformanceTier.MEDIUM: (60, 85),
    PerformanceTier.LOW: (40, 70),
}


def attendance_percentage(attended_classes: int, total_classes: int) -> float:
    """Exact attended/total ratio as a percentage, 2 decimals."""
    if total_classes <= 0:
        return 0.0
    return round(attended_classes / total_classes * 100, 2)


@dataclass
class Attendance:
    total_classes: int = 0
    attended_classes: int = 0
    percentage: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_classes": self.total_classes,
            "attended_classes": self.attended_classes,
            "percentage": self.percentage,
        }


class AttendanceGenerator:
    """Attendance figures loosely correlated with the performance tier."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, tier: PerformanceTier) -> Attendance:
        total = self.rng.randint(*CLASS_COUNT_RANGE)
        band_low, band_high = ATTENDANCE_BANDS[PerformanceTier(tier)]
        target_percent = self.rng.uniform(band_low, band_high)
        attended = math.floor(target_percent / 100 * total)
        # Stored percentage is the recomputed ratio, not the sampled target
        return Attendance(
            total_classes=total,
            attended_classes=attended,
            percentage=attendance_percentage(attended, total),
        )


# =============================================================================
# Subject records
# =============================================================================

# Days before "now" for tests 1..4
SEED_TIMELINE_DAYS: tuple[int, ...] = (90, 60, 30, 2)


def seed_timeline(now: Optional[datetime] = None) -> list[datetime]:
    now = now or datetime.now(timezone.utc)
    return [now - timedelta(days=days) for days in SEED_TIMELINE_DAYS]


@dataclass
class DraftTestRecord:
    """Test attempt ready for enrichment and persistence."""
    subject: SubjectKey
    test_number: int
    marks: int
    difficulty: Difficulty
    attempted_at: datetime
    topic: str = ""
    ai_insights: str = ""


@dataclass
class SubjectRecord:
    """Everything generated for one subject."""
    subject: SubjectKey
    tier: PerformanceTier
    scores: list[int]
    attendance: Attendance
    tests: list[DraftTestRecord] = field(default_factory=list)

    @property
    def current(self) -> int:
        return self.scores[-1]

    @property
    def current_level(self) -> PerformanceLevel:
        return score_to_level(self.current)

    @property
    def difficulties(self) -> list[Difficulty]:
        return [t.difficulty for t in self.tests]


class SubjectRecordBuilder:
    """Composes progression, attendance and classification for one subject."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        progression: Optional[ProgressionGenerator] = None,
        attendance: Optional[AttendanceGenerator] = None,
    ):
        rng = rng or random.Random()
        self.progression = progression or ProgressionGenerator(rng)
        self.attendance = attendance or AttendanceGenerator(rng)

    def build(
        self,
        subject: "str | SubjectKey",
        tier: PerformanceTier,
        now: Optional[datetime] = None,
        pattern: Optional[ProgressionPattern] = None,
    ) -> SubjectRecord:
        subject = parse_subject(subject)
        scores = self.progression.generate(tier, pattern)
        attendance = self.attendance.generate(tier)
        timeline = seed_timeline(now)

        tests = [
            DraftTestRecord(
                subject=subject,
                test_number=index + 1,
                marks=marks,
                difficulty=score_to_difficulty(marks),
                attempted_at=timeline[index],
            )
            for index, marks in enumerate(scores)
        ]

        return SubjectRecord(
            subject=subject,
            tier=PerformanceTier(tier),
            scores=scores,
            attendance=attendance,
            tests=tests,
        )
