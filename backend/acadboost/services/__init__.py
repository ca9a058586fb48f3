"""AcadBoost - Services initialization."""
from acadboost.services.classification import score_to_difficulty, score_to_level
from acadboost.services.marks import MarksService
from acadboost.services.performance import MergedSubjectView, PerformanceAggregator, PerformanceService, Trend
from acadboost.services.seeder import StudentSeeder
from acadboost.services.students import StudentService

__all__ = [
    "score_to_difficulty",
    "score_to_level",
    "MarksService",
    "MergedSubjectView",
    "PerformanceAggregator",
    "PerformanceService",
    "Trend",
    "StudentSeeder",
    "StudentService",
]
