"""AcadBoost - Models initialization."""
from acadboost.models.student import Student, UserRole
from acadboost.models.subject import (
    SubjectKey,
    PerformanceLevel,
    Difficulty,
    SUBJECT_ORDER,
    SUBJECT_NAMES,
)
from acadboost.models.test_record import TestRecord


__all__ = [
    # Student models
    "Student",
    "UserRole",
    # Subject catalog
    "SubjectKey",
    "PerformanceLevel",
    "Difficulty",
    "SUBJECT_ORDER",
    "SUBJECT_NAMES",
    # Test records
    "TestRecord",
]
