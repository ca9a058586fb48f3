"""
AcadBoost - Domain Exceptions
Error taxonomy shared by generation, seeding and aggregation
"""
from typing import Optional


class PerformanceEngineError(Exception):
    """Base error for the performance engine."""
    pass


class ConfigurationError(PerformanceEngineError):
    """Invalid tier catalog or unknown subject key."""
    pass


class DuplicateRecordError(PerformanceEngineError):
    """Test records already exist for a student, optionally naming the first conflict."""

    def __init__(self, student_id, subject: Optional[str] = None, test_number: Optional[int] = None):
        self.student_id = student_id
        self.subject = subject
        self.test_number = test_number
        if subject is None:
            message = f"Test records already exist for student {student_id}"
        else:
            message = (
                f"Test {test_number} for subject '{subject}' already exists "
                f"for student {student_id}"
            )
        super().__init__(message)


class ExternalServiceError(PerformanceEngineError):
    """Generative text call failed, timed out or returned malformed content."""
    pass


class MissingDataError(PerformanceEngineError):
    """Requested student or subject data does not exist."""
    pass


class InvalidMarksError(PerformanceEngineError):
    """Score outside 0..100, or marks requested for a non-student user."""
    pass


class StudentExistsError(PerformanceEngineError):
    """A user is already registered with this email."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User already exists with email {email}")
