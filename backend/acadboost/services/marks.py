"""
AcadBoost - Marks Service
Manual score updates against the embedded subject summaries.
"""
import copy
import logging
import uuid
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from acadboost.core.exceptions import InvalidMarksError, MissingDataError
from acadboost.models.student import Student
from acadboost.models.subject import SubjectKey, parse_subject
from acadboost.services.classification import score_to_level

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100


def validate_score(subject: SubjectKey, score: Any) -> int:
    """
    Check a raw score is a whole number in 0..100.

    Raises:
        InvalidMarksError: On non-numeric, fractional or out-of-range scores
    """
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise InvalidMarksError(f"Score for {subject.value} must be a number")
    if isinstance(score, float) and not score.is_integer():
        raise InvalidMarksError(f"Score for {subject.value} must be a whole number")
    if score < MIN_SCORE or score > MAX_SCORE:
        raise InvalidMarksError(f"Score for {subject.value} must be between {MIN_SCORE} and {MAX_SCORE}")
    return int(score)


def apply_score(summary: Mapping[str, Any], score: int) -> dict[str, Any]:
    """New summary with `score` appended to history. The input is left untouched."""
    updated = copy.deepcopy(dict(summary))
    updated["history"] = list(updated.get("history") or []) + [score]
    updated["current"] = score
    updated["level"] = score_to_level(score).value
    return updated


class MarksService:
    """Read and update a student's subject marks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_student(self, student_id: uuid.UUID) -> Student:
        """
        Raises:
            MissingDataError: If the student does not exist
            InvalidMarksError: If the user is not a student
        """
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise MissingDataError(f"Student {student_id} not found")
        if not student.is_student:
            raise InvalidMarksError("User is not a student")
        return student

    async def get_marks(self, student_id: uuid.UUID) -> Student:
        return await self.get_student(student_id)

    @staticmethod
    def _existing_summary(student: Student, subject: SubjectKey) -> Mapping[str, Any]:
        summary = (student.subjects or {}).get(subject.value)
        if not summary:
            raise MissingDataError(f"Subject {subject.value} not found for student {student.id}")
        return summary

    async def update_subject_marks(
        self,
        student_id: uuid.UUID,
        subject: str,
        score: Any,
    ) -> dict[str, Any]:
        """
        Record a new score for one subject.

        Returns:
            The updated subject summary
        """
        updated = await self.bulk_update_marks(student_id, {subject: score})
        return updated[parse_subject(subject).value]

    async def bulk_update_marks(
        self,
        student_id: uuid.UUID,
        marks: Mapping[str, Any],
    ) -> dict[str, dict[str, Any]]:
        """
        Record new scores for several subjects at once.

        Every entry is validated before anything changes, so one bad key or
        score rejects the whole batch.

        Raises:
            ConfigurationError: Unknown subject key
            InvalidMarksError: Bad score, repeated subject, empty batch or non-student user
            MissingDataError: Unknown student or subject without a summary
        """
        if not marks:
            raise InvalidMarksError("Please provide marks to update")

        student = await self.get_student(student_id)

        validated: dict[SubjectKey, tuple[int, Mapping[str, Any]]] = {}
        for raw_subject, score in marks.items():
            subject = parse_subject(raw_subject)
            # "os" and "OS" name the same subject
            if subject in validated:
                raise InvalidMarksError(f"Subject {subject.value} appears more than once")
            validated[subject] = (validate_score(subject, score), self._existing_summary(student, subject))

        subjects = copy.deepcopy(dict(student.subjects or {}))
        updated: dict[str, dict[str, Any]] = {}
        for subject, (score, summary) in validated.items():
            updated[subject.value] = apply_score(summary, score)
            subjects[subject.value] = updated[subject.value]

        student.subjects = subjects
        await self.db.flush()

        logger.info("Updated marks for student %s: %s", student_id, ", ".join(updated))
        return updated
