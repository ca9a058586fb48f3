"""
AcadBoost - Performance Aggregation
Merges test records with the embedded subject summaries into one view.

Every read path (dashboard, profile, roadmap, timetable) goes through
PerformanceAggregator so they all agree on current score, level and trend.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from acadboost.core.exceptions import MissingDataError
from acadboost.models.student import Student
from acadboost.models.subject import SUBJECT_NAMES, SUBJECT_ORDER, PerformanceLevel, SubjectKey, parse_subject
from acadboost.models.test_record import TestRecord
from acadboost.services.classification import score_to_level
from acadboost.services.generation import Attendance


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    BASELINE = "baseline"


@dataclass
class MergedSubjectView:
    """Read-time projection of one subject. Never stored."""
    subject: SubjectKey
    subject_name: str
    current: int
    scores: list[int]
    average: float
    level: PerformanceLevel
    trend: Trend
    test_count: int
    attendance: dict[str, Any] = field(default_factory=lambda: Attendance().to_dict())
    topics: list[str] = field(default_factory=list)


def score_trend(scores: Sequence[int]) -> Trend:
    """Last score against the one before it."""
    if len(scores) < 2:
        return Trend.BASELINE
    if scores[-1] > scores[-2]:
        return Trend.IMPROVING
    if scores[-1] < scores[-2]:
        return Trend.DECLINING
    return Trend.STABLE


class PerformanceAggregator:
    """Pure merge of test records and summaries. Inputs are never mutated."""

    def merge(
        self,
        subject: "str | SubjectKey",
        records: Sequence[TestRecord],
        summary: Optional[Mapping[str, Any]] = None,
    ) -> MergedSubjectView:
        subject = parse_subject(subject)
        summary = summary or {}
        ordered = sorted(records, key=lambda r: r.test_number)

        # Test records win over the summary history
        if ordered:
            scores = [int(r.marks) for r in ordered]
        else:
            scores = [int(s) for s in summary.get("history") or []]

        if scores:
            current = scores[-1]
        else:
            current = int(summary.get("current") or 0)

        average = round(sum(scores) / len(scores), 1) if scores else 0.0

        topics = [r.topic for r in ordered if r.topic]
        if not topics:
            topics = list(summary.get("concepts_covered") or [])

        return MergedSubjectView(
            subject=subject,
            subject_name=SUBJECT_NAMES[subject],
            current=current,
            scores=scores,
            average=average,
            level=score_to_level(current),
            trend=score_trend(scores),
            test_count=len(scores),
            attendance=dict(summary.get("attendance") or Attendance().to_dict()),
            topics=topics,
        )

    def aggregate_student(
        self,
        records: Sequence[TestRecord],
        subjects: Optional[Mapping[str, Any]] = None,
    ) -> list[MergedSubjectView]:
        """One view per tracked subject, in subject order."""
        subjects = subjects or {}
        by_subject: dict[str, list[TestRecord]] = {}
        for record in records:
            by_subject.setdefault(record.subject, []).append(record)

        return [
            self.merge(subject, by_subject.get(subject.value, []), subjects.get(subject.value))
            for subject in SUBJECT_ORDER
        ]


@dataclass
class StudentPerformance:
    student_id: uuid.UUID
    name: str
    subjects: list[MergedSubjectView]


class PerformanceService:
    """Loads a student and their records and runs the aggregator."""

    def __init__(self, db: AsyncSession, aggregator: Optional[PerformanceAggregator] = None):
        self.db = db
        self.aggregator = aggregator or PerformanceAggregator()

    async def get_student_performance(self, student_id: uuid.UUID) -> StudentPerformance:
        """
        Raises:
            MissingDataError: If the student does not exist
        """
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise MissingDataError(f"Student {student_id} not found")

        records_result = await self.db.execute(
            select(TestRecord)
            .where(TestRecord.student_id == student_id)
            .order_by(TestRecord.subject, TestRecord.test_number)
        )
        records = list(records_result.scalars().all())

        return StudentPerformance(
            student_id=student.id,
            name=student.name,
            subjects=self.aggregator.aggregate_student(records, student.subjects),
        )
