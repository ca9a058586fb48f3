"""
AcadBoost - Student Seeder
Generates, enriches and persists the initial test history for a student.
"""
import asyncio
import logging
import random
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from acadboost.ai.core.telemetry import service_span
from acadboost.ai.enrichment import EnrichmentService, TestSnapshot, local_subject_analysis
from acadboost.core.exceptions import DuplicateRecordError, InvalidMarksError, MissingDataError
from acadboost.models.student import Student
from acadboost.models.subject import SUBJECT_NAMES, SUBJECT_ORDER, parse_subject
from acadboost.models.test_record import TestRecord
from acadboost.services.generation import (
    ScoreTierSampler,
    SubjectRecord,
    SubjectRecordBuilder,
    TierDistribution,
)

logger = logging.getLogger(__name__)


def build_summary(record: SubjectRecord, topics: list[str]) -> dict[str, Any]:
    """Embedded subject summary stored on the student."""
    level = record.current_level
    return {
        "current": record.current,
        "history": list(record.scores),
        "level": level.value,
        "attendance": record.attendance.to_dict(),
        "concepts_covered": list(topics),
        "ai_analysis": local_subject_analysis(record.scores, level),
    }


def serialize_test(record: TestRecord) -> dict[str, Any]:
    return {
        "test_number": record.test_number,
        "marks": record.marks,
        "difficulty": record.difficulty,
        "topic": record.topic or "",
        "ai_insights": record.ai_insights or "",
        "attempted_at": record.attempted_at,
    }


class StudentSeeder:
    """
    One seeding pass for a student.

    Tiers are sampled once for the whole student, then each subject is built,
    enriched concurrently and written in a single flush.
    """

    def __init__(
        self,
        db: AsyncSession,
        enrichment: Optional[EnrichmentService] = None,
        rng: Optional[random.Random] = None,
    ):
        self.db = db
        self.enrichment = enrichment or EnrichmentService()
        rng = rng or random.Random()
        self.sampler = ScoreTierSampler(rng)
        self.builder = SubjectRecordBuilder(rng)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_student(self, student_id: uuid.UUID) -> Student:
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise MissingDataError(f"Student {student_id} not found")
        return student

    async def count_records(self, student_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count(TestRecord.id)).where(TestRecord.student_id == student_id)
        )
        return result.scalar() or 0

    async def get_records(self, student_id: uuid.UUID) -> list[TestRecord]:
        result = await self.db.execute(
            select(TestRecord)
            .where(TestRecord.student_id == student_id)
            .order_by(TestRecord.subject, TestRecord.test_number)
        )
        return list(result.scalars().all())

    async def get_grouped_tests(self, student_id: uuid.UUID) -> dict[str, dict[str, Any]]:
        """
        Records grouped by subject.

        Returns:
            {subject: {"subject_name": ..., "tests": [...]}}, sorted by subject then test number
        """
        await self.get_student(student_id)
        grouped: dict[str, dict[str, Any]] = {}
        for record in await self.get_records(student_id):
            subject = parse_subject(record.subject)
            entry = grouped.setdefault(
                subject.value,
                {"subject_name": SUBJECT_NAMES[subject], "tests": []},
            )
            entry["tests"].append(serialize_test(record))
        return grouped

    async def get_subject_tests(self, student_id: uuid.UUID, subject: str) -> list[TestRecord]:
        subject = parse_subject(subject)
        await self.get_student(student_id)
        result = await self.db.execute(
            select(TestRecord)
            .where(
                TestRecord.student_id == student_id,
                TestRecord.subject == subject.value,
            )
            .order_by(TestRecord.test_number)
        )
        return list(result.scalars().all())

    # =========================================================================
    # Seeding
    # =========================================================================

    async def _enrich(self, record: SubjectRecord) -> list[str]:
        """Fill topics and insights on the drafts. Returns the topic list."""
        topics = await self.enrichment.generate_topics(record.subject)
        for test, topic in zip(record.tests, topics):
            test.topic = topic

        snapshots = [
            TestSnapshot(
                test_number=t.test_number,
                marks=t.marks,
                difficulty=t.difficulty.value,
                topic=t.topic,
            )
            for t in record.tests
        ]
        analyses = await self.enrichment.generate_batch_analysis(record.subject, snapshots)
        for test, analysis in zip(record.tests, analyses):
            test.ai_insights = analysis
        return topics

    async def _ensure_no_records(self, student_id: uuid.UUID) -> None:
        result = await self.db.execute(
            select(TestRecord.subject, TestRecord.test_number)
            .where(TestRecord.student_id == student_id)
            .order_by(TestRecord.subject, TestRecord.test_number)
            .limit(1)
        )
        existing = result.first()
        if existing is not None:
            raise DuplicateRecordError(student_id, existing.subject, existing.test_number)

    async def seed(
        self,
        student: Student,
        distribution: Optional[TierDistribution] = None,
        now: Optional[datetime] = None,
    ) -> dict[str, dict[str, Any]]:
        """
        Generate and persist 4 tests for each of the 6 subjects.

        Args:
            student: Student to seed. Must be flushed (has an id).
            distribution: Force a tier template instead of sampling one.
            now: Reference time for the test timeline.

        Returns:
            Seed result {subject: summary}, also stored on `student.subjects`

        Raises:
            InvalidMarksError: If the user is not a student
            DuplicateRecordError: If any test record already exists
        """
        # Read before any rollback expires the instance
        student_id = student.id
        if not student.is_student:
            raise InvalidMarksError(f"User {student_id} is not a student")

        with service_span("seed_student", type(self).__name__, {"student_id": student_id}):
            await self._ensure_no_records(student_id)

            tiers = self.sampler.sample(distribution)
            records = [
                self.builder.build(subject, tiers[subject], now=now)
                for subject in SUBJECT_ORDER
            ]

            topic_lists = await asyncio.gather(*(self._enrich(r) for r in records))

            self.db.add_all(
                TestRecord(
                    student_id=student_id,
                    subject=draft.subject.value,
                    test_number=draft.test_number,
                    marks=draft.marks,
                    difficulty=draft.difficulty.value,
                    topic=draft.topic,
                    ai_insights=draft.ai_insights,
                    attempted_at=draft.attempted_at,
                )
                for record in records
                for draft in record.tests
            )

            seed_result = {
                record.subject.value: build_summary(record, topics)
                for record, topics in zip(records, topic_lists)
            }
            # Reassign so the JSON column is flagged dirty
            student.subjects = seed_result

            try:
                await self.db.flush()
            except IntegrityError as e:
                await self.db.rollback()
                raise DuplicateRecordError(student_id) from e

        logger.info(
            "Seeded %d tests for student %s (%s)",
            sum(len(r.tests) for r in records),
            student_id,
            ", ".join(f"{r.subject.value}={r.tier.value}" for r in records),
        )
        return seed_result

    async def reseed(
        self,
        student_id: uuid.UUID,
        distribution: Optional[TierDistribution] = None,
    ) -> tuple[bool, dict[str, dict[str, Any]]]:
        """
        Seed only when the student has no test records.

        Returns:
            (seeded, grouped tests)
        """
        student = await self.get_student(student_id)
        if await self.count_records(student_id) > 0:
            logger.info("Student %s already has tests, skipping reseed", student_id)
            return False, await self.get_grouped_tests(student_id)

        await self.seed(student, distribution=distribution)
        return True, await self.get_grouped_tests(student_id)
