"""
AcadBoost - Test Record Schemas
Pydantic schemas for the seeded test history
"""
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TestRecordResponse(BaseModel):
    """A single graded test."""
    model_config = ConfigDict(from_attributes=True)

    test_number: int
    marks: int
    difficulty: str
    topic: str = ""
    ai_insights: str = ""
    attempted_at: datetime


class SubjectTests(BaseModel):
    subject_name: str
    tests: list[TestRecordResponse]


class GroupedTestsResponse(BaseModel):
    """Tests for every seeded subject, keyed by subject."""
    student_id: uuid.UUID
    seeded: bool = False
    subjects: dict[str, SubjectTests]


class SubjectTestsResponse(BaseModel):
    student_id: uuid.UUID
    subject: str
    subject_name: str
    tests: list[TestRecordResponse]
