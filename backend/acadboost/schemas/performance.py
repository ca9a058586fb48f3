"""
AcadBoost - Performance Schemas
Merged per-subject views served to dashboards
"""
import uuid

from pydantic import BaseModel, ConfigDict

from acadboost.models.subject import PerformanceLevel, SubjectKey
from acadboost.schemas.student import AttendanceSchema
from acadboost.services.performance import Trend


class MergedSubjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subject: SubjectKey
    subject_name: str
    current: int
    scores: list[int]
    average: float
    level: PerformanceLevel
    trend: Trend
    test_count: int
    attendance: AttendanceSchema
    topics: list[str] = []


class StudentPerformanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: uuid.UUID
    name: str
    subjects: list[MergedSubjectResponse]
