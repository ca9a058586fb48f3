"""
AcadBoost - Student Schemas
Pydantic schemas for registration and marks
"""
import uuid
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from acadboost.models.student import UserRole


# ============================================================================
# Subject summaries
# ============================================================================

class AttendanceSchema(BaseModel):
    total_classes: int = 0
    attended_classes: int = 0
    percentage: float = 0.0


class SubjectSummarySchema(BaseModel):
    """Embedded per-subject rollup."""
    current: int = 0
    history: list[int] = []
    level: str = "Low"
    attendance: AttendanceSchema = AttendanceSchema()
    concepts_covered: list[str] = []
    ai_analysis: str = ""


# ============================================================================
# Registration
# ============================================================================

class StudentCreate(BaseModel):
    """Schema for user registration."""
    name: Annotated[str, Field(min_length=1, max_length=200)]
    email: EmailStr
    role: UserRole = UserRole.STUDENT


class StudentResponse(BaseModel):
    """Registered user."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: str
    subjects: dict[str, SubjectSummarySchema] = {}
    created_at: datetime | None = None


class RegistrationResponse(BaseModel):
    student: StudentResponse
    seeded: bool


# ============================================================================
# Marks
# ============================================================================

class MarksResponse(BaseModel):
    student_id: uuid.UUID
    name: str
    email: str
    subjects: dict[str, SubjectSummarySchema]


class MarkUpdate(BaseModel):
    """Single subject update. Range is checked by the service."""
    score: int


class BulkMarksUpdate(BaseModel):
    """{subject: score} for any subset of subjects."""
    marks: dict[str, Any]


class SubjectMarksResponse(BaseModel):
    subject: str
    current: int
    level: str
    history: list[int]


class BulkMarksResponse(BaseModel):
    student_id: uuid.UUID
    updated_subjects: dict[str, SubjectSummarySchema]
