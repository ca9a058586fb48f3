"""
AcadBoost - Students API
Registration and manual marks management
"""
import uuid

from fastapi import APIRouter, status

from acadboost.api.deps import DbSession, Seeder, to_http_error
from acadboost.core.exceptions import PerformanceEngineError
from acadboost.models.subject import parse_subject
from acadboost.schemas.student import (
    BulkMarksResponse,
    BulkMarksUpdate,
    MarksResponse,
    MarkUpdate,
    RegistrationResponse,
    StudentCreate,
    StudentResponse,
    SubjectMarksResponse,
)
from acadboost.services.marks import MarksService
from acadboost.services.students import StudentService

router = APIRouter(prefix="/students", tags=["Students"])


@router.post("", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_student(request: StudentCreate, db: DbSession, seeder: Seeder):
    """
    Register a user.
    Students are seeded with 4 tests per subject; a failed seed does not fail registration.
    """
    service = StudentService(db, seeder=seeder)
    try:
        student, seeded = await service.register(request.name, request.email, request.role)
    except PerformanceEngineError as e:
        raise to_http_error(e)

    return RegistrationResponse(student=StudentResponse.model_validate(student), seeded=seeded)


@router.get("/{student_id}/marks", response_model=MarksResponse)
async def get_student_marks(student_id: uuid.UUID, db: DbSession):
    """Embedded subject summaries for a student."""
    try:
        student = await MarksService(db).get_marks(student_id)
    except PerformanceEngineError as e:
        raise to_http_error(e)

    return MarksResponse(
        student_id=student.id,
        name=student.name,
        email=student.email,
        subjects=student.subjects or {},
    )


@router.put("/{student_id}/marks/{subject}", response_model=SubjectMarksResponse)
async def update_student_marks(
    student_id: uuid.UUID,
    subject: str,
    request: MarkUpdate,
    db: DbSession,
):
    """Append a new score to one subject."""
    try:
        summary = await MarksService(db).update_subject_marks(student_id, subject, request.score)
        key = parse_subject(subject)
    except PerformanceEngineError as e:
        raise to_http_error(e)

    return SubjectMarksResponse(
        subject=key.value,
        current=summary["current"],
        level=summary["level"],
        history=summary["history"],
    )


@router.put("/{student_id}/marks", response_model=BulkMarksResponse)
async def bulk_update_marks(student_id: uuid.UUID, request: BulkMarksUpdate, db: DbSession):
    """Append new scores to several subjects. Any invalid entry rejects the batch."""
    try:
        updated = await MarksService(db).bulk_update_marks(student_id, request.marks)
    except PerformanceEngineError as e:
        raise to_http_error(e)

    return BulkMarksResponse(student_id=student_id, updated_subjects=updated)
