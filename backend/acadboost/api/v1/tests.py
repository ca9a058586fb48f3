"""
AcadBoost - Tests API
Read and reseed a student's test history
"""
import uuid

from fastapi import APIRouter, Response, status

from acadboost.api.deps import Seeder, to_http_error
from acadboost.core.exceptions import PerformanceEngineError
from acadboost.models.subject import subject_name
from acadboost.schemas.test_record import GroupedTestsResponse, SubjectTestsResponse, TestRecordResponse

router = APIRouter(prefix="/tests", tags=["Tests"])


@router.get("/{student_id}", response_model=GroupedTestsResponse)
async def get_student_tests(student_id: uuid.UUID, seeder: Seeder):
    """All tests for a student, grouped by subject."""
    try:
        grouped = await seeder.get_grouped_tests(student_id)
    except PerformanceEngineError as e:
        raise to_http_error(e)

    return GroupedTestsResponse(student_id=student_id, subjects=grouped)


@router.get("/{student_id}/{subject}", response_model=SubjectTestsResponse)
async def get_subject_tests(student_id: uuid.UUID, subject: str, seeder: Seeder):
    """Tests for one subject, in test order."""
    try:
        records = await seeder.get_subject_tests(student_id, subject)
        name = subject_name(subject)
    except PerformanceEngineError as e:
        raise to_http_error(e)

    return SubjectTestsResponse(
        student_id=student_id,
        subject=subject.strip().lower(),
        subject_name=name,
        tests=[TestRecordResponse.model_validate(r) for r in records],
    )


@router.post("/{student_id}/reseed", response_model=GroupedTestsResponse)
async def reseed_student_tests(student_id: uuid.UUID, seeder: Seeder, response: Response):
    """
    Seed tests for a student with none.
    Returns 201 when tests were created, 200 with the existing tests otherwise.
    """
    try:
        seeded, grouped = await seeder.reseed(student_id)
    except PerformanceEngineError as e:
        raise to_http_error(e)

    response.status_code = status.HTTP_201_CREATED if seeded else status.HTTP_200_OK
    return GroupedTestsResponse(student_id=student_id, seeded=seeded, subjects=grouped)
