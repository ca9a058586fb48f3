"""
AcadBoost - Performance API
Merged per-subject views for dashboards, profiles and planners
"""
import uuid

from fastapi import APIRouter

from acadboost.api.deps import DbSession, to_http_error
from acadboost.core.exceptions import PerformanceEngineError
from acadboost.schemas.performance import StudentPerformanceResponse
from acadboost.services.performance import PerformanceService

router = APIRouter(prefix="/performance", tags=["Performance"])


@router.get("/{student_id}", response_model=StudentPerformanceResponse)
async def get_student_performance(student_id: uuid.UUID, db: DbSession):
    """Current score, average, level and trend for every subject."""
    try:
        performance = await PerformanceService(db).get_student_performance(student_id)
    except PerformanceEngineError as e:
        raise to_http_error(e)

    return StudentPerformanceResponse.model_validate(performance)
