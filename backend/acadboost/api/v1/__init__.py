"""AcadBoost - API v1 Router."""
from fastapi import APIRouter

from acadboost.api.v1.students import router as students_router
from acadboost.api.v1.tests import router as tests_router
from acadboost.api.v1.performance import router as performance_router

api_router = APIRouter()

api_router.include_router(students_router)
api_router.include_router(tests_router)
api_router.include_router(performance_router)
