"""
AcadBoost - API Dependencies
FastAPI dependencies for sessions, services and error translation
"""
from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from acadboost.ai.enrichment import EnrichmentService, get_enrichment_service
from acadboost.core.database import get_db
from acadboost.core.exceptions import (
    ConfigurationError,
    DuplicateRecordError,
    InvalidMarksError,
    MissingDataError,
    PerformanceEngineError,
    StudentExistsError,
)
from acadboost.services.seeder import StudentSeeder

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_enrichment() -> EnrichmentService:
    """Enrichment service for seeding. Overridden in tests."""
    return get_enrichment_service()


async def get_seeder(
    db: DbSession,
    enrichment: Annotated[EnrichmentService, Depends(get_enrichment)],
) -> StudentSeeder:
    return StudentSeeder(db, enrichment=enrichment)


Seeder = Annotated[StudentSeeder, Depends(get_seeder)]


def to_http_error(error: PerformanceEngineError) -> HTTPException:
    """Translate a domain error into the matching HTTP status."""
    if isinstance(error, MissingDataError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (DuplicateRecordError, StudentExistsError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, (ConfigurationError, InvalidMarksError)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(error))
