"""
AcadBoost - Test Configuration
Pytest fixtures and configuration for testing
"""
import asyncio
import os
from collections.abc import AsyncGenerator
from typing import Sequence

# Must be set before acadboost.core.config is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("TELEMETRY_EXPORTER", "none")
os.environ.setdefault("ENRICHMENT_ENABLED", "false")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///./test.db")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from acadboost.ai.enrichment import EnrichmentService, TestSnapshot
from acadboost.api.deps import get_enrichment
from acadboost.core.database import Base, get_db
from acadboost.core.exceptions import ExternalServiceError
from acadboost.main import app
from acadboost.models import Student, SubjectKey, UserRole


# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# NullPool: every test runs on its own event loop
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)

test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ============================================================================
# Fake text services
# ============================================================================

class FakeTextService:
    """Deterministic stand-in for the LLM-backed service."""

    def __init__(self):
        self.topic_calls: list[SubjectKey] = []
        self.analysis_calls: list[SubjectKey] = []

    async def generate_topics(self, subject: SubjectKey) -> list[str]:
        self.topic_calls.append(subject)
        return [f"{subject.value.upper()} Topic {i}" for i in range(1, 5)]

    async def generate_batch_analysis(self, subject: SubjectKey, tests: Sequence[TestSnapshot]) -> list[str]:
        self.analysis_calls.append(subject)
        return [f"Analysis {subject.value} test {t.test_number}: {t.marks}/100" for t in tests]


class FailingTextService:
    """Every call fails the way an unreachable provider would."""

    async def generate_topics(self, subject: SubjectKey) -> list[str]:
        raise ExternalServiceError("provider unavailable")

    async def generate_batch_analysis(self, subject: SubjectKey, tests: Sequence[TestSnapshot]) -> list[str]:
        raise ExternalServiceError("provider unavailable")


class SlowTextService:
    """Never answers within the enrichment timeout."""

    async def generate_topics(self, subject: SubjectKey) -> list[str]:
        await asyncio.sleep(5)
        return ["late"] * 4

    async def generate_batch_analysis(self, subject: SubjectKey, tests: Sequence[TestSnapshot]) -> list[str]:
        await asyncio.sleep(5)
        return ["late"] * len(tests)


class MalformedTextService:
    """Answers, but with the wrong number of items."""

    async def generate_topics(self, subject: SubjectKey) -> list[str]:
        return ["only", "three", "topics"]

    async def generate_batch_analysis(self, subject: SubjectKey, tests: Sequence[TestSnapshot]) -> list[str]:
        return ["one analysis"]


@pytest.fixture
def fake_text_service() -> FakeTextService:
    return FakeTextService()


@pytest.fixture
def failing_text_service() -> FailingTextService:
    return FailingTextService()


@pytest.fixture
def slow_text_service() -> SlowTextService:
    return SlowTextService()


@pytest.fixture
def malformed_text_service() -> MalformedTextService:
    return MalformedTextService()


@pytest.fixture
def enrichment(fake_text_service: FakeTextService) -> EnrichmentService:
    return EnrichmentService(text_service=fake_text_service, timeout=1)


# ============================================================================
# Database and client
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    enrichment: EnrichmentService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session and enrichment overrides."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_enrichment] = lambda: enrichment

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def student(db_session: AsyncSession) -> Student:
    """An unseeded student."""
    user = Student(name="Asha Rao", email="asha@example.com", role=UserRole.STUDENT.value, subjects={})
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def faculty(db_session: AsyncSession) -> Student:
    user = Student(name="Prof Iyer", email="iyer@example.com", role=UserRole.FACULTY.value, subjects={})
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def sample_student_data() -> dict:
    """Sample registration payload."""
    return {
        "name": "Meera Nair",
        "email": "meera@example.com",
        "role": "student",
    }
