"""
AcadBoost - API Tests
"""
import uuid

import pytest
from httpx import AsyncClient

from acadboost.api.deps import get_seeder
from acadboost.core.exceptions import ExternalServiceError
from acadboost.main import app
from acadboost.services.seeder import StudentSeeder

SUBJECTS = ["os", "cn", "dbms", "oops", "dsa", "qa"]


class FailingSeeder(StudentSeeder):
    async def seed(self, student, distribution=None, now=None):
        raise ExternalServiceError("seeding unavailable")


async def register(client: AsyncClient, payload: dict) -> dict:
    response = await client.post("/api/v1/students", json=payload)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test the health check endpoint."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"


# ============================================================================
# Registration
# ============================================================================

@pytest.mark.asyncio
async def test_register_student_seeds_tests(client: AsyncClient, sample_student_data):
    data = await register(client, sample_student_data)

    assert data["seeded"] is True
    student = data["student"]
    assert student["email"] == sample_student_data["email"]
    assert student["role"] == "student"
    assert set(student["subjects"]) == set(SUBJECTS)
    for summary in student["subjects"].values():
        assert summary["current"] == summary["history"][-1]
        assert len(summary["history"]) == 4


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, sample_student_data):
    await register(client, sample_student_data)

    response = await client.post("/api/v1/students", json=sample_student_data)
    assert response.status_code == 409
    assert "already exists" in response.json()["detail"].lower()


@pytest.mark.asyncio
async def test_register_faculty_is_not_seeded(client: AsyncClient):
    data = await register(client, {"name": "Dr Sen", "email": "sen@example.com", "role": "faculty"})

    assert data["seeded"] is False
    assert data["student"]["subjects"] == {}


@pytest.mark.asyncio
async def test_register_rejects_unknown_role(client: AsyncClient):
    response = await client.post(
        "/api/v1/students",
        json={"name": "X", "email": "x@example.com", "role": "admin"},
    )
    assert response.status_code == 422


# ============================================================================
# Tests
# ============================================================================

@pytest.mark.asyncio
async def test_grouped_tests(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]

    response = await client.get(f"/api/v1/tests/{student_id}")
    assert response.status_code == 200
    subjects = response.json()["subjects"]
    assert set(subjects) == set(SUBJECTS)
    assert subjects["oops"]["subject_name"] == "Object-Oriented Programming"
    assert [t["test_number"] for t in subjects["oops"]["tests"]] == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_subject_tests(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]

    response = await client.get(f"/api/v1/tests/{student_id}/OS")
    assert response.status_code == 200
    data = response.json()
    assert data["subject"] == "os"
    assert data["subject_name"] == "Operating System"
    assert [t["topic"] for t in data["tests"]] == ["OS Topic 1", "OS Topic 2", "OS Topic 3", "OS Topic 4"]


@pytest.mark.asyncio
async def test_subject_tests_unknown_subject(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]

    response = await client.get(f"/api/v1/tests/{student_id}/physics")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_tests_unknown_student(client: AsyncClient):
    response = await client.get(f"/api/v1/tests/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invalid_student_id(client: AsyncClient):
    response = await client.get("/api/v1/tests/not-a-uuid")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_reseed_existing_returns_200(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]
    before = (await client.get(f"/api/v1/tests/{student_id}")).json()["subjects"]

    response = await client.post(f"/api/v1/tests/{student_id}/reseed")

    assert response.status_code == 200
    data = response.json()
    assert data["seeded"] is False
    assert data["subjects"] == before


@pytest.mark.asyncio
async def test_reseed_unseeded_student_returns_201(client: AsyncClient, student):
    response = await client.post(f"/api/v1/tests/{student.id}/reseed")

    assert response.status_code == 201
    data = response.json()
    assert data["seeded"] is True
    assert sum(len(s["tests"]) for s in data["subjects"].values()) == 24


@pytest.mark.asyncio
async def test_reseed_faculty_is_rejected(client: AsyncClient, faculty):
    response = await client.post(f"/api/v1/tests/{faculty.id}/reseed")
    assert response.status_code == 400


# ============================================================================
# Performance
# ============================================================================

@pytest.mark.asyncio
async def test_performance_merges_all_subjects(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]

    response = await client.get(f"/api/v1/performance/{student_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == sample_student_data["name"]
    assert [s["subject"] for s in data["subjects"]] == SUBJECTS
    for view in data["subjects"]:
        assert view["test_count"] == 4
        assert view["current"] == view["scores"][-1]
        assert view["trend"] in {"improving", "declining", "stable"}
        assert view["level"] in {"High", "Medium", "Low"}
        assert len(view["topics"]) == 4


@pytest.mark.asyncio
async def test_performance_unknown_student(client: AsyncClient):
    response = await client.get(f"/api/v1/performance/{uuid.uuid4()}")
    assert response.status_code == 404


# ============================================================================
# Marks
# ============================================================================

@pytest.mark.asyncio
async def test_get_marks(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]

    response = await client.get(f"/api/v1/students/{student_id}/marks")
    assert response.status_code == 200
    assert set(response.json()["subjects"]) == set(SUBJECTS)


@pytest.mark.asyncio
async def test_update_subject_marks(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]

    response = await client.put(f"/api/v1/students/{student_id}/marks/dsa", json={"score": 92})
    assert response.status_code == 200
    data = response.json()
    assert data["subject"] == "dsa"
    assert data["current"] == 92
    assert data["level"] == "High"
    assert data["history"][-1] == 92
    assert len(data["history"]) == 5


@pytest.mark.asyncio
async def test_update_subject_marks_validation(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]

    response = await client.put(f"/api/v1/students/{student_id}/marks/dsa", json={"score": 150})
    assert response.status_code == 400

    response = await client.put(f"/api/v1/students/{student_id}/marks/music", json={"score": 50})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_bulk_update_marks(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]

    response = await client.put(
        f"/api/v1/students/{student_id}/marks",
        json={"marks": {"os": 20, "qa": 80}},
    )
    assert response.status_code == 200
    updated = response.json()["updated_subjects"]
    assert updated["os"]["level"] == "Low"
    assert updated["qa"]["current"] == 80


@pytest.mark.asyncio
async def test_bulk_update_marks_rejects_batch(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]
    before = (await client.get(f"/api/v1/students/{student_id}/marks")).json()["subjects"]

    response = await client.put(
        f"/api/v1/students/{student_id}/marks",
        json={"marks": {"os": 20, "qa": -5}},
    )
    assert response.status_code == 400

    after = (await client.get(f"/api/v1/students/{student_id}/marks")).json()["subjects"]
    assert after == before


@pytest.mark.asyncio
async def test_faculty_marks_rejected(client: AsyncClient, faculty):
    response = await client.get(f"/api/v1/students/{faculty.id}/marks")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_register_succeeds_when_seeding_fails(client: AsyncClient, db_session, sample_student_data):
    app.dependency_overrides[get_seeder] = lambda: FailingSeeder(db_session)
    try:
        data = await register(client, sample_student_data)
    finally:
        app.dependency_overrides.pop(get_seeder)

    assert data["seeded"] is False
    assert data["student"]["subjects"] == {}

    student_id = data["student"]["id"]
    response = await client.get(f"/api/v1/tests/{student_id}")
    assert response.status_code == 200
    assert response.json()["subjects"] == {}

    response = await client.post(f"/api/v1/tests/{student_id}/reseed")
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_bulk_update_rejects_fractional_and_repeated(client: AsyncClient, sample_student_data):
    student_id = (await register(client, sample_student_data))["student"]["id"]

    response = await client.put(f"/api/v1/students/{student_id}/marks", json={"marks": {"os": 74.9}})
    assert response.status_code == 400

    response = await client.put(f"/api/v1/students/{student_id}/marks", json={"marks": {"os": 80, "OS": 20}})
    assert response.status_code == 400
