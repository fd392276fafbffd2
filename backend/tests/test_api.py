import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_assessor
from conftest import FailingProvider, OrthogonalProvider, make_assessor
from main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def fake_assessor():
    app.dependency_overrides[get_assessor] = lambda: make_assessor(OrthogonalProvider())
    yield
    app.dependency_overrides.clear()


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["embedding_provider"] == "orthogonal"
    assert data["similarity_configured"] is True


def test_compatibility(junior_resume, senior_job):
    response = client.post("/compatibility", json={"resume": junior_resume, "job": senior_job})
    assert response.status_code == 200
    data = response.json()
    assert 0 <= data["compatibility_score"] <= 100
    assert data["compatibility_level"] in ("excellent", "good", "potential", "poor", "incompatible")
    assert data["status"] == "complete"
    assert data["metadata"]["missing_critical_skills"] == ["aws"]
    assert data["metadata"]["assessment_version"] == "2.0"
    assert isinstance(data["suggestions"], list)
    assert [s["name"] for s in data["breakdown"]["adjustments"]][-1] == "clamp"


def test_compatibility_validation_error(junior_resume, senior_job):
    junior_resume["personal_details"] = {}
    response = client.post("/compatibility", json={"resume": junior_resume, "job": senior_job})
    assert response.status_code == 422
    data = response.json()
    assert data["status"] == "validation_error"
    assert "Missing first name" in data["errors"]


def test_compatibility_degraded(junior_resume, senior_job):
    app.dependency_overrides[get_assessor] = lambda: make_assessor(FailingProvider())
    response = client.post("/compatibility", json={"resume": junior_resume, "job": senior_job})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["metadata"]["has_warnings"] is True


def test_compatibility_similarity_required(junior_resume, senior_job):
    app.dependency_overrides[get_assessor] = lambda: make_assessor(
        FailingProvider(), require_similarity=True,
    )
    response = client.post("/compatibility", json={"resume": junior_resume, "job": senior_job})
    assert response.status_code == 503


def test_compatibility_rejects_malformed_body():
    response = client.post("/compatibility", json={"resume": "not an object"})
    assert response.status_code == 422


def test_sanitize(junior_resume):
    response = client.post("/sanitize", json={"resume": junior_resume})
    assert response.status_code == 200
    data = response.json()
    assert data["errors"] == []
    assert data["metadata"]["stages_run"][0] == "basic_fields"
    assert data["data"]["skills"] == ["JavaScript", "React", "Express"]
