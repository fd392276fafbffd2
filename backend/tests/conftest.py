"""Shared test configuration, pytest markers and fixtures."""

from datetime import date

import pytest

from config import CompatibilityConfig, SimilarityConfig
from services.compatibility_assessor import CompatibilityAssessor
from services.similarity import SimilarityService

TODAY = date(2024, 1, 1)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: loads a real embedding model (slow)"
    )


# ---------------------------------------------------------------------------
# Fake embedding providers
# ---------------------------------------------------------------------------

class OrthogonalProvider:
    """Every text gets its own axis, so every cross pair has cosine 0 (similarity 0.5)."""

    name = "orthogonal"

    def __init__(self):
        self.calls = 0

    def embed(self, texts):
        self.calls += 1
        return [[1.0 if i == j else 0.0 for j in range(len(texts))] for i in range(len(texts))]


class ConstantProvider:
    """Every text gets the same vector, so similarity is 1.0."""

    name = "constant"

    def embed(self, texts):
        return [[1.0, 0.0, 0.0] for _ in texts]


class FailingProvider:
    name = "failing"

    def __init__(self):
        self.calls = 0

    def embed(self, texts):
        self.calls += 1
        raise RuntimeError("embedding backend is down")


class FlakyProvider:
    """Fails a fixed number of times, then behaves like ConstantProvider."""

    name = "flaky"

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    def embed(self, texts):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("transient failure")
        return [[1.0, 0.0] for _ in texts]


FAST_SIMILARITY = SimilarityConfig(timeout_s=5.0, max_retries=2, backoff_s=0.0)


def make_assessor(provider, **overrides) -> CompatibilityAssessor:
    config = CompatibilityConfig(similarity=FAST_SIMILARITY, **overrides)
    return CompatibilityAssessor(
        config=config,
        similarity=SimilarityService(provider, config.similarity),
    )


# ---------------------------------------------------------------------------
# Sample inputs
# ---------------------------------------------------------------------------

@pytest.fixture
def senior_job():
    return {
        "job_title": "Senior Software Engineer",
        "company": "Acme Corp",
        "job_description": "We need React, Node.js, AWS, 5+ years",
    }


@pytest.fixture
def junior_resume():
    return {
        "title": "Software Developer",
        "personal_details": {
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@example.com",
        },
        "work_experience": [
            {
                "job_title": "Software Developer",
                "company": "Webshop Inc",
                "start_date": "2021-01-01",
                "end_date": "2023-01-01",
                "description": "Built React interfaces with JavaScript and Express APIs.",
            },
        ],
        "skills": "JavaScript, React, Express",
    }


@pytest.fixture
def strong_resume():
    return {
        "title": "Senior Software Engineer",
        "personal_details": {
            "first_name": "Sam",
            "last_name": "Lee",
            "email": "sam@example.com",
            "summary": "Full stack engineer shipping React and Node.js services on AWS.",
        },
        "work_experience": [
            {
                "job_title": "Senior Software Engineer",
                "company": "Cloudco",
                "start_date": "2016-01-01",
                "end_date": "2023-07-01",
                "description": (
                    "Led development of React frontends and Node.js APIs deployed on AWS. "
                    "Reduced page load time by 40% for 2M users."
                ),
            },
        ],
        "skills": ["React", "Node.js", "AWS", "JavaScript", "TypeScript"],
    }
