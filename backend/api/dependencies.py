"""Shared dependencies for API routes."""

from functools import lru_cache

from config import settings
from services.compatibility_assessor import CompatibilityAssessor
from services.similarity import SimilarityService, get_provider


@lru_cache(maxsize=1)
def get_assessor() -> CompatibilityAssessor:
    similarity = SimilarityService(get_provider(), settings.compatibility.similarity)
    return CompatibilityAssessor(config=settings.compatibility, similarity=similarity)
