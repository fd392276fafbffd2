import time
from types import SimpleNamespace

import numpy as np
import pytest

from config import SimilarityConfig, settings
from conftest import (
    FAST_SIMILARITY,
    ConstantProvider,
    FailingProvider,
    FlakyProvider,
    OrthogonalProvider,
)
from services import gemini_client
from services.errors import SimilarityUnavailableError
from services.similarity import (
    NEUTRAL_SIMILARITY,
    GeminiEmbeddingProvider,
    SentenceTransformerProvider,
    SimilarityService,
    assess_similarity,
    combine_chunk_similarities,
    get_provider,
    sharpen,
    split_into_chunks,
)


class SlowProvider:
    name = "slow"

    def embed(self, texts):
        time.sleep(1.0)
        return [[1.0] for _ in texts]


class ShortProvider:
    name = "short"

    def embed(self, texts):
        return [[1.0, 0.0]]


class RaggedProvider:
    """Each text gets a vector of a different length."""

    name = "ragged"

    def embed(self, texts):
        return [[1.0] * (i + 1) for i in range(len(texts))]


class TestChunking:
    def test_short_text_is_one_chunk(self):
        assert split_into_chunks("Just one sentence.") == ["Just one sentence."]

    def test_groups_sentences_up_to_limit(self):
        assert split_into_chunks("One. Two. Three.", max_chars=9) == ["One. Two.", "Three."]

    def test_empty(self):
        assert split_into_chunks("   ") == []


class TestScoring:
    def test_combine_weights_best_pair(self):
        matrix = np.array([[0.2, 0.9], [0.5, 0.1]])
        assert combine_chunk_similarities(matrix) == pytest.approx(0.7 * 0.9 + 0.3 * (0.9 + 0.5 + 0.2) / 3)

    def test_combine_single_pair(self):
        assert combine_chunk_similarities(np.array([[0.4]])) == pytest.approx(0.4)

    def test_sharpen_fixed_points(self):
        assert sharpen(-1.0) == pytest.approx(0.0)
        assert sharpen(0.0) == pytest.approx(0.5)
        assert sharpen(1.0) == pytest.approx(1.0)

    def test_sharpen_is_monotone_and_stretches(self):
        values = [sharpen(c / 10) for c in range(-10, 11)]
        assert values == sorted(values)
        assert sharpen(0.2) > (0.2 + 1) / 2


class TestSimilarityService:
    def test_identical_embeddings(self):
        service = SimilarityService(ConstantProvider(), FAST_SIMILARITY)
        assert service.similarity("resume text", "job text") == pytest.approx(1.0)

    def test_orthogonal_embeddings_are_neutral(self):
        service = SimilarityService(OrthogonalProvider(), FAST_SIMILARITY)
        assert service.similarity("resume text", "job text") == pytest.approx(0.5)

    def test_empty_text_skips_provider(self):
        provider = OrthogonalProvider()
        service = SimilarityService(provider, FAST_SIMILARITY)
        assert service.similarity("", "job text") == NEUTRAL_SIMILARITY
        assert provider.calls == 0

    def test_no_provider(self):
        with pytest.raises(SimilarityUnavailableError, match="no embedding provider"):
            SimilarityService(None).similarity("a", "b")

    def test_retries_then_gives_up(self):
        provider = FailingProvider()
        service = SimilarityService(provider, FAST_SIMILARITY)
        with pytest.raises(SimilarityUnavailableError, match="after 3 attempts"):
            service.similarity("a", "b")
        assert provider.calls == FAST_SIMILARITY.max_retries + 1

    def test_recovers_from_transient_failure(self):
        provider = FlakyProvider(failures=1)
        service = SimilarityService(provider, FAST_SIMILARITY)
        assert service.similarity("a", "b") == pytest.approx(1.0)
        assert provider.calls == 2

    def test_wrong_embedding_count(self):
        service = SimilarityService(ShortProvider(), FAST_SIMILARITY)
        with pytest.raises(SimilarityUnavailableError, match="wrong number"):
            service.similarity("a", "b")

    def test_ragged_embeddings(self):
        service = SimilarityService(RaggedProvider(), FAST_SIMILARITY)
        with pytest.raises(SimilarityUnavailableError, match="malformed"):
            service.similarity("a", "b")


class TestAssessSimilarity:
    @pytest.mark.asyncio
    async def test_available(self):
        outcome = await assess_similarity(SimilarityService(ConstantProvider(), FAST_SIMILARITY), "a", "b")
        assert outcome.available
        assert outcome.similarity == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_failure_is_neutral(self):
        outcome = await assess_similarity(SimilarityService(FailingProvider(), FAST_SIMILARITY), "a", "b")
        assert not outcome.available
        assert outcome.similarity == NEUTRAL_SIMILARITY
        assert "failing" in outcome.reason

    @pytest.mark.asyncio
    async def test_malformed_embeddings_are_neutral(self):
        outcome = await assess_similarity(SimilarityService(RaggedProvider(), FAST_SIMILARITY), "a", "b")
        assert not outcome.available
        assert outcome.similarity == NEUTRAL_SIMILARITY
        assert "malformed" in outcome.reason

    @pytest.mark.asyncio
    async def test_timeout_is_neutral(self):
        config = SimilarityConfig(timeout_s=0.05, max_retries=0, backoff_s=0.0)
        outcome = await assess_similarity(SimilarityService(SlowProvider(), config), "a", "b")
        assert not outcome.available
        assert outcome.similarity == NEUTRAL_SIMILARITY
        assert "timed out" in outcome.reason


class TestGetProvider:
    def test_disabled(self):
        assert get_provider("none") is None

    def test_unknown(self):
        assert get_provider("word2vec") is None

    def test_sentence_transformers_loads_lazily(self):
        provider = get_provider("sentence-transformers")
        assert isinstance(provider, SentenceTransformerProvider)
        assert provider._model is None

    def test_gemini_needs_key(self, monkeypatch):
        monkeypatch.setattr(settings, "gemini_api_key", "")
        assert get_provider("gemini") is None


@pytest.mark.integration
def test_sentence_transformer_similarity():
    service = SimilarityService(SentenceTransformerProvider(), SimilarityConfig())
    related = service.similarity(
        "Python backend developer building REST APIs with FastAPI",
        "We are hiring a Python engineer to build web APIs",
    )
    unrelated = service.similarity(
        "Python backend developer building REST APIs with FastAPI",
        "Pastry chef with experience in French desserts",
    )
    assert related > unrelated


class TestGeminiProvider:
    def test_embeds_through_client(self, monkeypatch):
        calls = {}

        class FakeModels:
            def embed_content(self, model, contents):
                calls["model"] = model
                return SimpleNamespace(embeddings=[SimpleNamespace(values=[1.0, 0.0]) for _ in contents])

        monkeypatch.setattr(gemini_client, "get_client", lambda: SimpleNamespace(models=FakeModels()))
        service = SimilarityService(GeminiEmbeddingProvider("text-embedding-004"), FAST_SIMILARITY)
        assert service.similarity("resume", "job") == pytest.approx(1.0)
        assert calls["model"] == "text-embedding-004"

    def test_unconfigured_client_is_unavailable(self, monkeypatch):
        monkeypatch.setattr(gemini_client, "get_client", lambda: None)
        service = SimilarityService(GeminiEmbeddingProvider(), FAST_SIMILARITY)
        with pytest.raises(SimilarityUnavailableError, match="not configured"):
            service.similarity("resume", "job")
