"""Semantic similarity between resume and job text via embeddings.

The embedding provider is an external collaborator that can be slow or
down. SimilarityService raises SimilarityUnavailableError when it cannot
produce a value; assess_similarity() is the one place that turns that
into the neutral 0.5 and reports the degradation.
"""

import asyncio
import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Protocol

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as sklearn_cosine

from config import SimilarityConfig, settings
from services.errors import SimilarityUnavailableError

logger = logging.getLogger(__name__)

NEUTRAL_SIMILARITY = 0.5
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


class EmbeddingProvider(Protocol):
    name: str

    def embed(self, texts: list[str]) -> list[list[float]]:
        ...


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------

class SentenceTransformerProvider:
    """Local sentence-transformers model, loaded on first use."""

    name = "sentence-transformers"

    def __init__(self, model_name: str | None = None):
        self.model_name = model_name or settings.embedding_model
        self._model = None

    def _get_model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            logger.info("Loading embedding model: %s", self.model_name)
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed(self, texts: list[str]) -> list[list[float]]:
        vectors = self._get_model().encode(texts, convert_to_numpy=True)
        return vectors.tolist()


class GeminiEmbeddingProvider:
    """Gemini embeddings through the shared google-genai client."""

    name = "gemini"

    def __init__(self, model_name: str | None = None):
        self.model_name = model_name or settings.gemini_embedding_model

    def embed(self, texts: list[str]) -> list[list[float]]:
        from services.gemini_client import embed_texts

        return embed_texts(texts, model=self.model_name)


def get_provider(kind: str | None = None) -> EmbeddingProvider | None:
    """Provider named by settings.embedding_provider, or None when disabled."""
    kind = kind or settings.embedding_provider
    if kind == "sentence-transformers":
        return SentenceTransformerProvider()
    if kind == "gemini":
        return GeminiEmbeddingProvider() if settings.gemini_api_key else None
    if kind != "none":
        logger.warning("Unknown embedding provider %r - similarity disabled", kind)
    return None


# ---------------------------------------------------------------------------
# Scoring helpers
# ---------------------------------------------------------------------------

def split_into_chunks(text: str, max_chars: int = 7000) -> list[str]:
    """Group sentences into chunks no longer than max_chars where possible."""
    chunks: list[str] = []
    current = ""
    for sentence in _SENTENCE_RE.split(text.strip()):
        if not sentence:
            continue
        if current and len(current) + 1 + len(sentence) > max_chars:
            chunks.append(current)
            current = sentence
        else:
            current = f"{current} {sentence}" if current else sentence
    if current:
        chunks.append(current)
    return chunks


def combine_chunk_similarities(matrix: np.ndarray) -> float:
    """0.7 * best chunk pair + 0.3 * mean of the top three pairs."""
    flat = np.sort(matrix.ravel())[::-1]
    top = flat[:3]
    return float(0.7 * flat[0] + 0.3 * top.mean())


def sharpen(cosine: float, k: float = 12.0) -> float:
    """Map cosine [-1, 1] to [0, 1] and stretch the middle with a rescaled sigmoid."""
    x = (max(-1.0, min(1.0, cosine)) + 1.0) / 2.0

    def sigmoid(v: float) -> float:
        return 1.0 / (1.0 + math.exp(-k * (v - 0.5)))

    lo, hi = sigmoid(0.0), sigmoid(1.0)
    return max(0.0, min(1.0, (sigmoid(x) - lo) / (hi - lo)))


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class SimilarityService:
    """Embedding-based similarity with retry and exponential backoff."""

    def __init__(self, provider: EmbeddingProvider | None, config: SimilarityConfig | None = None):
        self.provider = provider
        self.config = config or SimilarityConfig()

    def _embed_with_retry(self, texts: list[str]) -> list[list[float]]:
        attempts = self.config.max_retries + 1
        for attempt in range(attempts):
            try:
                return self.provider.embed(texts)
            except Exception as e:
                if attempt == attempts - 1:
                    raise SimilarityUnavailableError(
                        f"{self.provider.name} embedding failed after {attempts} attempts: {e}"
                    ) from e
                delay = self.config.backoff_s * (2 ** attempt)
                logger.warning(
                    "Embedding call failed (%s), retrying in %.1fs (attempt %d/%d)",
                    e, delay, attempt + 1, attempts,
                )
                time.sleep(delay)
        raise SimilarityUnavailableError("no embedding attempts made")

    def similarity(self, text_a: str, text_b: str) -> float:
        """Similarity in [0, 1]. Empty input carries no signal and scores neutral."""
        if self.provider is None:
            raise SimilarityUnavailableError("no embedding provider configured")
        if not text_a.strip() or not text_b.strip():
            return NEUTRAL_SIMILARITY

        chunks_a = split_into_chunks(text_a, self.config.chunk_size)
        chunks_b = split_into_chunks(text_b, self.config.chunk_size)
        vectors = self._embed_with_retry(chunks_a + chunks_b)
        if len(vectors) != len(chunks_a) + len(chunks_b):
            raise SimilarityUnavailableError("provider returned the wrong number of embeddings")

        try:
            matrix = np.asarray(vectors, dtype=float)
            if matrix.ndim != 2:
                raise ValueError(f"expected a 2-D embedding matrix, got {matrix.ndim}-D")
            if not np.all(np.isfinite(matrix)):
                raise SimilarityUnavailableError("provider returned non-finite embeddings")
            scores = sklearn_cosine(matrix[: len(chunks_a)], matrix[len(chunks_a):])
        except (ValueError, TypeError) as e:
            raise SimilarityUnavailableError("provider returned malformed embeddings") from e
        return sharpen(combine_chunk_similarities(scores), self.config.sigmoid_k)


@dataclass(frozen=True)
class SimilarityOutcome:
    similarity: float
    available: bool
    reason: str = ""


async def assess_similarity(
    service: SimilarityService, text_a: str, text_b: str,
) -> SimilarityOutcome:
    """Similarity with a bounded timeout; failures resolve to the neutral value."""
    try:
        value = await asyncio.wait_for(
            asyncio.to_thread(service.similarity, text_a, text_b),
            timeout=service.config.timeout_s,
        )
    except asyncio.TimeoutError:
        logger.warning("Similarity timed out after %.1fs", service.config.timeout_s)
        return SimilarityOutcome(NEUTRAL_SIMILARITY, False, "similarity service timed out")
    except SimilarityUnavailableError as e:
        logger.warning("Similarity unavailable: %s", e)
        return SimilarityOutcome(NEUTRAL_SIMILARITY, False, str(e))
    return SimilarityOutcome(value, True)
