"""Google Gemini embedding client."""

import logging

from google import genai

from config import settings

logger = logging.getLogger(__name__)

_client: genai.Client | None = None


def get_client() -> genai.Client | None:
    global _client
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY set - Gemini embeddings disabled")
        return None
    if _client is None:
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


def embed_texts(texts: list[str], model: str | None = None) -> list[list[float]]:
    """Embed texts with Gemini.

    Raises RuntimeError when no client is configured; API errors propagate
    so the caller's retry policy can handle them.
    """
    client = get_client()
    if client is None:
        raise RuntimeError("Gemini client not configured")

    try:
        response = client.models.embed_content(
            model=model or settings.gemini_embedding_model,
            contents=texts,
        )
    except Exception as e:
        logger.error("Gemini embedding error: %s", e)
        raise
    return [list(e.values) for e in response.embeddings]
