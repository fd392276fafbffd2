from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    embedding_provider: str = "none"
    similarity_configured: bool = False
