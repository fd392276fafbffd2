"""Experience matcher output."""

from pydantic import BaseModel, Field


class ExperienceMatch(BaseModel):
    area: str
    required: float = 0.0  # years
    actual: float = 0.0  # years
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    bonus: float = 0.0  # credit for exceeding the requirement
    relevance: float = Field(default=1.0, ge=0.0, le=1.0)


class ExperienceMatchResult(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    matches: list[ExperienceMatch] = []
    gaps: list[str] = []  # areas under the sufficiency threshold
    recommendations: list[str] = []

    model_config = {"frozen": True}
