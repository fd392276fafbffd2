"""Technical density analysis results."""

from pydantic import BaseModel, Field


class TermMatch(BaseModel):
    term: str
    category: str
    confidence: float = 1.0
    reason: str = ""  # exact, token, all_words, version, industry, partial


class CategoryScore(BaseModel):
    score: float = 0.0
    matches: list[str] = []


class TechnicalDensityResult(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    matches: list[TermMatch] = []
    category_scores: dict[str, CategoryScore] = {}

    model_config = {"frozen": True}


class TechnicalRoleResult(BaseModel):
    is_technical: bool = False
    confidence: float = 0.0
    matched_terms: list[str] = []

    model_config = {"frozen": True}
