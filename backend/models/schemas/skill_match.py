"""Skill matcher output."""

from typing import Literal

from pydantic import BaseModel, Field


class SkillMatch(BaseModel):
    skill: str  # normalized job skill
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    match_type: Literal["direct", "related"] = "direct"
    matched_with: str = ""  # candidate skill that satisfied it
    context: str | None = None


class SkillCompensation(BaseModel):
    """A required skill satisfied only through a related candidate skill."""
    required_skill: str
    related_skill: str
    factor: float = Field(default=0.0, ge=0.0, le=1.0)
    reason: str = ""


class SkillMatchResult(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    matches: list[SkillMatch] = []
    compensations: list[SkillCompensation] = []
    missing_critical: list[str] = []
    suggestions: list[str] = []

    model_config = {"frozen": True}

    @property
    def matched_skills(self) -> list[str]:
        return [m.skill for m in self.matches]
