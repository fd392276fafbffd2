"""Compatibility assessment contracts returned to consumers."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from models.schemas.experience_match import ExperienceMatchResult
from models.schemas.skill_match import SkillMatchResult


class CompatibilityLevel(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    POTENTIAL = "potential"
    POOR = "poor"
    INCOMPATIBLE = "incompatible"


class Suggestion(BaseModel):
    type: str
    message: str
    severity: Literal["blocking", "warning", "info"] = "info"

    model_config = {"frozen": True}


class ScoreStep(BaseModel):
    """One transform applied to the running score."""
    name: str
    kind: Literal["base", "compensation", "additive", "multiplicative", "clamp"]
    value: float = 0.0  # the penalty, adjustment or weight applied
    before: float = 0.0
    after: float = 0.0


class SkillsComponent(BaseModel):
    score: float = 0.0
    weight: float = 0.0
    result: SkillMatchResult = SkillMatchResult()


class ExperienceComponent(BaseModel):
    score: float = 0.0
    weight: float = 0.0
    result: ExperienceMatchResult = ExperienceMatchResult()


class ContextComponent(BaseModel):
    score: float = 0.0
    weight: float = 0.0
    relevant_factors: list[str] = []


class ScoringBreakdown(BaseModel):
    overall: float = Field(default=0.0, ge=0.0, le=1.0)
    skills: SkillsComponent = SkillsComponent()
    experience: ExperienceComponent = ExperienceComponent()
    context: ContextComponent = ContextComponent()
    adjustments: list[ScoreStep] = []


class AssessmentMetadata(BaseModel):
    skills_match: float = 0.0  # 0-100
    missing_critical_skills: list[str] = []
    experience_mismatch: bool = False
    role_type_mismatch: bool = False
    assessment_details: dict[str, Any] = {}
    assessment_timestamp: datetime
    assessment_version: str = "2.0"
    has_warnings: bool = False
    degraded_reasons: list[str] = []


class CompatibilityAssessment(BaseModel):
    """Final verdict for one (resume, job) pair. Never mutated after construction."""
    is_compatible: bool = False
    compatibility_score: float = Field(default=0.0, ge=0.0, le=100.0)
    compatibility_level: CompatibilityLevel = CompatibilityLevel.INCOMPATIBLE
    status: Literal["complete", "degraded"] = "complete"
    suggestions: list[Suggestion] = []
    breakdown: ScoringBreakdown = ScoringBreakdown()
    metadata: AssessmentMetadata

    model_config = {"frozen": True}

    @property
    def blocking_suggestions(self) -> list[Suggestion]:
        return [s for s in self.suggestions if s.severity == "blocking"]


class ValidationErrorResult(BaseModel):
    """Returned instead of an assessment when required input is missing."""
    status: Literal["validation_error"] = "validation_error"
    errors: list[str] = []
    warnings: list[str] = []
