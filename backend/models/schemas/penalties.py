"""Penalty calculator outputs."""

from enum import Enum

from pydantic import BaseModel, Field


class RoleLevel(str, Enum):
    EXECUTIVE = "executive"
    SENIOR = "senior"
    LEAD = "lead"
    MANAGER = "manager"
    JUNIOR = "junior"
    STANDARD = "standard"


class TechnicalMismatchPenalty(BaseModel):
    penalty: float = Field(default=0.0, ge=0.0, le=1.0)
    density_gap: float = 0.0
    job_density: float = 0.0
    resume_density: float = 0.0
    is_technical_role: bool = False
    severe_mismatch: bool = False
    reason: str = ""

    model_config = {"frozen": True}


class ExperienceMismatchPenalty(BaseModel):
    penalty: float = Field(default=0.0, ge=0.0, le=1.0)
    shortfall: float = 0.0  # relevance-weighted, 0-1
    role_level: RoleLevel = RoleLevel.STANDARD
    level_weight: float = 1.0
    total_years: float = 0.0
    reason: str = ""

    model_config = {"frozen": True}


class SkillMatchLevel(str, Enum):
    NONE = "none"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class ProjectRelevance(BaseModel):
    name: str = ""
    relevance: float = Field(default=0.0, ge=0.0, le=1.0)
    matched_technologies: list[str] = []
    matched_keywords: list[str] = []
    highly_relevant: bool = False

    model_config = {"frozen": True}


class PenaltyCompensation(BaseModel):
    """Fractional reductions applied to penalties before they hit the score."""
    skill_match_level: SkillMatchLevel = SkillMatchLevel.NONE
    reductions: dict[str, float] = {}  # penalty name -> reduction in [0, 1]
    sources: dict[str, dict[str, float]] = {}  # source -> penalty name -> reduction
    projects: list[ProjectRelevance] = []
    applied_synergies: list[str] = []

    model_config = {"frozen": True}

    def reduction(self, penalty: str) -> float:
        return self.reductions.get(penalty, 0.0)
