"""Pydantic contracts shared by the compatibility engine."""

from models.schemas.assessment import (
    AssessmentMetadata,
    CompatibilityAssessment,
    CompatibilityLevel,
    ScoreStep,
    ScoringBreakdown,
    Suggestion,
    ValidationErrorResult,
)
from models.schemas.experience_match import ExperienceMatch, ExperienceMatchResult
from models.schemas.job import JobCategory, JobClassification, JobDetails
from models.schemas.penalties import (
    ExperienceMismatchPenalty,
    PenaltyCompensation,
    ProjectRelevance,
    RoleLevel,
    SkillMatchLevel,
    TechnicalMismatchPenalty,
)
from models.schemas.resume import PersonalDetails, Project, RawResume, SanitizedResume, WorkExperience
from models.schemas.sanitization import SanitizationMetrics, SanitizationResult
from models.schemas.skill_match import SkillCompensation, SkillMatch, SkillMatchResult
from models.schemas.technical_density import (
    CategoryScore,
    TechnicalDensityResult,
    TechnicalRoleResult,
    TermMatch,
)
from models.schemas.technology import GroupLocation, TechGroup

__all__ = [
    "AssessmentMetadata",
    "CategoryScore",
    "CompatibilityAssessment",
    "CompatibilityLevel",
    "ExperienceMatch",
    "ExperienceMatchResult",
    "ExperienceMismatchPenalty",
    "GroupLocation",
    "JobCategory",
    "JobClassification",
    "JobDetails",
    "PenaltyCompensation",
    "PersonalDetails",
    "Project",
    "ProjectRelevance",
    "RawResume",
    "RoleLevel",
    "SanitizationMetrics",
    "SanitizationResult",
    "SanitizedResume",
    "ScoreStep",
    "ScoringBreakdown",
    "SkillCompensation",
    "SkillMatch",
    "SkillMatchLevel",
    "SkillMatchResult",
    "Suggestion",
    "TechGroup",
    "TechnicalDensityResult",
    "TechnicalMismatchPenalty",
    "TechnicalRoleResult",
    "TermMatch",
    "ValidationErrorResult",
    "WorkExperience",
]
