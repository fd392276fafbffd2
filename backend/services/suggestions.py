"""Suggestion builders for a compatibility assessment.

Severity rules:
- blocking: missing critical skills beyond the configured maximum
- warning: role/level mismatch, weak skills match, degraded assessment
- info: learning hints, compensations, experience recommendations
"""

from dataclasses import dataclass

from config import CompatibilityConfig
from models.schemas.assessment import Suggestion
from models.schemas.experience_match import ExperienceMatchResult
from models.schemas.job import JobCategory
from models.schemas.penalties import ExperienceMismatchPenalty, TechnicalMismatchPenalty
from models.schemas.skill_match import SkillMatchResult


@dataclass(frozen=True)
class SuggestionInputs:
    skills: SkillMatchResult
    experience: ExperienceMatchResult
    technical_penalty: TechnicalMismatchPenalty
    experience_penalty: ExperienceMismatchPenalty
    job_category: JobCategory
    candidate_category: JobCategory
    role_type_mismatch: bool
    degraded_reasons: tuple[str, ...] = ()


def _blocking(inputs: SuggestionInputs, config: CompatibilityConfig) -> list[Suggestion]:
    missing = inputs.skills.missing_critical
    if len(missing) <= config.max_missing_critical_skills:
        return []
    return [Suggestion(
        type="missing_critical_skills",
        message=f"This role requires expertise in: {', '.join(missing)}",
        severity="blocking",
    )]


def _warnings(inputs: SuggestionInputs, config: CompatibilityConfig) -> list[Suggestion]:
    out: list[Suggestion] = []

    if inputs.role_type_mismatch:
        out.append(Suggestion(
            type="role_type_mismatch",
            message=(
                f"This {inputs.job_category.value.lower()} role differs from your "
                f"{inputs.candidate_category.value.lower()} background"
            ),
            severity="warning",
        ))

    if inputs.experience_penalty.penalty > 0:
        out.append(Suggestion(
            type="experience_level_mismatch",
            message=inputs.experience_penalty.reason,
            severity="warning",
        ))

    if inputs.technical_penalty.penalty > 0:
        out.append(Suggestion(
            type="technical_mismatch",
            message=inputs.technical_penalty.reason,
            severity="warning",
        ))

    skills_pct = inputs.skills.score * 100
    if skills_pct < config.min_skills_match_score:
        out.append(Suggestion(
            type="skills_match",
            message=f"Your skills cover {skills_pct:.0f}% of this role's requirements",
            severity="warning",
        ))

    for reason in inputs.degraded_reasons:
        out.append(Suggestion(
            type="assessment_degraded",
            message=f"Semantic comparison was unavailable ({reason}); the score uses neutral similarity",
            severity="warning",
        ))
    return out


def _info(inputs: SuggestionInputs) -> list[Suggestion]:
    out = [
        Suggestion(type="skill_suggestion", message=text, severity="info")
        for text in inputs.skills.suggestions
    ]
    for comp in inputs.skills.compensations:
        out.append(Suggestion(
            type="skill_compensation",
            message=f"Your {comp.related_skill} experience partially covers {comp.required_skill}",
            severity="info",
        ))
    for text in inputs.experience.recommendations:
        out.append(Suggestion(type="experience_recommendation", message=text, severity="info"))
    return out


def build_suggestions(inputs: SuggestionInputs, config: CompatibilityConfig) -> list[Suggestion]:
    """All suggestions, blocking first."""
    return _blocking(inputs, config) + _warnings(inputs, config) + _info(inputs)
