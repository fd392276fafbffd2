"""Penalty compensation: strengths that soften the mismatch penalties.

Three sources can reduce the technical and experience penalties before
score_pipeline applies them:

    skill match level   high / very high skill scores
    experience power    long overall careers (5+ and 7+ years)
    projects            side projects that use the job's technologies

Reductions from different sources stack multiplicatively,
1 - (1 - a) * (1 - b), and each penalty's total is capped. A weak skill
match (below the moderate cutoff) earns no compensation at all.
"""

import logging
import re

from config import CompensationConfig
from models.schemas.penalties import PenaltyCompensation, ProjectRelevance, SkillMatchLevel
from models.schemas.resume import Project
from models.schemas.skill_match import SkillMatchResult
from services.skill_normalizer import normalize_skill

logger = logging.getLogger(__name__)

PENALTIES = ("technical", "experience")

_WORD_RE = re.compile(r"[^\w\s]")


def skill_match_level(score: float, config: CompensationConfig | None = None) -> SkillMatchLevel:
    config = config or CompensationConfig()
    if score >= config.very_high_match:
        return SkillMatchLevel.VERY_HIGH
    if score >= config.high_match:
        return SkillMatchLevel.HIGH
    if score >= config.moderate_match:
        return SkillMatchLevel.MODERATE
    return SkillMatchLevel.NONE


def experience_power(total_years: float, config: CompensationConfig | None = None) -> float:
    """Reduction earned by overall career length; highest qualifying threshold wins."""
    config = config or CompensationConfig()
    for threshold in sorted(config.experience_power, reverse=True):
        if total_years >= threshold:
            return config.experience_power[threshold]
    return 0.0


def key_phrases(text: str) -> list[str]:
    """Distinct lowercase words longer than three characters."""
    words = _WORD_RE.sub(" ", (text or "").lower()).split()
    return list(dict.fromkeys(w for w in words if len(w) > 3))


def assess_project(
    project: Project,
    job_skills: list[str],
    job_description: str,
    config: CompensationConfig | None = None,
) -> ProjectRelevance:
    """Relevance = 0.6 * share of job skills the project used + 0.4 * keyword overlap."""
    config = config or CompensationConfig()
    technologies = {normalize_skill(t) for t in project.technologies}
    matched_tech = [s for s in job_skills if s in technologies]

    keywords = list(dict.fromkeys([s.lower() for s in job_skills] + key_phrases(job_description)))
    description = project.description.lower()
    matched_keywords = [k for k in keywords if k in description]

    tech_score = len(matched_tech) / max(1, len(job_skills))
    keyword_score = len(matched_keywords) / max(1, len(keywords))
    relevance = min(1.0, tech_score * 0.6 + keyword_score * 0.4)
    return ProjectRelevance(
        name=project.name,
        relevance=round(relevance, 4),
        matched_technologies=matched_tech,
        matched_keywords=matched_keywords,
        highly_relevant=relevance >= config.highly_relevant_project,
    )


def stack(current: float, reduction: float) -> float:
    return 1.0 - (1.0 - current) * (1.0 - reduction)


def compensate(
    skills: SkillMatchResult,
    *,
    total_years: float = 0.0,
    projects: list[Project] | None = None,
    job_skills: list[str] | None = None,
    job_description: str = "",
    config: CompensationConfig | None = None,
) -> PenaltyCompensation:
    """Work out how much each penalty is reduced for this candidate."""
    config = config or CompensationConfig()
    level = skill_match_level(skills.score, config)
    relevance = [
        assess_project(p, job_skills or [], job_description, config)
        for p in projects or []
    ]
    if level == SkillMatchLevel.NONE:
        return PenaltyCompensation(skill_match_level=level, projects=relevance)

    sources: dict[str, dict[str, float]] = {}

    skill_reduction = config.skill_reductions.get(level.value, 0.0)
    if skill_reduction > 0:
        sources["skill_match"] = {name: skill_reduction for name in PENALTIES}

    power = experience_power(total_years, config)
    if power > 0:
        sources["experience_power"] = {name: power for name in PENALTIES}

    highly = [p for p in relevance if p.highly_relevant]
    relevant = [p for p in relevance if p.relevance >= config.relevant_project]
    project_reduction = 0.0
    if highly:
        project_reduction = config.highly_relevant_reduction
    if len(relevant) >= 2:
        project_reduction = max(project_reduction, config.multiple_projects_reduction)
    if project_reduction > 0:
        sources["projects"] = {"experience": project_reduction}

    synergies: list[str] = []
    matched = set(skills.matched_skills)
    if level in (SkillMatchLevel.HIGH, SkillMatchLevel.VERY_HIGH) and any(
        matched.intersection(p.matched_technologies) for p in relevance
    ):
        sources["synergy"] = {name: config.synergy_reduction for name in PENALTIES}
        synergies = [f"{name}_synergy" for name in PENALTIES]

    reductions: dict[str, float] = {}
    for source in sources.values():
        for name, value in source.items():
            reductions[name] = stack(reductions.get(name, 0.0), value)
    for name, value in reductions.items():
        reductions[name] = round(min(value, config.limits.get(name, config.overall_limit)), 4)

    if reductions:
        logger.debug("Penalty compensation (%s): %s", level.value, reductions)
    return PenaltyCompensation(
        skill_match_level=level,
        reductions=reductions,
        sources=sources,
        projects=relevance,
        applied_synergies=synergies,
    )
