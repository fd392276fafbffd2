"""Required-vs-actual years comparison per experience area."""

import logging

from config import ExperienceMatchConfig
from models.schemas.experience_match import ExperienceMatch, ExperienceMatchResult
from services.technology_map import TechnologyRegistry, get_default_registry

logger = logging.getLogger(__name__)

GENERAL_AREA = "general"
UNKNOWN_AREA_RELEVANCE = 0.5
BONUS_PER_EXTRA_RATIO = 0.1


def score_area(required: float, actual: float, config: ExperienceMatchConfig) -> tuple[float, float]:
    """Return (score, bonus) for one area.

    Meeting the requirement exactly scores 1.0 with no bonus. Below it the
    ratio is dampened by years_weight and reduced in proportion to the
    shortfall; zero years scores 0.
    """
    if required <= 0:
        return 1.0, 0.0
    actual = max(0.0, actual)
    if actual >= required:
        bonus = min(config.max_experience_bonus, (actual / required - 1) * BONUS_PER_EXTRA_RATIO)
        return 1.0, bonus
    ratio = actual / required
    shortfall = 1.0 - ratio
    score = (ratio ** config.years_weight) * (1.0 - config.insufficiency_penalty * shortfall)
    return max(0.0, min(1.0, score)), 0.0


def area_relevance(
    area: str, context: str, registry: TechnologyRegistry | None = None,
) -> float:
    """Relevance of an area to the job, from how much of its technology group the job mentions."""
    if area == GENERAL_AREA:
        return 1.0
    registry = registry or get_default_registry()
    members = registry.group_members(area)
    if not members:
        return UNKNOWN_AREA_RELEVANCE
    context_lower = (context or "").lower()
    present = sum(1 for s in members if s in context_lower)
    return min(1.0, present / len(members) + 0.3)


def _recommendation(area: str, missing_years: float, registry: TechnologyRegistry) -> str:
    years = round(missing_years, 1)
    years_text = f"{years:g} more year{'s' if years != 1 else ''}"
    if area == GENERAL_AREA:
        return f"Gain {years_text} of professional experience"
    related = [s for s in registry.group_members(area) if s != area][:2]
    if related:
        return f"Gain {years_text} of experience in {area} or related areas like {', '.join(related)}"
    return f"Gain {years_text} of experience in {area}"


def match_experience(
    required: dict[str, float],
    actual: dict[str, float],
    config: ExperienceMatchConfig | None = None,
    *,
    relevance: dict[str, float] | None = None,
    context: str = "",
    registry: TechnologyRegistry | None = None,
) -> ExperienceMatchResult:
    """Compare required and actual years for every required area.

    The overall score is the relevance-weighted mean of area scores plus
    their bonuses, capped at 1, so surplus in one area can offset a small
    shortfall in another.
    """
    config = config or ExperienceMatchConfig()
    registry = registry or get_default_registry()
    relevance = relevance or {}

    if not required:
        return ExperienceMatchResult(score=1.0)

    matches: list[ExperienceMatch] = []
    gaps: list[str] = []
    recommendations: list[str] = []
    weighted = 0.0
    weight_total = 0.0

    for area, req_years in required.items():
        act_years = actual.get(area, 0.0)
        score, bonus = score_area(req_years, act_years, config)
        rel = relevance.get(area)
        if rel is None:
            rel = area_relevance(area, context, registry)
        rel = max(0.0, min(1.0, rel))

        matches.append(ExperienceMatch(
            area=area,
            required=req_years,
            actual=round(act_years, 1),
            score=round(score, 4),
            bonus=round(bonus, 4),
            relevance=round(rel, 4),
        ))
        # relevance_weight controls how far relevance moves an area's weight off 1.0
        weight = rel * config.relevance_weight + (1.0 - config.relevance_weight)
        weighted += weight * (score + bonus)
        weight_total += weight

        if score < config.sufficiency_threshold:
            gaps.append(area)
            recommendations.append(_recommendation(area, req_years - act_years, registry))

    overall = min(1.0, weighted / weight_total) if weight_total else 0.0
    logger.debug("Experience match %.3f across %d areas, gaps=%s", overall, len(matches), gaps)
    return ExperienceMatchResult(
        score=round(overall, 4),
        matches=matches,
        gaps=gaps,
        recommendations=recommendations,
    )
