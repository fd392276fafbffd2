"""Technical-mismatch and experience-mismatch penalties.

Both calculators are pure and return a normalized deduction in [0, 1];
how the deduction is applied to the score lives in score_pipeline.
"""

import logging
import re

from config import PenaltyConfig
from models.schemas.experience_match import ExperienceMatchResult
from models.schemas.penalties import ExperienceMismatchPenalty, RoleLevel, TechnicalMismatchPenalty
from models.schemas.technical_density import TechnicalDensityResult, TechnicalRoleResult

logger = logging.getLogger(__name__)

# Checked in order; the first pattern that matches sets the level.
ROLE_LEVEL_PATTERNS: tuple[tuple[RoleLevel, re.Pattern], ...] = (
    (RoleLevel.EXECUTIVE, re.compile(r"\b(chief|cto|ceo|cfo|coo|vp|director|head\s+of)\b", re.I)),
    (RoleLevel.SENIOR, re.compile(r"\b(senior|sr\.?|principal|architect)(?!\w)", re.I)),
    (RoleLevel.LEAD, re.compile(r"\blead\b", re.I)),
    (RoleLevel.MANAGER, re.compile(r"\bmanager\b", re.I)),
    (RoleLevel.JUNIOR, re.compile(r"\b(junior|jr\.?|entry|associate|intern|trainee)(?!\w)", re.I)),
)


def detect_role_level(title: str) -> RoleLevel:
    for level, pattern in ROLE_LEVEL_PATTERNS:
        if pattern.search(title or ""):
            return level
    return RoleLevel.STANDARD


def graduated_penalty(base: float) -> float:
    """Steepen small penalties: 1 - (1 - base) ** 1.5."""
    base = max(0.0, min(1.0, base))
    return 1.0 - (1.0 - base) ** 1.5


def apply_minimum_penalty(kind: str, penalty: float, config: PenaltyConfig | None = None) -> float:
    """Raise a non-zero penalty to the configured floor for its kind."""
    config = config or PenaltyConfig()
    if penalty <= 0:
        return 0.0
    return max(penalty, config.minimum_penalties.get(kind, 0.0))


# ---------------------------------------------------------------------------
# Technical mismatch
# ---------------------------------------------------------------------------

def technical_mismatch_penalty(
    job_density: TechnicalDensityResult,
    resume_density: TechnicalDensityResult,
    job_role: TechnicalRoleResult,
    config: PenaltyConfig | None = None,
) -> TechnicalMismatchPenalty:
    """Penalty for a resume that is less technical than the job asks for.

    Only a job denser than the resume produces a gap. Technical titles
    amplify the gap, and a technical title with a dense posting but a
    sparse resume is floored at severe_mismatch_floor.
    """
    config = config or PenaltyConfig()
    gap = max(0.0, job_density.score - resume_density.score)

    if job_role.is_technical:
        penalty = gap * config.technical_gap_multiplier
    else:
        penalty = graduated_penalty(gap)
    severe = (
        job_role.is_technical
        and job_role.confidence > config.severe_role_confidence
        and job_density.score > config.severe_job_density
        and resume_density.score < config.severe_resume_density
    )
    if severe:
        penalty = max(penalty, config.severe_mismatch_floor)
    penalty = min(config.technical_cap, penalty)

    if severe:
        reason = "Technical role with a resume showing little technical depth"
    elif penalty > 0:
        reason = f"Resume is less technical than the posting (gap {gap:.2f})"
    else:
        reason = ""

    return TechnicalMismatchPenalty(
        penalty=round(penalty, 4),
        density_gap=round(gap, 4),
        job_density=job_density.score,
        resume_density=resume_density.score,
        is_technical_role=job_role.is_technical,
        severe_mismatch=severe,
        reason=reason,
    )


# ---------------------------------------------------------------------------
# Experience mismatch
# ---------------------------------------------------------------------------

def _weighted_shortfall(result: ExperienceMatchResult) -> float:
    weighted = 0.0
    total = 0.0
    for match in result.matches:
        if match.required <= 0:
            continue
        shortfall = 1.0 - min(1.0, max(0.0, match.actual) / match.required)
        weighted += match.relevance * shortfall
        total += match.relevance
    return weighted / total if total else 0.0


def experience_mismatch_penalty(
    result: ExperienceMatchResult,
    job_title: str,
    config: PenaltyConfig | None = None,
    *,
    total_years: float | None = None,
) -> ExperienceMismatchPenalty:
    """Penalty for missing years, heavier for senior, lead and executive roles.

    Junior roles instead penalize heavy overqualification.
    """
    config = config or PenaltyConfig()
    level = detect_role_level(job_title)
    level_weight = config.level_weights.get(level.value, 1.0)

    shortfall = _weighted_shortfall(result)
    penalty = min(config.experience_cap, shortfall * config.experience_base_factor * level_weight)
    if result.gaps:
        penalty = apply_minimum_penalty("experience_gap", penalty, config)
    reason = ""
    if penalty > 0:
        reason = f"Experience falls short of a {level.value}-level requirement"

    if total_years is None:
        total_years = max((m.actual for m in result.matches), default=0.0)
    if level == RoleLevel.JUNIOR and total_years > config.overqualified_years:
        penalty = max(penalty, config.overqualified_penalty)
        reason = "Experience well beyond a junior-level role"

    return ExperienceMismatchPenalty(
        penalty=round(penalty, 4),
        shortfall=round(shortfall, 4),
        role_level=level,
        level_weight=level_weight,
        total_years=round(total_years, 1),
        reason=reason,
    )
