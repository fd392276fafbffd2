"""Skill matching with cross-technology compensation.

Each job skill is satisfied either directly (the candidate lists the same
skill or a close spelling of it) or through a related technology from the
same group, at reduced credit. Whichever path gives the higher confidence
wins, so listing more skills can only raise the score.
"""

import logging
import re

from config import SkillMatchConfig
from models.schemas.skill_match import SkillCompensation, SkillMatch, SkillMatchResult
from services.skill_normalizer import normalize_skill, skill_similarity
from services.technology_map import TechnologyRegistry, get_default_registry

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[a-z0-9][a-z0-9+#./-]*")


def _dedupe_normalized(skills: list[str]) -> list[str]:
    return list(dict.fromkeys(s for s in (normalize_skill(x) for x in skills) if s))


def _words(text: str) -> list[str]:
    return [w.rstrip(".,/-") for w in _WORD_RE.findall(text.lower())]


# ---------------------------------------------------------------------------
# Match search
# ---------------------------------------------------------------------------

def _best_direct(
    job_skill: str, candidates: list[str], threshold: float,
) -> tuple[str, float] | None:
    best: tuple[str, float] | None = None
    for candidate in candidates:
        score = skill_similarity(job_skill, candidate)
        if score >= threshold and (best is None or score > best[1]):
            best = (candidate, score)
    return best


def _best_related(
    job_skill: str,
    candidates: list[str],
    config: SkillMatchConfig,
    registry: TechnologyRegistry,
) -> tuple[str, float, str] | None:
    """Candidate skill from the job skill's technology group, with its credit."""
    job_loc = registry.find_group_for_skill(job_skill)
    best: tuple[str, float, str] | None = None
    for candidate in candidates:
        cand_loc = registry.find_group_for_skill(candidate)
        if job_loc is not None and candidate in job_loc.group.members:
            location = job_loc
        elif cand_loc is not None and job_skill in cand_loc.group.members:
            location = cand_loc
        else:
            continue
        factor = min(1.0, location.group.compensation * config.compensation_factor)
        if best is None or factor > best[1]:
            best = (candidate, factor, location.domain)
    return best


def _context_boost(
    job_skill: str, job_words: list[str], config: SkillMatchConfig, registry: TechnologyRegistry,
) -> bool:
    """True when the skill's group context appears near a mention of the skill."""
    if not job_words:
        return False
    context = registry.get_skill_context(job_skill)
    if not context:
        return False

    positions = [i for i, w in enumerate(job_words) if normalize_skill(w) == job_skill]
    window = config.context_window
    for pos in positions:
        nearby = set(job_words[max(0, pos - window): pos + window + 1])
        for phrase in context:
            if all(w in nearby for w in phrase.split()):
                return True
    return False


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def match_skills(
    job_skills: list[str],
    candidate_skills: list[str],
    config: SkillMatchConfig | None = None,
    *,
    job_text: str = "",
    registry: TechnologyRegistry | None = None,
) -> SkillMatchResult:
    """Score candidate skills against job-required skills.

    Unmatched job skills contribute 0 to the mean and are reported in
    missing_critical. With no job skills there is nothing to miss and the
    score is 1.0.
    """
    config = config or SkillMatchConfig()
    registry = registry or get_default_registry()

    required = _dedupe_normalized(job_skills)
    candidates = _dedupe_normalized(candidate_skills)
    if not required:
        return SkillMatchResult(score=1.0)

    job_words = _words(job_text) if job_text else []
    matches: list[SkillMatch] = []
    compensations: list[SkillCompensation] = []
    missing: list[str] = []
    total = 0.0

    for skill in required:
        direct = _best_direct(skill, candidates, config.min_threshold)
        related = _best_related(skill, candidates, config, registry)

        if direct and (related is None or direct[1] >= related[1]):
            candidate, confidence = direct
            match = SkillMatch(
                skill=skill, confidence=round(confidence, 4),
                match_type="direct", matched_with=candidate,
            )
        elif related:
            candidate, confidence, domain = related
            match = SkillMatch(
                skill=skill, confidence=round(confidence, 4),
                match_type="related", matched_with=candidate,
                context=f"Related to {candidate}",
            )
            compensations.append(SkillCompensation(
                required_skill=skill,
                related_skill=candidate,
                factor=round(confidence, 4),
                reason=f"{candidate} is related to {skill} in the {domain} category",
            ))
        else:
            missing.append(skill)
            continue

        contribution = confidence
        if _context_boost(skill, job_words, config, registry):
            contribution = min(1.0, contribution * config.context_multiplier)
        total += contribution
        matches.append(match)

    score = max(0.0, min(1.0, config.base_weight * total / len(required)))
    suggestions = generate_suggestions(missing, registry)

    logger.debug(
        "Skill match %.3f: %d direct, %d related, %d missing",
        score, sum(m.match_type == "direct" for m in matches), len(compensations), len(missing),
    )
    return SkillMatchResult(
        score=round(score, 4),
        matches=matches,
        compensations=compensations,
        missing_critical=missing,
        suggestions=suggestions,
    )


def generate_suggestions(missing: list[str], registry: TechnologyRegistry | None = None) -> list[str]:
    """A "consider learning" hint per missing skill, naming nearby technologies."""
    registry = registry or get_default_registry()
    suggestions = []
    for skill in missing:
        related = registry.get_related_skills(skill)[:3]
        if related:
            suggestions.append(
                f"Consider learning {skill} or related technologies like {', '.join(related)}"
            )
        else:
            suggestions.append(f"Consider learning {skill}")
    return suggestions


def calculate_skill_relevance(
    skill: str, context: str, registry: TechnologyRegistry | None = None,
) -> float:
    """How relevant a skill is to a piece of text, via its technology family."""
    registry = registry or get_default_registry()
    location = registry.find_group_for_skill(skill)
    if location is None:
        return 0.5
    context_lower = (context or "").lower()
    family = registry.get_skills(location.domain, location.subcategory)
    return 1.0 if any(s in context_lower for s in family) else 0.7
