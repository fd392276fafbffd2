"""Turn sanitized resume and job text into matcher inputs.

Extracts the job's required skills and years per area, and the candidate's
skills and years per area from their work history.
"""

import logging
import re
from datetime import date

from config import CompatibilityConfig
from models.schemas.job import JobDetails
from models.schemas.resume import SanitizedResume, WorkExperience
from services.experience_matcher import GENERAL_AREA
from services.penalties import detect_role_level
from services.skill_normalizer import SKILL_ALIASES, normalize_skill
from services.technical_density import TECHNICAL_TERMS
from services.technology_map import TechnologyRegistry, get_default_registry

logger = logging.getLogger(__name__)

# "5+ years of experience", "experience: 3 years", "4 yrs professional"
_YEARS_PATTERNS = (
    re.compile(r"(\d+)\+?\s*(?:years?|yrs?)\s*(?:of\s+)?(?:experience|exp\b)", re.I),
    re.compile(r"(?:experience|exp)(?:\s*:)?\s*(\d+)\+?\s*(?:years?|yrs?)", re.I),
    re.compile(r"(\d+)\+?\s*(?:years?|yrs?)\s*(?:of\s+)?(?:relevant|professional)", re.I),
    re.compile(r"(\d+)\+\s*(?:years?|yrs?)\b", re.I),
)

# "3+ years of Python", "2 years experience with Kubernetes"
_SKILL_YEARS_RE = re.compile(
    r"(\d+)\+?\s*(?:years?|yrs?)\s*(?:of\s+)?(?:experience\s+)?(?:with|in|using|of)?\s*"
    r"([A-Za-z][\w+#./-]*(?:\s[A-Za-z][\w+#./-]*)?)",
    re.I,
)

# Too ambiguous as plain English to extract from free text.
_AMBIGUOUS_TERMS = frozenset({"r", "go", "next", "node"})

_SKILL_CATEGORIES = ("programming_languages", "frameworks", "databases", "cloud_devops")


def _skill_vocabulary(registry: TechnologyRegistry) -> tuple[str, ...]:
    terms: list[str] = []
    for category in _SKILL_CATEGORIES:
        terms.extend(TECHNICAL_TERMS[category])
    for location in registry.iter_groups():
        terms.extend(location.group.members)
    for canonical, aliases in SKILL_ALIASES.items():
        terms.append(canonical)
        # short aliases (js, ci, ml) collide with ordinary abbreviations
        terms.extend(a for a in aliases if len(a) > 3)
    return tuple(t for t in dict.fromkeys(terms) if t not in _AMBIGUOUS_TERMS and len(t) > 1)


def _first_position(term: str, text_lower: str) -> int:
    pattern = r"(?<![a-z0-9])" + re.escape(term) + r"(?![a-z0-9+#])"
    match = re.search(pattern, text_lower)
    return match.start() if match else -1


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

def extract_skills(text: str, registry: TechnologyRegistry | None = None) -> list[str]:
    """Known technology skills mentioned in text, normalized, in order of appearance."""
    if not text or not text.strip():
        return []
    registry = registry or get_default_registry()
    text_lower = text.lower()

    found: dict[str, int] = {}
    for term in _skill_vocabulary(registry):
        pos = _first_position(term, text_lower)
        if pos < 0:
            continue
        skill = normalize_skill(term)
        if skill not in found or pos < found[skill]:
            found[skill] = pos
    return sorted(found, key=found.get)


def job_required_skills(job: JobDetails, registry: TechnologyRegistry | None = None) -> list[str]:
    """Explicit required skills first, then skills named in the description."""
    explicit = [normalize_skill(s) for s in job.required_skills if s and s.strip()]
    extracted = extract_skills(job.job_description, registry)
    return list(dict.fromkeys(explicit + extracted))


def candidate_skills(resume: SanitizedResume, registry: TechnologyRegistry | None = None) -> list[str]:
    """Listed skills plus technologies evidenced in work history."""
    listed = [normalize_skill(s) for s in resume.skills]
    evidenced = extract_skills(resume.experience_text(), registry)
    return list(dict.fromkeys(s for s in listed + evidenced if s))


# ---------------------------------------------------------------------------
# Years
# ---------------------------------------------------------------------------

def extract_required_years(text: str) -> float:
    """Largest explicit years-of-experience requirement in the text."""
    best = 0.0
    for pattern in _YEARS_PATTERNS:
        for match in pattern.finditer(text or ""):
            years = float(match.group(1))
            if years < 60 and years > best:
                best = years
    return best


def required_years_by_area(
    job: JobDetails,
    config: CompatibilityConfig,
    registry: TechnologyRegistry | None = None,
) -> dict[str, float]:
    """Years required overall and for any specific skill the posting names.

    Falls back to the configured requirement for the title's seniority
    level when the description states no number.
    """
    registry = registry or get_default_registry()
    required: dict[str, float] = {}

    general = extract_required_years(job.job_description)
    if general <= 0:
        level = detect_role_level(job.job_title)
        general = float(config.experience_requirements.get(level.value, 0))
    if general > 0:
        required[GENERAL_AREA] = general

    vocabulary = set(_skill_vocabulary(registry))
    for match in _SKILL_YEARS_RE.finditer(job.job_description or ""):
        years = float(match.group(1))
        phrase = match.group(2).lower().rstrip(".,")
        for candidate in (phrase, phrase.split()[0]):
            if candidate in vocabulary:
                area = normalize_skill(candidate)
                required[area] = max(years, required.get(area, 0.0))
                break
    return required


def _parse_iso(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def entry_years(entry: WorkExperience, today: date | None = None) -> float:
    """Duration of one role in years; an empty end date means it is current."""
    start = _parse_iso(entry.start_date) if entry.start_date else None
    if start is None:
        return 0.0
    end = _parse_iso(entry.end_date) if entry.end_date else (today or date.today())
    if end is None:
        return 0.0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    return months / 12 if months > 0 else 0.0


def total_experience_years(resume: SanitizedResume, today: date | None = None) -> float:
    """Summed role durations, or an explicit claim in the summary if larger."""
    dated = sum(entry_years(e, today) for e in resume.work_experience)
    claimed = extract_required_years(resume.personal_details.summary)
    return round(max(dated, claimed), 1)


def actual_years_by_area(
    resume: SanitizedResume,
    areas: list[str],
    today: date | None = None,
) -> dict[str, float]:
    """Candidate years for each requested area.

    A skill area counts the years of every role whose text mentions it.
    """
    actual: dict[str, float] = {}
    for area in areas:
        if area == GENERAL_AREA:
            actual[area] = total_experience_years(resume, today)
            continue
        years = 0.0
        for entry in resume.work_experience:
            text = " ".join([entry.job_title, entry.description, *entry.achievements])
            mentioned = {normalize_skill(s) for s in extract_skills(text)}
            if area in mentioned:
                years += entry_years(entry, today)
        actual[area] = round(years, 1)
    return actual
