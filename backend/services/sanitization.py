"""Resume data sanitization pipeline.

Six stages run in order over raw resume input:

    basic_fields -> work_experience -> skills ->
    completeness_validation -> quality_scoring -> consistency_scoring

basic_fields covers the title, personal details and projects. The first
three stages clean the data and never fail; bad dates become empty strings
plus a warning. The last three measure the cleaned data. Errors from
completeness validation mean the resume cannot be assessed.

Running the pipeline on its own output changes nothing.
"""

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

from models.schemas.job import JobDetails
from models.schemas.resume import (
    PersonalDetails,
    Project,
    RawResume,
    SanitizedResume,
    WorkExperience,
)
from models.schemas.sanitization import (
    SanitizationMetadata,
    SanitizationMetrics,
    SanitizationResult,
)
from services.skill_normalizer import normalize_skill
from services.technical_density import TECHNICAL_TERMS

logger = logging.getLogger(__name__)

STAGES = (
    "basic_fields",
    "work_experience",
    "skills",
    "completeness_validation",
    "quality_scoring",
    "consistency_scoring",
)

_DISALLOWED_RE = re.compile(r"[^\w\s.,!?@#$%&*()+/:'-]")
_WS_RE = re.compile(r"\s+")
_ELLIPSIS_RE = re.compile(r"\.{4,}")
_BANGS_RE = re.compile(r"!{2,}")
_INTERROBANG_RE = re.compile(r"\?!+")
_SKILL_SPLIT_RE = re.compile(r"[,;\n]")

_MONTH_MAP = {
    "jan": 1, "january": 1, "feb": 2, "february": 2, "mar": 3, "march": 3,
    "apr": 4, "april": 4, "may": 5, "jun": 6, "june": 6,
    "jul": 7, "july": 7, "aug": 8, "august": 8, "sep": 9, "sept": 9,
    "september": 9, "oct": 10, "october": 10, "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}
_CURRENT_MARKERS = frozenset({"present", "current", "now", "ongoing"})

ACTION_VERBS = frozenset({
    "achieved", "analyzed", "architected", "automated", "built", "collaborated",
    "configured", "created", "decreased", "delivered", "deployed", "designed",
    "developed", "drove", "enabled", "engineered", "enhanced", "established",
    "implemented", "improved", "increased", "integrated", "launched", "led",
    "maintained", "managed", "mentored", "migrated", "optimized", "orchestrated",
    "reduced", "refactored", "resolved", "scaled", "shipped", "spearheaded",
    "streamlined", "tested", "trained", "transformed", "upgraded",
})

_METRICS_RE = re.compile(
    r"\d+\s?[%$KMBx]|\$\d+|\d+\+?\s*(?:users|clients|requests|customers|hours|"
    r"days|weeks|engineers|services|teams?|members?|projects?)",
    re.IGNORECASE,
)

_KNOWN_TECHNOLOGIES = frozenset(
    normalize_skill(term)
    for category in ("programming_languages", "frameworks", "databases", "cloud_devops")
    for term in TECHNICAL_TERMS[category]
)

MIN_SKILLS_FOR_QUALITY = 5
OVERLAP_FACTOR = 0.8


# ---------------------------------------------------------------------------
# Field cleaners
# ---------------------------------------------------------------------------

def sanitize_string(value: Any) -> str:
    """Strip unsupported characters, collapse whitespace, tame punctuation runs."""
    if value is None:
        return ""
    text = _DISALLOWED_RE.sub("", str(value))
    text = _WS_RE.sub(" ", text)
    text = _ELLIPSIS_RE.sub("...", text)
    text = _BANGS_RE.sub("!", text)
    text = _INTERROBANG_RE.sub("?", text)
    return text.strip()


def _parse_date(value: str) -> date | None:
    text = value.strip().rstrip(".").lower()

    iso = re.match(r"^(\d{4})-(\d{1,2})(?:-(\d{1,2}))?", text, re.ASCII)
    if iso:
        year, month, day = int(iso[1]), int(iso[2]), int(iso[3] or 1)
        try:
            return date(year, month, day)
        except ValueError:
            return None

    slash = re.fullmatch(r"(\d{1,2})/(\d{4})", text, re.ASCII)
    if slash:
        try:
            return date(int(slash[2]), int(slash[1]), 1)
        except ValueError:
            return None

    parts = text.replace(",", " ").split()
    if (
        len(parts) == 2
        and parts[0].rstrip(".") in _MONTH_MAP
        and re.fullmatch(r"\d{4}", parts[1], re.ASCII)
    ):
        try:
            return date(int(parts[1]), _MONTH_MAP[parts[0].rstrip(".")], 1)
        except ValueError:
            return None

    if re.fullmatch(r"\d{4}", text, re.ASCII) and 1950 <= int(text) <= 2100:
        return date(int(text), 1, 1)
    return None


def sanitize_date(value: Any, field: str, warnings: list[str]) -> str:
    """Canonical YYYY-MM-DD, or "" for missing, current, or unparsable dates."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text or text.lower() in _CURRENT_MARKERS:
        return ""
    parsed = _parse_date(text)
    if parsed is None:
        logger.warning("Unparsable date in %s: %r", field, text)
        warnings.append(f"Invalid date format in {field}: {text!r}")
        return ""
    return parsed.isoformat()


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) not in (None, ""):
            return data[key]
    return None


# ---------------------------------------------------------------------------
# Cleaning stages
# ---------------------------------------------------------------------------

def _clean_personal_details(raw: Mapping[str, Any]) -> PersonalDetails:
    return PersonalDetails(
        first_name=sanitize_string(_pick(raw, "first_name", "firstName")),
        last_name=sanitize_string(_pick(raw, "last_name", "lastName")),
        email=sanitize_string(_pick(raw, "email")),
        phone=sanitize_string(_pick(raw, "phone", "phoneNumber")),
        location=sanitize_string(_pick(raw, "location", "city")),
        summary=sanitize_string(_pick(raw, "summary", "professionalSummary")),
    )


def _clean_experience(raw: Mapping[str, Any], index: int, warnings: list[str]) -> WorkExperience:
    achievements = raw.get("achievements") or []
    if isinstance(achievements, str):
        achievements = achievements.splitlines()
    cleaned = [sanitize_string(a) for a in achievements]
    return WorkExperience(
        job_title=sanitize_string(_pick(raw, "job_title", "jobTitle", "jobtitle", "title")),
        company=sanitize_string(_pick(raw, "company", "companyName")),
        start_date=sanitize_date(
            _pick(raw, "start_date", "startDate"), f"work_experience[{index}].start_date", warnings,
        ),
        end_date=sanitize_date(
            _pick(raw, "end_date", "endDate"), f"work_experience[{index}].end_date", warnings,
        ),
        description=sanitize_string(raw.get("description")),
        achievements=[a for a in cleaned if a],
    )


def _clean_project(raw: Mapping[str, Any]) -> Project:
    technologies = raw.get("technologies") or raw.get("techStack")
    if not isinstance(technologies, (str, list)):
        technologies = None
    return Project(
        name=sanitize_string(_pick(raw, "name", "title")),
        description=sanitize_string(raw.get("description")),
        technologies=sanitize_skills(technologies),
    )


def sanitize_skills(raw: str | list[str] | None) -> list[str]:
    """Split, clean, and case-insensitively de-duplicate a skills field."""
    if raw is None:
        return []
    items = _SKILL_SPLIT_RE.split(raw) if isinstance(raw, str) else list(raw)
    seen: set[str] = set()
    skills: list[str] = []
    for item in items:
        skill = sanitize_string(item)
        key = skill.lower()
        if skill and key not in seen:
            seen.add(key)
            skills.append(skill)
    return skills


# ---------------------------------------------------------------------------
# Measuring stages
# ---------------------------------------------------------------------------

def _validate_completeness(data: SanitizedResume) -> tuple[float, list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []
    checked = 0
    present = 0

    details = data.personal_details
    for value, label, fatal in (
        (details.first_name, "first name", True),
        (details.last_name, "last name", True),
        (details.email, "email", False),
    ):
        checked += 1
        if value:
            present += 1
        elif fatal:
            errors.append(f"Missing {label}")
        else:
            warnings.append(f"Missing {label}")

    for i, exp in enumerate(data.work_experience):
        for value, label, fatal in (
            (exp.job_title, "job title", True),
            (exp.company, "company", True),
            (exp.description, "description", False),
        ):
            checked += 1
            if value:
                present += 1
            elif fatal:
                errors.append(f"Work experience {i + 1}: missing {label}")
            else:
                warnings.append(f"Work experience {i + 1}: missing {label}")

    checked += 1
    if data.skills:
        present += 1
    else:
        warnings.append("No skills listed")

    return present / checked, errors, warnings


def _experience_quality(exp: WorkExperience) -> float:
    text = " ".join([exp.description, *exp.achievements])
    words = {w.strip(".,;:()").lower() for w in text.split()}
    score = 0.0
    if _METRICS_RE.search(text):
        score += 0.4
    if words & ACTION_VERBS:
        score += 0.3
    if len(text) > 100:
        score += 0.3
    return score


def _score_quality(data: SanitizedResume) -> float:
    parts = [_experience_quality(exp) for exp in data.work_experience]
    if data.skills:
        skill_score = 0.0
        if len(data.skills) >= MIN_SKILLS_FOR_QUALITY:
            skill_score += 0.5
        if any(normalize_skill(s) in _KNOWN_TECHNOLOGIES for s in data.skills):
            skill_score += 0.5
        parts.append(skill_score)
    return min(1.0, sum(parts) / len(parts)) if parts else 0.0


def _timeline_issues(data: SanitizedResume, today: date) -> int:
    """Count roles that end before they start or overlap any earlier role."""
    spans = []
    issues = 0
    for exp in data.work_experience:
        if not exp.start_date:
            continue
        end = exp.end_date or today.isoformat()
        if end < exp.start_date:
            issues += 1
            continue
        spans.append((exp.start_date, end))
    spans.sort()
    latest_end = ""
    for start, end in spans:
        if start < latest_end:
            issues += 1
        latest_end = max(latest_end, end)
    return issues


def _score_consistency(data: SanitizedResume, today: date) -> float:
    score = OVERLAP_FACTOR ** _timeline_issues(data, today)
    if data.skills:
        evidence = data.experience_text().lower()
        evidenced = sum(
            1 for s in data.skills
            if s.lower() in evidence or normalize_skill(s) in evidence
        )
        score *= 0.7 + 0.3 * (evidenced / len(data.skills))
    return max(0.0, min(1.0, score))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _as_raw(resume: RawResume | SanitizedResume | Mapping[str, Any]) -> RawResume:
    if isinstance(resume, RawResume):
        return resume
    if isinstance(resume, SanitizedResume):
        return RawResume(**resume.model_dump())
    return RawResume.model_validate(dict(resume))


def sanitize_resume(
    resume: RawResume | SanitizedResume | Mapping[str, Any],
    *,
    today: date | None = None,
) -> SanitizationResult:
    """Clean raw resume input and measure its completeness, quality and consistency.

    `today` closes open-ended roles for the timeline check.
    """
    today = today or date.today()
    raw = _as_raw(resume)
    warnings: list[str] = []
    stages_run: list[str] = []

    details = _clean_personal_details(raw.personal_details)
    title = sanitize_string(raw.title)
    projects = [_clean_project(p) for p in raw.projects if isinstance(p, Mapping)]
    projects = [p for p in projects if p.name or p.description]
    stages_run.append("basic_fields")

    experience = [
        _clean_experience(entry, i, warnings)
        for i, entry in enumerate(raw.work_experience)
        if isinstance(entry, Mapping)
    ]
    stages_run.append("work_experience")

    skills = sanitize_skills(raw.skills)
    stages_run.append("skills")

    data = SanitizedResume(
        title=title,
        personal_details=details,
        work_experience=experience,
        skills=skills,
        projects=projects,
    )

    completeness, errors, validation_warnings = _validate_completeness(data)
    warnings.extend(validation_warnings)
    stages_run.append("completeness_validation")

    quality = _score_quality(data)
    stages_run.append("quality_scoring")

    consistency = _score_consistency(data, today)
    stages_run.append("consistency_scoring")

    if errors:
        logger.info("Resume failed validation: %s", errors)
    return SanitizationResult(
        data=data,
        metadata=SanitizationMetadata(
            stages_run=stages_run,
            sanitized_at=datetime.now(timezone.utc),
        ),
        metrics=SanitizationMetrics(
            completeness=round(completeness, 4),
            quality=round(quality, 4),
            consistency=round(consistency, 4),
        ),
        warnings=warnings,
        errors=errors,
    )


def sanitize_job(job: JobDetails) -> JobDetails:
    """Apply the same string cleaning to job details."""
    return JobDetails(
        job_title=sanitize_string(job.job_title),
        company=sanitize_string(job.company),
        job_description=sanitize_string(job.job_description),
        required_skills=sanitize_skills(job.required_skills),
    )
