"""Context component: does the candidate's background fit the kind of role?

Blends three signals:
- role category alignment (job classification vs. the candidate's titles)
- title relevance (shared words between job title and past titles)
- industry match, when the posting names an industry
"""

import logging
from dataclasses import dataclass, field

from models.schemas.job import JobCategory, JobClassification, JobDetails
from models.schemas.resume import SanitizedResume
from services.job_classifier import classify_job, tokenize

logger = logging.getLogger(__name__)

ROLE_WEIGHT = 0.5
TITLE_WEIGHT = 0.3
INDUSTRY_WEIGHT = 0.2

ALIGNED_ROLE_SCORE = 1.0
UNKNOWN_ROLE_SCORE = 0.5
MISALIGNED_ROLE_SCORE = 0.3

INDUSTRY_KEYWORDS: dict[str, frozenset[str]] = {
    "technology": frozenset({"software", "technology", "saas", "digital", "cloud", "platform"}),
    "finance": frozenset({"banking", "financial", "finance", "investment", "trading", "fintech"}),
    "healthcare": frozenset({"medical", "health", "healthcare", "clinical", "patient", "pharmaceutical"}),
    "education": frozenset({"education", "school", "university", "learning", "edtech"}),
    "retail": frozenset({"retail", "ecommerce", "commerce", "store", "shopping"}),
    "manufacturing": frozenset({"manufacturing", "factory", "industrial", "supply"}),
    "consulting": frozenset({"consulting", "consultancy", "advisory", "clients"}),
}

RELATED_INDUSTRIES: dict[str, frozenset[str]] = {
    "technology": frozenset({"consulting", "education"}),
    "healthcare": frozenset({"technology", "consulting"}),
    "finance": frozenset({"technology", "consulting"}),
    "education": frozenset({"technology", "consulting"}),
    "manufacturing": frozenset({"technology", "consulting"}),
    "retail": frozenset({"technology", "consulting"}),
    "consulting": frozenset({"technology", "finance", "healthcare"}),
}

# Title words that say nothing about the kind of work.
_TITLE_STOPWORDS = frozenset({
    "senior", "sr", "junior", "jr", "lead", "principal", "staff", "associate",
    "i", "ii", "iii", "iv", "of", "and", "the", "a", "intern",
})

# Interchangeable role nouns.
_ROLE_SYNONYMS: dict[str, str] = {
    "engineer": "developer",
    "programmer": "developer",
    "dev": "developer",
    "swe": "developer",
}


@dataclass
class ContextScore:
    score: float
    role_type_mismatch: bool
    candidate_category: JobCategory
    relevant_factors: list[str] = field(default_factory=list)


def detect_industry(text: str) -> tuple[str, float]:
    """Industry with the highest keyword hit ratio, or ("unknown", 0)."""
    tokens = tokenize(text)
    best, best_conf = "unknown", 0.0
    for industry, keywords in INDUSTRY_KEYWORDS.items():
        conf = len(keywords & tokens) / len(keywords)
        if conf > best_conf:
            best, best_conf = industry, conf
    return best, best_conf


def industry_match(candidate_industries: set[str], job_industry: str) -> float:
    if job_industry in candidate_industries:
        return 1.0
    if candidate_industries & RELATED_INDUSTRIES.get(job_industry, frozenset()):
        return 0.7
    return 0.5


def _title_words(title: str) -> set[str]:
    words = tokenize(title) - _TITLE_STOPWORDS
    return {_ROLE_SYNONYMS.get(w, w) for w in words}


def title_relevance(job_title: str, candidate_titles: list[str]) -> tuple[float, list[str]]:
    """Fraction of meaningful job-title words found in any candidate title."""
    job_words = _title_words(job_title)
    if not job_words:
        return 0.0, []
    candidate_words: set[str] = set()
    for title in candidate_titles:
        candidate_words |= _title_words(title)
    shared = sorted(job_words & candidate_words)
    return len(shared) / len(job_words), shared


def candidate_titles(resume: SanitizedResume) -> list[str]:
    titles = [resume.title] + [e.job_title for e in resume.work_experience]
    return [t for t in titles if t]


def score_context(
    resume: SanitizedResume, job: JobDetails, classification: JobClassification,
) -> ContextScore:
    titles = candidate_titles(resume)
    background = classify_job(" ".join(titles))
    factors: list[str] = []

    # Role category
    mismatch = False
    if classification.category == JobCategory.GENERAL or background.category == JobCategory.GENERAL:
        role_score = UNKNOWN_ROLE_SCORE
        factors.append("Role category could not be compared")
    elif background.category == classification.category:
        role_score = ALIGNED_ROLE_SCORE
        factors.append(f"Background matches {classification.category.value.lower()} role")
    else:
        role_score = MISALIGNED_ROLE_SCORE
        mismatch = True
        factors.append(
            f"Background is {background.category.value.lower()}, "
            f"role is {classification.category.value.lower()}"
        )

    # Title overlap
    title_score, shared = title_relevance(job.job_title, titles)
    if shared:
        factors.append(f"Title overlap: {', '.join(shared)}")

    # Industry, only when the posting names one
    job_industry, _ = detect_industry(job.job_description)
    if job_industry == "unknown":
        total = ROLE_WEIGHT + TITLE_WEIGHT
        score = (ROLE_WEIGHT * role_score + TITLE_WEIGHT * title_score) / total
    else:
        industries = {
            detect_industry(" ".join([e.description, *e.achievements]))[0]
            for e in resume.work_experience
        } - {"unknown"}
        ind_score = industry_match(industries, job_industry)
        factors.append(f"Industry {job_industry}: {ind_score:.1f}")
        score = ROLE_WEIGHT * role_score + TITLE_WEIGHT * title_score + INDUSTRY_WEIGHT * ind_score

    logger.debug("Context score %.3f (%s)", score, factors)
    return ContextScore(
        score=round(min(1.0, max(0.0, score)), 4),
        role_type_mismatch=mismatch,
        candidate_category=background.category,
        relevant_factors=factors,
    )
