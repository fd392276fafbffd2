"""Keyword-based job category classification.

Each category owns a list of keyword phrases. A phrase matches when every
one of its words appears in the tokenized title+description, so "head of"
matches "Head of Platform" but "data scientist" does not match a text that
only says "data".
"""

import logging
import re

from models.schemas.job import JobCategory, JobClassification

logger = logging.getLogger(__name__)

_PUNCT_RE = re.compile(r"[^\w\s]")
_WS_RE = re.compile(r"\s+")

# Declaration order is the tie-break order.
CATEGORY_KEYWORDS: dict[JobCategory, tuple[str, ...]] = {
    JobCategory.TECHNICAL: (
        "engineer", "developer", "programmer", "software", "coding",
        "technical", "data scientist", "devops", "qa", "testing", "analyst",
        "administrator", "architect", "security", "network", "database",
        "systems", "infrastructure",
        # stack vocabulary that only shows up in technical postings
        "api", "backend", "frontend", "full stack", "cloud", "aws", "react", "node",
    ),
    JobCategory.MANAGEMENT: (
        "manager", "director", "lead", "supervisor", "executive", "head of",
        "vp", "president", "chief", "coordinator", "principal", "team lead",
        "project manager", "program manager", "scrum master", "product manager",
    ),
    JobCategory.CREATIVE: (
        "designer", "creative", "artist", "writer", "content", "marketing",
        "brand", "copywriter", "ux", "ui", "graphic", "visual",
        "product designer", "interaction designer", "art director",
        "creative director",
    ),
}

CATEGORY_RELATED_SKILLS: dict[JobCategory, tuple[str, ...]] = {
    JobCategory.TECHNICAL: (
        "programming", "software development", "coding", "testing",
        "debugging", "system design", "algorithms", "data structures",
        "databases", "apis",
    ),
    JobCategory.MANAGEMENT: (
        "leadership", "team management", "strategy", "planning", "budgeting",
        "project management", "stakeholder management", "decision making",
    ),
    JobCategory.CREATIVE: (
        "design", "creativity", "visual design", "user experience", "branding",
        "typography", "illustration", "wireframing", "prototyping",
    ),
    JobCategory.GENERAL: (),
}

MULTI_MATCH_BONUS = 0.3


def normalize_text(text: str) -> str:
    """Lowercase, replace punctuation with spaces, collapse whitespace."""
    text = _PUNCT_RE.sub(" ", (text or "").lower())
    return _WS_RE.sub(" ", text).strip()


def tokenize(text: str) -> set[str]:
    normalized = normalize_text(text)
    return set(normalized.split()) if normalized else set()


def phrase_matches(phrase: str, tokens: set[str]) -> bool:
    words = normalize_text(phrase).split()
    return bool(words) and all(w in tokens for w in words)


def classify_job(title: str, description: str = "") -> JobClassification:
    """Assign the job to the category whose keywords it matches most."""
    tokens = tokenize(f"{title or ''} {description or ''}")
    if not tokens:
        return JobClassification()

    best_category = JobCategory.GENERAL
    best_matches: list[str] = []
    for category, keywords in CATEGORY_KEYWORDS.items():
        matched = [kw for kw in keywords if phrase_matches(kw, tokens)]
        # strict > keeps the earlier category on ties
        if len(matched) > len(best_matches):
            best_category, best_matches = category, matched

    if not best_matches:
        return JobClassification()

    total = len(CATEGORY_KEYWORDS[best_category])
    bonus = MULTI_MATCH_BONUS if len(best_matches) > 2 else 0.0
    confidence = min(1.0, len(best_matches) / total + bonus)

    logger.debug(
        "Classified %r as %s (confidence=%.2f, matches=%s)",
        title, best_category.value, confidence, best_matches,
    )
    return JobClassification(
        category=best_category,
        confidence=round(confidence, 4),
        matched_keywords=best_matches,
        suggested_skills=list(CATEGORY_RELATED_SKILLS[best_category]),
    )
