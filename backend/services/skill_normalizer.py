"""Skill name canonicalization and fuzzy comparison."""

import logging

from rapidfuzz.distance import Levenshtein

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.8

# Canonical name -> aliases. Canonical names follow the technology map's
# vocabulary so a normalized skill can be looked up there directly.
SKILL_ALIASES: dict[str, tuple[str, ...]] = {
    "javascript": ("js", "ecmascript", "es6", "es2015+", "vanilla js"),
    "typescript": ("ts",),
    "python": ("py", "python3", "python 3"),
    "react": ("reactjs", "react.js", "react js"),
    "node.js": ("nodejs", "node", "node js"),
    "vue": ("vuejs", "vue.js"),
    "angular": ("angularjs", "angular.js"),
    "next.js": ("nextjs", "next"),
    "express": ("expressjs", "express.js"),
    "postgresql": ("postgres", "psql"),
    "mongodb": ("mongo",),
    "aws": ("amazon web services",),
    "gcp": ("google cloud platform", "google cloud"),
    "azure": ("microsoft azure",),
    "ci/cd": (
        "ci", "cd", "ci cd", "continuous integration", "continuous deployment",
        "continuous delivery",
    ),
    "devops": ("dev ops", "development operations"),
    "kubernetes": ("k8s",),
    "go": ("golang",),
    "c#": ("csharp", "c sharp"),
    "c++": ("cpp",),
    "machine learning": ("ml",),
    "artificial intelligence": ("ai",),
}

SENIORITY_PREFIXES = (
    "senior", "junior", "lead", "principal", "expert", "certified",
    "professional", "advanced",
)

_ALIAS_TO_CANONICAL: dict[str, str] = {}
for _canonical, _aliases in SKILL_ALIASES.items():
    _ALIAS_TO_CANONICAL[_canonical] = _canonical
    for _alias in _aliases:
        _ALIAS_TO_CANONICAL[_alias] = _canonical


def _strip_prefixes(skill: str) -> str:
    changed = True
    while changed:
        changed = False
        for prefix in SENIORITY_PREFIXES:
            if skill.startswith(prefix + " "):
                skill = skill[len(prefix) + 1:].lstrip()
                changed = True
    return skill


def normalize_skill(skill: str) -> str:
    """Lowercase, drop seniority prefixes, and map aliases to canonical names."""
    cleaned = " ".join((skill or "").lower().split())
    cleaned = _strip_prefixes(cleaned)
    return _ALIAS_TO_CANONICAL.get(cleaned, cleaned)


def skill_similarity(skill_a: str, skill_b: str) -> float:
    """Similarity in [0, 1]; 1.0 when both names share a canonical form."""
    a = normalize_skill(skill_a)
    b = normalize_skill(skill_b)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    max_len = max(len(a), len(b))
    return 1.0 - Levenshtein.distance(a, b) / max_len


def are_similar_skills(
    skill_a: str, skill_b: str, threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> bool:
    return skill_similarity(skill_a, skill_b) >= threshold


def find_closest_skill(
    skill: str,
    candidates: list[str],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> str | None:
    """Best candidate at or above threshold; the first one wins ties."""
    best: str | None = None
    best_score = threshold
    for candidate in candidates:
        score = skill_similarity(skill, candidate)
        if score > best_score or (best is None and score >= best_score):
            best, best_score = candidate, score
    return best
