"""Technical vocabulary density analysis.

Measures how much of a known technology vocabulary a text mentions. Matching
20% of the vocabulary saturates the score, so a focused job posting or
resume reaches 1.0 without naming every tool on earth.
"""

import logging
import re

from models.schemas.technical_density import (
    CategoryScore,
    TechnicalDensityResult,
    TechnicalRoleResult,
    TermMatch,
)

logger = logging.getLogger(__name__)

# Tokens keep the characters that appear inside technology names (c++, c#,
# node.js, ci/cd); trailing sentence punctuation is trimmed afterwards.
_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9+#./-]*")
_TRAILING_PUNCT = ".,/-"

SATURATION_RATIO = 0.2

INDUSTRY_TERMS: dict[str, tuple[str, ...]] = {
    "fintech": (
        "blockchain", "cryptocurrency", "payment processing", "financial modeling",
        "trading systems", "risk analysis", "fraud detection", "kyc", "aml",
    ),
    "healthcare": (
        "emr", "ehr", "hipaa", "hl7", "fhir", "medical imaging", "clinical data",
        "telehealth", "patient portal", "icd-10",
    ),
    "e_commerce": (
        "payment gateway", "shopping cart", "inventory management",
        "order processing", "pci compliance", "product catalog",
    ),
    "cybersecurity": (
        "penetration testing", "vulnerability assessment", "siem",
        "intrusion detection", "threat analysis", "security audit",
    ),
}

TECHNICAL_TERMS: dict[str, tuple[str, ...]] = {
    "programming_languages": (
        "javascript", "python", "java", "c++", "c#", "ruby", "php", "swift",
        "kotlin", "go", "rust", "typescript", "scala", "perl", "r", "matlab",
    ),
    "frameworks": (
        "react", "angular", "vue", "django", "flask", "spring", "express",
        "laravel", "rails", "asp.net", "node.js", "next.js", "nuxt", "svelte",
    ),
    "databases": (
        "sql", "mysql", "postgresql", "mongodb", "redis", "elasticsearch",
        "dynamodb", "cassandra", "oracle", "firebase", "neo4j", "graphql",
    ),
    "cloud_devops": (
        "aws", "azure", "gcp", "docker", "kubernetes", "jenkins", "terraform",
        "ansible", "circleci", "gitlab", "github actions", "prometheus", "grafana",
    ),
    "technical_concepts": (
        "api", "rest", "microservices", "ci/cd", "tdd", "agile", "scrum",
        "algorithms", "data structures", "design patterns", "architecture",
    ),
    "technical_roles": (
        "software engineer", "developer", "programmer", "architect", "devops",
        "full stack", "frontend", "backend", "sre", "data scientist",
        "ml engineer", "qa engineer", "security engineer", "cloud engineer",
        "systems engineer",
    ),
    "version_specific": (
        "es6", "es2015", "es2016", "es2017", "es2018", "es2019", "es2020", "es2021",
        "python 2.7", "python 3.6", "python 3.7", "python 3.8", "python 3.9",
        "python 3.10", "python 3.11",
        "java 8", "java 11", "java 17", "java 21",
        "jdk 8", "jdk 11", "jdk 17", "jdk 21",
        "react 16", "react 17", "react 18",
        "angular 12", "angular 13", "angular 14", "angular 15", "angular 16",
        "vue 2", "vue 3", "spring boot 2", "spring boot 3", "django 3", "django 4",
    ),
    "industry_specific": tuple(t for terms in INDUSTRY_TERMS.values() for t in terms),
}

TECHNICAL_ROLE_INDICATORS = frozenset({
    "engineer", "developer", "programmer", "architect", "analyst",
    "administrator", "technician", "specialist", "consultant",
})

_VERSION_TERMS = frozenset(TECHNICAL_TERMS["version_specific"])
_INDUSTRY_TERMS = frozenset(TECHNICAL_TERMS["industry_specific"])

ALL_TERMS: tuple[str, ...] = tuple(dict.fromkeys(
    term for terms in TECHNICAL_TERMS.values() for term in terms
))


# ---------------------------------------------------------------------------
# Term matching
# ---------------------------------------------------------------------------

def tokenize(text: str) -> set[str]:
    """Split lowercase text into tokens, keeping symbols used in tech names."""
    tokens = set()
    for raw in _TOKEN_RE.findall((text or "").lower()):
        token = raw.rstrip(_TRAILING_PUNCT)
        if token:
            tokens.add(token)
    return tokens


def _contains_term(term: str, text_lower: str) -> bool:
    """Substring test that will not let "go" match inside "google"."""
    pattern = r"(?<![a-z0-9])" + re.escape(term) + r"(?![a-z0-9+#])"
    return re.search(pattern, text_lower) is not None


def _compact(text: str) -> str:
    return re.sub(r"\s+", "", text)


def term_matches(term: str, text_lower: str, tokens: set[str]) -> str | None:
    """Return how a term matched (exact, token, all_words), or None."""
    if _contains_term(term, text_lower):
        return "exact"
    if term in tokens:
        return "token"
    words = term.split()
    if len(words) > 1 and all(w in tokens for w in words):
        return "all_words"
    return None


def term_confidence(term: str, text_lower: str, tokens: set[str]) -> tuple[float, str]:
    """Confidence that the text really mentions the term, with a reason tag."""
    if _contains_term(term, text_lower):
        return 1.0, "exact"
    words = term.split()
    if term in _VERSION_TERMS and _compact(term) in _compact(text_lower):
        return 0.9, "version"
    present = sum(1 for w in words if w in tokens)
    if term in _INDUSTRY_TERMS and words and present == len(words):
        return 0.85, "industry"
    if words and present == len(words):
        return 0.7, "all_words"
    if len(words) > 1 and present:
        return 0.3 + 0.4 * (present / len(words)), "partial"
    return 0.0, ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def analyze_technical_density(text: str) -> TechnicalDensityResult:
    """Score how dense a text is in known technical vocabulary (0-1)."""
    if not text or not text.strip():
        return TechnicalDensityResult()

    text_lower = text.lower()
    tokens = tokenize(text)
    total_terms = len(ALL_TERMS)

    matched: set[str] = set()
    matches: list[TermMatch] = []
    category_scores: dict[str, CategoryScore] = {}
    confidence_sum = 0.0
    seen_confidence: set[str] = set()

    for category, terms in TECHNICAL_TERMS.items():
        cat_matches: list[str] = []
        for term in terms:
            how = term_matches(term, text_lower, tokens)
            if how:
                cat_matches.append(term)
                matched.add(term)

            conf, reason = term_confidence(term, text_lower, tokens)
            if conf > 0 and term not in seen_confidence:
                seen_confidence.add(term)
                confidence_sum += conf
                matches.append(TermMatch(
                    term=term, category=category,
                    confidence=round(conf, 4), reason=reason,
                ))

        cat_denominator = max(1.0, len(terms) * SATURATION_RATIO)
        category_scores[category] = CategoryScore(
            score=min(1.0, len(cat_matches) / cat_denominator),
            matches=cat_matches,
        )

    denominator = total_terms * SATURATION_RATIO
    score = min(1.0, len(matched) / denominator)
    confidence_score = min(1.0, confidence_sum / denominator)

    logger.debug("Technical density %.3f (%d unique terms)", score, len(matched))
    return TechnicalDensityResult(
        score=round(score, 4),
        confidence_score=round(confidence_score, 4),
        matches=matches,
        category_scores=category_scores,
    )


def is_technical_role(title: str) -> TechnicalRoleResult:
    """Decide whether a job title names a technical role.

    An exact technical role phrase ("software engineer", "sre") is
    conclusive. Otherwise each generic indicator word adds confidence,
    capped below certainty.
    """
    title_lower = (title or "").lower()
    if not title_lower.strip():
        return TechnicalRoleResult()

    for role in TECHNICAL_TERMS["technical_roles"]:
        if _contains_term(role, title_lower):
            return TechnicalRoleResult(is_technical=True, confidence=1.0, matched_terms=[role])

    tokens = tokenize(title_lower)
    indicators = sorted(TECHNICAL_ROLE_INDICATORS & tokens)
    if not indicators:
        return TechnicalRoleResult()

    confidence = min(0.8, 0.4 + 0.2 * len(indicators))
    return TechnicalRoleResult(
        is_technical=confidence > 0.4,
        confidence=round(confidence, 4),
        matched_terms=indicators,
    )
