import os

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


# ---------------------------------------------------------------------------
# Component configuration
# ---------------------------------------------------------------------------

class SkillMatchConfig(BaseModel):
    base_weight: float = 1.0
    context_multiplier: float = 1.2  # boost when group context appears near a mention
    compensation_factor: float = 0.8  # scales a group's compensation for related matches
    min_threshold: float = 0.8  # normalizer similarity needed for a direct match
    context_window: int = 12  # tokens either side of a skill mention

    model_config = {"frozen": True}


class ExperienceMatchConfig(BaseModel):
    years_weight: float = 0.75  # dampening exponent on the years ratio
    relevance_weight: float = 0.4
    max_experience_bonus: float = 0.15
    insufficiency_penalty: float = 0.4
    sufficiency_threshold: float = 0.7  # areas under this are reported as gaps

    model_config = {"frozen": True}


class PenaltyConfig(BaseModel):
    technical_gap_multiplier: float = 2.0  # applied when the role is technical
    technical_cap: float = 0.8
    severe_mismatch_floor: float = 0.6
    severe_role_confidence: float = 0.7
    severe_job_density: float = 0.3
    severe_resume_density: float = 0.2
    severe_score_cap: float = 0.4  # score ceiling after a severe mismatch

    experience_base_factor: float = 0.3
    experience_cap: float = 0.5
    level_weights: dict[str, float] = {
        "executive": 1.75,
        "senior": 1.5,
        "lead": 1.25,
        "manager": 1.25,
    }
    overqualified_years: float = 8.0
    overqualified_penalty: float = 0.2

    minimum_penalties: dict[str, float] = {"experience_gap": 0.25}

    model_config = {"frozen": True}


class CompensationConfig(BaseModel):
    # skill score cutoffs for moderate / high / very high match levels
    moderate_match: float = 0.4
    high_match: float = 0.7
    very_high_match: float = 0.85
    skill_reductions: dict[str, float] = {"high": 0.1, "very_high": 0.2}

    # total years -> reduction of technical and experience penalties
    experience_power: dict[float, float] = {7.0: 0.5, 5.0: 0.25}

    relevant_project: float = 0.4
    highly_relevant_project: float = 0.7
    highly_relevant_reduction: float = 0.2
    multiple_projects_reduction: float = 0.15
    synergy_reduction: float = 0.1

    limits: dict[str, float] = {"experience": 0.7, "technical": 0.6}
    overall_limit: float = 0.85

    model_config = {"frozen": True}


class SimilarityConfig(BaseModel):
    timeout_s: float = 10.0
    max_retries: int = 2
    backoff_s: float = 0.5
    chunk_size: int = 7000
    sigmoid_k: float = 12.0

    model_config = {"frozen": True}


class ComponentWeights(BaseModel):
    skills: float = 0.35
    experience: float = 0.35
    context: float = 0.30

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_sum(self):
        total = self.skills + self.experience + self.context
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"component weights must sum to 1.0, got {total:.3f}")
        return self


class CompatibilityLevels(BaseModel):
    excellent: float = 85
    good: float = 70
    potential: float = 55
    poor: float = 40

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_order(self):
        if not (self.excellent >= self.good >= self.potential >= self.poor):
            raise ValueError("compatibility level cutoffs must be descending")
        return self


class CompatibilityConfig(BaseModel):
    """Every threshold the assessor reads, in one overridable object."""

    minimum_viable_score: float = 40  # 0-100
    max_missing_critical_skills: int = 2
    min_skills_match_score: float = 50  # 0-100, below this emits a warning
    min_experience_ratio: float = 0.7

    levels: CompatibilityLevels = CompatibilityLevels()
    weights: ComponentWeights = ComponentWeights()
    experience_requirements: dict[str, float] = {
        "executive": 6,
        "senior": 4,
        "lead": 3,
        "manager": 2,
    }

    adjustment_weight: float = 0.2  # strength of the semantic-similarity adjustment
    require_similarity: bool = False  # raise instead of degrading when similarity is down

    skills: SkillMatchConfig = SkillMatchConfig()
    experience: ExperienceMatchConfig = ExperienceMatchConfig()
    penalties: PenaltyConfig = PenaltyConfig()
    compensation: CompensationConfig = CompensationConfig()
    similarity: SimilarityConfig = SimilarityConfig()

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Process settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    gemini_api_key: str = ""
    embedding_provider: str = "sentence-transformers"  # "sentence-transformers" | "gemini" | "none"
    embedding_model: str = "all-MiniLM-L6-v2"
    gemini_embedding_model: str = "text-embedding-004"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False

    compatibility: CompatibilityConfig = CompatibilityConfig()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
        "protected_namespaces": ("settings_",),
    }


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
