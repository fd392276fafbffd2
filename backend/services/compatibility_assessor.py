"""Compatibility assessor: composes every component into one verdict.

Flow:
    raw resume + job details
      ├─ sanitize_resume(raw)                     → SanitizationResult (errors abort)
      ├─ classify_job(title, description)         → JobClassification
      ├─ requirement_extractor                    → job skills, required/actual years
      │       ↓
      ├─ match_skills / match_experience / score_context   → component scores
      ├─ technical & experience mismatch penalties, then compensation
      ├─ await assess_similarity(resume, job)     → similarity (0.5 on failure)
      │       ↓
      ├─ score_pipeline.run()                     → 0-1 score + step trace
      └─ level, suggestions, is_compatible        → CompatibilityAssessment (0-100)

The similarity call is the only await; everything else is pure and
deterministic for a given `today`.
"""

import logging
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

from config import CompatibilityConfig, settings
from models.schemas.assessment import (
    AssessmentMetadata,
    CompatibilityAssessment,
    CompatibilityLevel,
    ContextComponent,
    ExperienceComponent,
    ScoringBreakdown,
    SkillsComponent,
)
from models.schemas.job import JobDetails
from models.schemas.resume import RawResume
from services import requirement_extractor, score_pipeline
from services.context_scorer import score_context
from services.errors import AssessmentUnavailableError, AssessmentValidationError
from services.experience_matcher import match_experience
from services.job_classifier import classify_job
from services.penalties import experience_mismatch_penalty, technical_mismatch_penalty
from services.penalty_compensation import compensate
from services.sanitization import sanitize_job, sanitize_resume
from services.similarity import SimilarityService, assess_similarity, get_provider
from services.skill_matcher import match_skills
from services.suggestions import SuggestionInputs, build_suggestions
from services.technical_density import analyze_technical_density, is_technical_role
from services.technology_map import TechnologyRegistry, get_default_registry

logger = logging.getLogger(__name__)

ASSESSMENT_VERSION = "2.0"


def compatibility_level(score: float, config: CompatibilityConfig) -> CompatibilityLevel:
    """Map a 0-100 score onto the configured level cutoffs."""
    levels = config.levels
    if score >= levels.excellent:
        return CompatibilityLevel.EXCELLENT
    if score >= levels.good:
        return CompatibilityLevel.GOOD
    if score >= levels.potential:
        return CompatibilityLevel.POTENTIAL
    if score >= levels.poor:
        return CompatibilityLevel.POOR
    return CompatibilityLevel.INCOMPATIBLE


def validate_job(job: JobDetails) -> list[str]:
    errors = []
    if not job.job_title.strip():
        errors.append("Missing job title")
    if not job.company.strip():
        errors.append("Missing company")
    return errors


class CompatibilityAssessor:
    """Stateless per call; holds only configuration and collaborators."""

    def __init__(
        self,
        config: CompatibilityConfig | None = None,
        similarity: SimilarityService | None = None,
        registry: TechnologyRegistry | None = None,
    ):
        self.config = config or settings.compatibility
        self.similarity = similarity or SimilarityService(get_provider(), self.config.similarity)
        self.registry = registry or get_default_registry()

    async def assess(
        self,
        resume: RawResume | Mapping[str, Any],
        job: JobDetails | Mapping[str, Any],
        *,
        today: date | None = None,
    ) -> CompatibilityAssessment:
        """Assess one (resume, job) pair.

        Raises AssessmentValidationError when required resume or job fields
        are missing, and AssessmentUnavailableError when similarity is
        required but down. A similarity failure otherwise degrades the
        result instead of failing it.
        """
        config = self.config
        job = sanitize_job(job if isinstance(job, JobDetails) else JobDetails.model_validate(dict(job)))

        # --- Stage 1: sanitize and validate ---
        sanitized = sanitize_resume(resume, today=today)
        errors = sanitized.errors + validate_job(job)
        if errors:
            raise AssessmentValidationError(errors, sanitized.warnings)
        data = sanitized.data
        logger.info("Assessing resume against %r at %r", job.job_title, job.company)

        # --- Stage 2: classify and extract requirements ---
        classification = classify_job(job.job_title, job.job_description)
        job_skills = requirement_extractor.job_required_skills(job, self.registry)
        cand_skills = requirement_extractor.candidate_skills(data, self.registry)
        required_years = requirement_extractor.required_years_by_area(job, config, self.registry)
        actual_years = requirement_extractor.actual_years_by_area(data, list(required_years), today)
        total_years = requirement_extractor.total_experience_years(data, today)

        # --- Stage 3: component scores ---
        skills = match_skills(
            job_skills, cand_skills, config.skills,
            job_text=job.job_description, registry=self.registry,
        )
        experience = match_experience(
            required_years, actual_years, config.experience,
            context=job.job_description, registry=self.registry,
        )
        context = score_context(data, job, classification)

        # --- Stage 4: penalties and their compensation ---
        job_role = is_technical_role(job.job_title)
        job_density = analyze_technical_density(job.job_description)
        resume_density = analyze_technical_density(data.full_text())
        tech_penalty = technical_mismatch_penalty(job_density, resume_density, job_role, config.penalties)
        exp_penalty = experience_mismatch_penalty(
            experience, job.job_title, config.penalties, total_years=total_years,
        )
        compensation = compensate(
            skills,
            total_years=total_years,
            projects=data.projects,
            job_skills=job_skills,
            job_description=job.job_description,
            config=config.compensation,
        )

        # --- Stage 5: external similarity (the only await) ---
        job_text = f"{job.job_title}\n{job.job_description}".strip()
        outcome = await assess_similarity(self.similarity, data.full_text(), job_text)
        degraded_reasons = () if outcome.available else (outcome.reason,)
        if degraded_reasons and config.require_similarity:
            raise AssessmentUnavailableError(outcome.reason)

        # --- Stage 6: score pipeline ---
        weights = config.weights
        raw_score, steps = score_pipeline.run(score_pipeline.PipelineInputs(
            components={
                "skills": (skills.score, weights.skills),
                "experience": (experience.score, weights.experience),
                "context": (context.score, weights.context),
            },
            technical_penalty=tech_penalty.penalty,
            severe_mismatch=tech_penalty.severe_mismatch,
            severe_score_cap=config.penalties.severe_score_cap,
            experience_penalty=exp_penalty.penalty,
            technical_reduction=compensation.reduction("technical"),
            experience_reduction=compensation.reduction("experience"),
            similarity=outcome.similarity,
            adjustment_weight=config.adjustment_weight,
        ))
        for step in steps:
            logger.debug("  %s: %.4f -> %.4f (%s %.4f)", step.name, step.before, step.after, step.kind, step.value)

        # --- Stage 7: verdict (0-100 from here on) ---
        score = round(raw_score * 100, 1)
        level = compatibility_level(score, config)
        suggestions = build_suggestions(SuggestionInputs(
            skills=skills,
            experience=experience,
            technical_penalty=tech_penalty,
            experience_penalty=exp_penalty,
            job_category=classification.category,
            candidate_category=context.candidate_category,
            role_type_mismatch=context.role_type_mismatch,
            degraded_reasons=degraded_reasons,
        ), config)

        has_blocking = any(s.severity == "blocking" for s in suggestions)
        is_compatible = (
            score >= config.minimum_viable_score
            and len(skills.missing_critical) <= config.max_missing_critical_skills
            and not has_blocking
        )

        breakdown = ScoringBreakdown(
            overall=raw_score,
            skills=SkillsComponent(score=skills.score, weight=weights.skills, result=skills),
            experience=ExperienceComponent(
                score=experience.score, weight=weights.experience, result=experience,
            ),
            context=ContextComponent(
                score=context.score, weight=weights.context,
                relevant_factors=context.relevant_factors,
            ),
            adjustments=steps,
        )
        metadata = AssessmentMetadata(
            skills_match=round(skills.score * 100, 1),
            missing_critical_skills=skills.missing_critical,
            experience_mismatch=exp_penalty.penalty > 0 or any(
                m.required > 0 and m.actual / m.required < config.min_experience_ratio
                for m in experience.matches
            ),
            role_type_mismatch=context.role_type_mismatch,
            assessment_details={
                "classification": classification.model_dump(mode="json"),
                "job_skills": job_skills,
                "candidate_skills": cand_skills,
                "technical_penalty": tech_penalty.model_dump(mode="json"),
                "experience_penalty": exp_penalty.model_dump(mode="json"),
                "penalty_compensation": compensation.model_dump(mode="json"),
                "similarity": outcome.similarity,
                "similarity_available": outcome.available,
                "sanitization": sanitized.metrics.model_dump(),
                "sanitization_warnings": sanitized.warnings,
                "total_experience_years": total_years,
            },
            assessment_timestamp=datetime.now(timezone.utc),
            assessment_version=ASSESSMENT_VERSION,
            has_warnings=any(s.severity == "warning" for s in suggestions),
            degraded_reasons=list(degraded_reasons),
        )

        logger.info(
            "Assessment complete: score=%.1f level=%s compatible=%s degraded=%s",
            score, level.value, is_compatible, bool(degraded_reasons),
        )
        return CompatibilityAssessment(
            is_compatible=is_compatible,
            compatibility_score=score,
            compatibility_level=level,
            status="degraded" if degraded_reasons else "complete",
            suggestions=suggestions,
            breakdown=breakdown,
            metadata=metadata,
        )


async def assess_compatibility(
    resume: RawResume | Mapping[str, Any],
    job: JobDetails | Mapping[str, Any],
    config: CompatibilityConfig | None = None,
) -> CompatibilityAssessment:
    """One-shot convenience wrapper around CompatibilityAssessor."""
    return await CompatibilityAssessor(config=config).assess(resume, job)
