"""End-to-end assessments with fake embedding providers."""

import copy

import pytest

from config import CompatibilityConfig, settings
from conftest import TODAY, ConstantProvider, FailingProvider, OrthogonalProvider, make_assessor
from models.schemas.assessment import CompatibilityLevel
from services.compatibility_assessor import assess_compatibility, compatibility_level
from services.errors import AssessmentUnavailableError, AssessmentValidationError


def suggestion_types(result, severity=None):
    return [s.type for s in result.suggestions if severity is None or s.severity == severity]


class TestCompatibilityLevel:
    @pytest.mark.parametrize("score,level", [
        (100, CompatibilityLevel.EXCELLENT),
        (85, CompatibilityLevel.EXCELLENT),
        (84.9, CompatibilityLevel.GOOD),
        (70, CompatibilityLevel.GOOD),
        (55, CompatibilityLevel.POTENTIAL),
        (40, CompatibilityLevel.POOR),
        (39.9, CompatibilityLevel.INCOMPATIBLE),
        (0, CompatibilityLevel.INCOMPATIBLE),
    ])
    def test_cutoffs(self, score, level):
        assert compatibility_level(score, CompatibilityConfig()) == level


class TestJuniorCandidateForSeniorRole:
    @pytest.mark.asyncio
    async def test_breakdown(self, junior_resume, senior_job):
        result = await make_assessor(OrthogonalProvider()).assess(junior_resume, senior_job, today=TODAY)

        details = result.metadata.assessment_details
        assert details["classification"]["category"] == "TECHNICAL"
        assert details["classification"]["confidence"] == pytest.approx(0.4923, abs=1e-3)
        assert details["job_skills"] == ["react", "node.js", "aws"]

        skills = result.breakdown.skills.result
        by_skill = {m.skill: m for m in skills.matches}
        assert by_skill["react"].match_type == "direct"
        assert by_skill["node.js"].match_type == "related"
        assert skills.missing_critical == ["aws"]
        assert result.metadata.missing_critical_skills == ["aws"]

        assert details["experience_penalty"]["penalty"] == pytest.approx(0.27)
        assert details["technical_penalty"]["penalty"] == 0.0
        assert result.metadata.experience_mismatch

    @pytest.mark.asyncio
    async def test_verdict(self, junior_resume, senior_job):
        result = await make_assessor(OrthogonalProvider()).assess(junior_resume, senior_job, today=TODAY)

        assert result.status == "complete"
        assert result.compatibility_score == pytest.approx(46.3, abs=0.2)
        assert result.compatibility_level == CompatibilityLevel.POOR
        # one missing critical skill is within the allowed maximum
        assert result.is_compatible
        assert "experience_level_mismatch" in suggestion_types(result, "warning")
        assert "skill_suggestion" in suggestion_types(result, "info")
        assert "skill_compensation" in suggestion_types(result, "info")
        assert result.metadata.has_warnings

    @pytest.mark.asyncio
    async def test_too_many_missing_critical_skills(self, junior_resume, senior_job):
        senior_job["required_skills"] = ["Kubernetes", "Terraform"]
        result = await make_assessor(OrthogonalProvider()).assess(junior_resume, senior_job, today=TODAY)

        assert len(result.metadata.missing_critical_skills) == 3
        assert not result.is_compatible
        assert result.blocking_suggestions[0].type == "missing_critical_skills"
        assert result.suggestions[0].severity == "blocking"

    @pytest.mark.asyncio
    async def test_score_trace_is_ordered(self, junior_resume, senior_job):
        result = await make_assessor(OrthogonalProvider()).assess(junior_resume, senior_job, today=TODAY)
        steps = result.breakdown.adjustments
        assert [s.name for s in steps][0] == "weighted_components"
        assert steps[-1].name == "clamp"
        assert result.compatibility_score == pytest.approx(round(steps[-1].after * 100, 1))


class TestPenaltyCompensation:
    @pytest.mark.asyncio
    async def test_relevant_project_softens_experience_penalty(self, junior_resume, senior_job):
        assessor = make_assessor(OrthogonalProvider())
        baseline = await assessor.assess(junior_resume, senior_job, today=TODAY)

        junior_resume["projects"] = [{
            "name": "Storefront",
            "description": "Storefront built with React and Node.js, deployed on AWS Lambda",
            "technologies": "React, Node.js, AWS",
        }]
        result = await assessor.assess(junior_resume, senior_job, today=TODAY)

        details = result.metadata.assessment_details
        compensation = details["penalty_compensation"]
        assert compensation["skill_match_level"] == "moderate"
        assert compensation["reductions"] == {"experience": 0.2}
        assert compensation["projects"][0]["highly_relevant"]

        steps = {s.name: s for s in result.breakdown.adjustments}
        assert steps["penalty_compensation"].value == 0.2
        assert steps["experience_mismatch"].value == pytest.approx(0.27 * 0.8)
        # the raw penalty is still reported
        assert details["experience_penalty"]["penalty"] == pytest.approx(0.27)
        assert result.compatibility_score > baseline.compatibility_score

    @pytest.mark.asyncio
    async def test_no_strengths_no_compensation(self, junior_resume, senior_job):
        result = await make_assessor(OrthogonalProvider()).assess(junior_resume, senior_job, today=TODAY)
        assert result.metadata.assessment_details["penalty_compensation"]["reductions"] == {}


class TestSimilarityFailure:
    @pytest.mark.asyncio
    async def test_degrades_instead_of_failing(self, strong_resume, senior_job):
        provider = FailingProvider()
        degraded = await make_assessor(provider).assess(strong_resume, senior_job, today=TODAY)
        neutral = await make_assessor(OrthogonalProvider()).assess(strong_resume, senior_job, today=TODAY)

        assert provider.calls == 3
        assert degraded.status == "degraded"
        assert degraded.metadata.has_warnings
        assert degraded.metadata.degraded_reasons
        assert "assessment_degraded" in suggestion_types(degraded, "warning")
        assert degraded.compatibility_score == neutral.compatibility_score
        assert neutral.status == "complete"

    @pytest.mark.asyncio
    async def test_required_similarity_raises(self, strong_resume, senior_job):
        assessor = make_assessor(FailingProvider(), require_similarity=True)
        with pytest.raises(AssessmentUnavailableError):
            await assessor.assess(strong_resume, senior_job, today=TODAY)

    @pytest.mark.asyncio
    async def test_high_similarity_raises_score(self, junior_resume, senior_job):
        neutral = await make_assessor(OrthogonalProvider()).assess(junior_resume, senior_job, today=TODAY)
        similar = await make_assessor(ConstantProvider()).assess(junior_resume, senior_job, today=TODAY)
        assert similar.compatibility_score == pytest.approx(neutral.compatibility_score * 1.2, abs=0.2)

    @pytest.mark.asyncio
    async def test_no_provider_configured(self, strong_resume, senior_job, monkeypatch):
        monkeypatch.setattr(settings, "embedding_provider", "none")
        result = await assess_compatibility(strong_resume, senior_job)
        assert result.status == "degraded"
        assert "no embedding provider configured" in result.metadata.degraded_reasons


class TestStrongCandidate:
    @pytest.mark.asyncio
    async def test_excellent_fit(self, strong_resume, senior_job):
        result = await make_assessor(OrthogonalProvider()).assess(strong_resume, senior_job, today=TODAY)
        assert result.compatibility_level == CompatibilityLevel.EXCELLENT
        assert result.is_compatible
        assert result.metadata.missing_critical_skills == []
        assert not result.metadata.experience_mismatch
        assert result.blocking_suggestions == []


class TestNonTechnicalRole:
    @pytest.mark.asyncio
    async def test_product_manager_without_description(self, junior_resume):
        job = {"job_title": "Product Manager", "company": "Acme", "job_description": ""}
        result = await make_assessor(OrthogonalProvider()).assess(junior_resume, job, today=TODAY)

        details = result.metadata.assessment_details
        assert details["classification"]["category"] == "MANAGEMENT"
        assert details["technical_penalty"]["job_density"] == 0.0
        assert details["technical_penalty"]["penalty"] == 0.0
        assert "technical_mismatch" not in suggestion_types(result)
        assert result.metadata.role_type_mismatch
        assert "role_type_mismatch" in suggestion_types(result, "warning")


class TestValidation:
    @pytest.mark.asyncio
    async def test_unparsable_date_is_a_warning(self, junior_resume, senior_job):
        junior_resume["work_experience"][0]["start_date"] = "Jan 0"
        result = await make_assessor(OrthogonalProvider()).assess(junior_resume, senior_job, today=TODAY)

        warnings = result.metadata.assessment_details["sanitization_warnings"]
        assert any("Jan 0" in w for w in warnings)
        assert result.status == "complete"

    @pytest.mark.asyncio
    async def test_missing_resume_name(self, junior_resume, senior_job):
        junior_resume["personal_details"] = {"email": "x@example.com"}
        with pytest.raises(AssessmentValidationError) as exc:
            await make_assessor(OrthogonalProvider()).assess(junior_resume, senior_job, today=TODAY)
        assert exc.value.result.status == "validation_error"
        assert "Missing first name" in exc.value.errors

    @pytest.mark.asyncio
    async def test_missing_company(self, junior_resume, senior_job):
        senior_job["company"] = "   "
        with pytest.raises(AssessmentValidationError) as exc:
            await make_assessor(OrthogonalProvider()).assess(junior_resume, senior_job, today=TODAY)
        assert exc.value.errors == ["Missing company"]

    @pytest.mark.asyncio
    async def test_provider_not_called_on_invalid_input(self, junior_resume, senior_job):
        provider = OrthogonalProvider()
        junior_resume["personal_details"] = {}
        with pytest.raises(AssessmentValidationError):
            await make_assessor(provider).assess(junior_resume, senior_job, today=TODAY)
        assert provider.calls == 0


class TestInvariants:
    @pytest.mark.asyncio
    async def test_score_bounds_and_immutability(self, junior_resume, strong_resume, senior_job):
        assessor = make_assessor(ConstantProvider())
        for resume in (junior_resume, strong_resume):
            result = await assessor.assess(resume, senior_job, today=TODAY)
            assert 0.0 <= result.compatibility_score <= 100.0
            assert result.metadata.assessment_timestamp.tzinfo is not None
            assert result.metadata.assessment_version == "2.0"
            with pytest.raises(Exception):
                result.compatibility_score = 0.0

    @pytest.mark.asyncio
    async def test_deterministic(self, junior_resume, senior_job):
        assessor = make_assessor(OrthogonalProvider())
        a = await assessor.assess(copy.deepcopy(junior_resume), senior_job, today=TODAY)
        b = await assessor.assess(copy.deepcopy(junior_resume), senior_job, today=TODAY)
        assert a.compatibility_score == b.compatibility_score
        assert a.suggestions == b.suggestions
