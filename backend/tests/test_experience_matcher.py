import pytest

from config import ExperienceMatchConfig
from services.experience_matcher import (
    GENERAL_AREA,
    area_relevance,
    match_experience,
    score_area,
)

CONFIG = ExperienceMatchConfig()


class TestScoreArea:
    def test_meets_requirement(self):
        assert score_area(5, 5, CONFIG) == (1.0, 0.0)

    def test_surplus_earns_capped_bonus(self):
        score, bonus = score_area(4, 8, CONFIG)
        assert score == 1.0
        assert bonus == pytest.approx(0.1)
        assert score_area(1, 20, CONFIG)[1] == CONFIG.max_experience_bonus

    def test_shortfall(self):
        score, bonus = score_area(5, 2, CONFIG)
        assert score == pytest.approx(0.4 ** 0.75 * (1 - 0.4 * 0.6), abs=1e-6)
        assert bonus == 0.0

    def test_zero_years(self):
        assert score_area(4, 0, CONFIG) == (0.0, 0.0)

    def test_nothing_required(self):
        assert score_area(0, 0, CONFIG) == (1.0, 0.0)

    def test_monotone_in_actual_years(self):
        scores = [score_area(6, y / 2, CONFIG)[0] for y in range(0, 13)]
        assert scores == sorted(scores)


class TestAreaRelevance:
    def test_general_is_fully_relevant(self):
        assert area_relevance(GENERAL_AREA, "") == 1.0

    def test_unknown_area(self):
        assert area_relevance("cobol", "cobol everywhere") == 0.5

    def test_group_coverage(self):
        # 2 of 5 group members mentioned
        assert area_relevance("react", "react and redux") == pytest.approx(0.7)


class TestMatchExperience:
    def test_shortfall_reports_gap(self):
        result = match_experience({GENERAL_AREA: 5}, {GENERAL_AREA: 2})
        assert result.score == pytest.approx(0.3823, abs=1e-4)
        assert result.gaps == [GENERAL_AREA]
        assert result.recommendations == ["Gain 3 more years of professional experience"]

    def test_skill_area_recommendation_names_related(self):
        result = match_experience({"python": 3}, {"python": 1})
        assert result.gaps == ["python"]
        assert result.recommendations[0].startswith("Gain 2 more years of experience in python")
        assert "django" in result.recommendations[0]

    def test_sufficient_experience(self):
        result = match_experience({GENERAL_AREA: 3, "react": 2}, {GENERAL_AREA: 6, "react": 3})
        assert result.score == 1.0
        assert result.gaps == []

    def test_missing_area_counts_as_zero(self):
        result = match_experience({"aws": 2}, {})
        assert result.matches[0].actual == 0.0
        assert result.score == 0.0

    def test_nothing_required(self):
        assert match_experience({}, {GENERAL_AREA: 4}).score == 1.0

    def test_relevance_weights_areas(self):
        required = {GENERAL_AREA: 4, "aws": 4}
        actual = {GENERAL_AREA: 4, "aws": 0}
        low = match_experience(required, actual, relevance={GENERAL_AREA: 1.0, "aws": 0.0})
        high = match_experience(required, actual, relevance={GENERAL_AREA: 1.0, "aws": 1.0})
        assert low.score > high.score

    @pytest.mark.parametrize("aws_relevance,expected", [
        # weights: general 1.0, aws 0.6 + 0.4 * relevance
        (0.0, 1.0 / 1.6),
        (0.5, 1.0 / 1.8),
        (1.0, 0.5),
    ])
    def test_irrelevant_area_keeps_a_floor_weight(self, aws_relevance, expected):
        result = match_experience(
            {GENERAL_AREA: 4, "aws": 4},
            {GENERAL_AREA: 4, "aws": 0},
            relevance={GENERAL_AREA: 1.0, "aws": aws_relevance},
        )
        assert result.score == pytest.approx(expected, abs=1e-4)

    def test_score_stays_in_unit_range(self):
        result = match_experience({GENERAL_AREA: 1}, {GENERAL_AREA: 30})
        assert 0.0 <= result.score <= 1.0
