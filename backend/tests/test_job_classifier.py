import pytest

from models.schemas.job import JobCategory
from services.job_classifier import (
    CATEGORY_KEYWORDS,
    classify_job,
    normalize_text,
    phrase_matches,
    tokenize,
)


class TestNormalization:
    def test_normalize_strips_punctuation(self):
        assert normalize_text("Node.js / React!") == "node js react"

    def test_tokenize_empty(self):
        assert tokenize("") == set()
        assert tokenize(None) == set()

    def test_phrase_requires_every_word(self):
        tokens = tokenize("Head of Platform")
        assert phrase_matches("head of", tokens)
        assert not phrase_matches("data scientist", tokenize("data engineer"))


class TestClassifyJob:
    def test_senior_software_engineer_is_technical(self):
        result = classify_job("Senior Software Engineer", "We need React, Node.js, AWS, 5+ years")
        assert result.category == JobCategory.TECHNICAL
        # engineer, software, aws, react, node -> 5 matches + multi-match bonus
        assert result.confidence == pytest.approx(5 / 26 + 0.3, abs=1e-3)
        assert "react" in result.matched_keywords
        assert "programming" in result.suggested_skills

    def test_product_manager_is_management(self):
        result = classify_job("Product Manager", "")
        assert result.category == JobCategory.MANAGEMENT
        assert set(result.matched_keywords) == {"manager", "product manager"}
        assert result.confidence == pytest.approx(2 / 16)

    def test_no_bonus_for_two_matches(self):
        result = classify_job("Graphic Designer")
        assert result.category == JobCategory.CREATIVE
        assert result.confidence == pytest.approx(2 / len(CATEGORY_KEYWORDS[JobCategory.CREATIVE]))

    def test_unknown_title_is_general(self):
        result = classify_job("Barista", "Make coffee for customers")
        assert result.category == JobCategory.GENERAL
        assert result.confidence == 0.0
        assert result.matched_keywords == []

    def test_empty_input_is_general(self):
        assert classify_job("", "").category == JobCategory.GENERAL

    def test_tie_goes_to_declaration_order(self):
        # one technical keyword, one management keyword
        result = classify_job("Database Director")
        assert result.category == JobCategory.TECHNICAL

    def test_confidence_never_exceeds_one(self):
        everything = " ".join(CATEGORY_KEYWORDS[JobCategory.TECHNICAL])
        assert classify_job(everything).confidence == 1.0

    def test_is_deterministic(self):
        a = classify_job("UX Designer", "Visual brand content")
        b = classify_job("UX Designer", "Visual brand content")
        assert a == b
