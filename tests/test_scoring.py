"""
Tests for the optimization score.
"""

from listings.services.scoring import (
    BULLETS_FACTOR,
    DESCRIPTION_FACTOR,
    KEYWORDS_FACTOR,
    TITLE_FACTOR,
    calculate_score,
)


def _score(**overrides):
    values = {
        "original_title": "Short title",
        "original_bullets": "• one",
        "original_description": "Desc",
        "generated_title": "Short title",
        "generated_bullets": "• one",
        "generated_description": "Desc",
        "generated_keywords": [],
    }
    values.update(overrides)
    return calculate_score(**values)


class TestCalculateScore:

    def test_all_factors_score_100(self):
        result = _score(
            generated_title="A longer, clearer title",
            generated_bullets="• one\n• two",
            generated_description="A longer description",
            generated_keywords=["a", "b", "c"],
        )

        assert result.score == 100
        assert result.factors == [
            TITLE_FACTOR,
            BULLETS_FACTOR,
            DESCRIPTION_FACTOR,
            KEYWORDS_FACTOR,
        ]

    def test_no_improvement_scores_zero(self):
        result = _score()
        assert result.score == 0
        assert result.factors == []

    def test_title_over_200_chars_gets_no_title_points(self):
        result = _score(generated_title="x" * 201)
        assert TITLE_FACTOR not in result.factors
        assert result.score == 0

    def test_title_of_exactly_200_chars_counts(self):
        result = _score(generated_title="x" * 200)
        assert result.factors == [TITLE_FACTOR]
        assert result.score == 20

    def test_two_keywords_are_not_a_strategy(self):
        assert _score(generated_keywords=["a", "b"]).score == 0
        assert _score(generated_keywords=["a", "b", "c"]).score == 30

    def test_missing_originals_count_as_empty(self):
        result = _score(
            original_bullets=None,
            original_description=None,
            generated_bullets="• new",
            generated_description="new",
        )
        assert result.factors == [BULLETS_FACTOR, DESCRIPTION_FACTOR]
        assert result.score == 50

    def test_shorter_generated_content_never_subtracts(self):
        result = _score(generated_description="", generated_keywords=["a", "b", "c"])
        assert result.score == 30

    def test_to_dict(self):
        assert _score().to_dict() == {"score": 0, "factors": [], "maxScore": 100}


def test_single_character_originals():
    result = calculate_score(
        original_title="X",
        original_bullets="",
        original_description="",
        generated_title="X enhanced",
        generated_bullets="new bullet",
        generated_description="new description",
        generated_keywords=["a", "b", "c"],
    )

    assert result.score == 100
    assert len(result.factors) == 4
