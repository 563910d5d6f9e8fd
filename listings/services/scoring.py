"""
Optimization score.

Additive, capped at 100, no negative contributions. Factors are evaluated in
a fixed order and every triggered label is reported in that order:

- +20 "Enhanced title length": generated title longer than the original
  and at most 200 characters
- +25 "Improved bullet points": generated bullets longer than the original
- +25 "Enhanced description": generated description longer than the original
- +30 "Added keyword strategy": at least 3 suggested keywords

Points are awarded regardless of how large the improvement is.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

MAX_SCORE = 100
MAX_TITLE_LENGTH = 200
MIN_KEYWORDS = 3

TITLE_POINTS = 20
BULLET_POINTS = 25
DESCRIPTION_POINTS = 25
KEYWORD_POINTS = 30

TITLE_FACTOR = "Enhanced title length"
BULLETS_FACTOR = "Improved bullet points"
DESCRIPTION_FACTOR = "Enhanced description"
KEYWORDS_FACTOR = "Added keyword strategy"


@dataclass(frozen=True)
class ScoreResult:
    score: int
    factors: List[str] = field(default_factory=list)
    max_score: int = MAX_SCORE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "factors": list(self.factors),
            "maxScore": self.max_score,
        }


def _length(value: Optional[str]) -> int:
    return len(value) if value else 0


def calculate_score(
    original_title: Optional[str],
    original_bullets: Optional[str],
    original_description: Optional[str],
    generated_title: Optional[str],
    generated_bullets: Optional[str],
    generated_description: Optional[str],
    generated_keywords: Optional[Sequence[str]],
) -> ScoreResult:
    """Score one generation event. Pure and deterministic."""
    score = 0
    factors = []

    title_length = _length(generated_title)
    if title_length > _length(original_title) and title_length <= MAX_TITLE_LENGTH:
        score += TITLE_POINTS
        factors.append(TITLE_FACTOR)

    if _length(generated_bullets) > _length(original_bullets):
        score += BULLET_POINTS
        factors.append(BULLETS_FACTOR)

    if _length(generated_description) > _length(original_description):
        score += DESCRIPTION_POINTS
        factors.append(DESCRIPTION_FACTOR)

    if generated_keywords and len(generated_keywords) >= MIN_KEYWORDS:
        score += KEYWORD_POINTS
        factors.append(KEYWORDS_FACTOR)

    return ScoreResult(score=min(score, MAX_SCORE), factors=factors)


def score_result(result) -> ScoreResult:
    """Score an OptimizationResult."""
    return calculate_score(
        original_title=result.original.title,
        original_bullets=result.original.bullet_points,
        original_description=result.original.description,
        generated_title=result.optimized.title,
        generated_bullets=result.optimized.bullet_points,
        generated_description=result.optimized.description,
        generated_keywords=result.optimized.keywords,
    )
