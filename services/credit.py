"""
Credit score helpers. Scores come from an external scoring collaborator; the engine
only classifies them. No lifecycle transition depends on the band.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

from services.errors import ValidationError

MIN_SCORE = 300
MAX_SCORE = 850

# (lower bound inclusive, band), highest first
_BANDS = (
    (750, "excellent"),
    (650, "good"),
    (550, "fair"),
    (MIN_SCORE, "poor"),
)

CreditScorer = Callable[[Decimal, int, str], Optional[int]]


def credit_band(score: Optional[int]) -> Optional[str]:
    if score is None:
        return None
    for floor, band in _BANDS:
        if score >= floor:
            return band
    return "poor"


def validate_score(score) -> int:
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValidationError("Credit score must be an integer")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationError(f"Credit score must be between {MIN_SCORE} and {MAX_SCORE}")
    return score


def heuristic_score(amount: Decimal, term_months: int, purpose: str) -> int:
    """Placeholder scorer used when no bureau integration is configured."""
    score = 500
    if amount > 10_000:
        score -= 50
    elif amount > 5_000:
        score -= 25

    if term_months > 24:
        score += 20
    elif term_months > 12:
        score += 10

    if purpose == "business":
        score -= 30
    elif purpose == "personal":
        score += 10

    return max(MIN_SCORE, min(MAX_SCORE, score))
