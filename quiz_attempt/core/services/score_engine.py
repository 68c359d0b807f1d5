"""Derives display values from scored attempt results."""

from __future__ import annotations

from quiz_attempt.constants.quiz_constants import SCORE_BAND_FAIR, SCORE_BAND_GOOD
from quiz_attempt.core.models import AttemptResult, ScoreDisplay


def round_half_up_percentage(correct: int, total: int) -> int:
    """Integer percentage of ``correct / total`` rounded half up."""
    if total <= 0:
        raise ValueError("A quiz must contain at least one question.")
    if not 0 <= correct <= total:
        raise ValueError(f"Correct answers ({correct}) must be between 0 and {total}.")
    return (correct * 200 + total) // (total * 2)


def score_band(percentage: int) -> str:
    if percentage >= SCORE_BAND_GOOD:
        return "good"
    if percentage >= SCORE_BAND_FAIR:
        return "fair"
    return "poor"


def format_duration(total_seconds: int) -> str:
    """Format seconds as ``MM:SS``."""
    minutes, seconds = divmod(max(0, int(total_seconds)), 60)
    return f"{minutes:02d}:{seconds:02d}"


class ScoreEngine:
    """Computes percentage and correctness counts for a finished attempt."""

    def compute_display(self, result: AttemptResult) -> ScoreDisplay:
        percentage = round_half_up_percentage(result.correct_answers, result.total_questions)
        return ScoreDisplay(
            percentage=percentage,
            correct_count=result.correct_answers,
            incorrect_count=result.total_questions - result.correct_answers,
            band=score_band(percentage),
        )
