import pytest

from quiz_attempt.core.models import AttemptResult
from quiz_attempt.core.services.score_engine import (
    ScoreEngine,
    format_duration,
    round_half_up_percentage,
    score_band,
)


def _result(correct: int, total: int) -> AttemptResult:
    return AttemptResult(
        attempt_id=1,
        quiz_title="Quiz",
        correct_answers=correct,
        total_questions=total,
        score=0,
        time_taken_seconds=30,
    )


def test_compute_display_counts_correct_and_incorrect():
    display = ScoreEngine().compute_display(_result(7, 10))

    assert display.percentage == 70
    assert display.correct_count == 7
    assert display.incorrect_count == 3
    assert display.band == "fair"


def test_percentage_rounds_half_up():
    assert ScoreEngine().compute_display(_result(1, 3)).percentage == 33
    assert round_half_up_percentage(2, 3) == 67
    assert round_half_up_percentage(1, 8) == 13
    assert round_half_up_percentage(1, 200) == 1
    assert round_half_up_percentage(0, 5) == 0
    assert round_half_up_percentage(5, 5) == 100


def test_zero_questions_fails_fast():
    with pytest.raises(ValueError):
        ScoreEngine().compute_display(_result(0, 0))


def test_more_correct_than_total_is_rejected():
    with pytest.raises(ValueError):
        round_half_up_percentage(4, 3)


@pytest.mark.parametrize(
    ("percentage", "band"),
    [(100, "good"), (80, "good"), (79, "fair"), (60, "fair"), (59, "poor"), (0, "poor")],
)
def test_score_band_thresholds(percentage, band):
    assert score_band(percentage) == band


def test_format_duration_uses_minutes_and_seconds():
    assert format_duration(0) == "00:00"
    assert format_duration(75) == "01:15"
    assert format_duration(600) == "10:00"
    assert format_duration(-5) == "00:00"
