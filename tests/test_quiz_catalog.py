from quiz_attempt.core.models import AttemptResult
from quiz_attempt.core.schemas import QuizSummaryPayload
from quiz_attempt.core.services.quiz_catalog import QuizCatalog


def _quiz(quiz_id: int, title: str) -> QuizSummaryPayload:
    return QuizSummaryPayload(id=quiz_id, title=title, time_limit_minutes=5, total_questions=3)


def _attempt(quiz_id: int | None, title: str) -> AttemptResult:
    return AttemptResult(
        attempt_id=1,
        quiz_id=quiz_id,
        quiz_title=title,
        correct_answers=1,
        total_questions=3,
        score=33,
        time_taken_seconds=20,
    )


def test_search_is_case_insensitive_on_title():
    catalog = QuizCatalog([_quiz(1, "Python Basics"), _quiz(2, "Math Warm-up")])

    assert [q.id for q in catalog.search("PYTHON")] == [1]
    assert [q.id for q in catalog.search("  ")] == [1, 2]
    assert catalog.search("history") == []


def test_completed_attempt_matches_by_quiz_id_then_title():
    python, math = _quiz(1, "Python Basics"), _quiz(2, "Math Warm-up")
    catalog = QuizCatalog([python, math], [_attempt(None, "Math Warm-up")])
    assert catalog.is_completed(math)
    assert not catalog.is_completed(python)

    catalog = QuizCatalog([python, math], [_attempt(1, "Renamed")])
    assert catalog.completed_attempt(python).score == 33
    assert not catalog.is_completed(math)
