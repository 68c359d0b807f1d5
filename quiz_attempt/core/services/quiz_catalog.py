"""Quiz browsing helpers: title search and completed-attempt lookup."""

from __future__ import annotations

from collections.abc import Iterable

from quiz_attempt.core.models import AttemptResult
from quiz_attempt.core.schemas import QuizSummaryPayload


class QuizCatalog:
    """Holds the quizzes offered to a user together with the user's past attempts."""

    def __init__(
        self,
        quizzes: Iterable[QuizSummaryPayload],
        attempts: Iterable[AttemptResult] = (),
    ) -> None:
        self._quizzes = list(quizzes)
        self._attempts = list(attempts)

    def get_quizzes(self) -> list[QuizSummaryPayload]:
        return list(self._quizzes)

    def search(self, term: str) -> list[QuizSummaryPayload]:
        """Case-insensitive title search. A blank term returns every quiz."""
        needle = term.strip().lower()
        if not needle:
            return self.get_quizzes()
        return [quiz for quiz in self._quizzes if needle in quiz.title.lower()]

    def completed_attempt(self, quiz: QuizSummaryPayload) -> AttemptResult | None:
        """Return the user's finished attempt for a quiz, if any."""
        for attempt in self._attempts:
            if attempt.quiz_id is not None:
                if attempt.quiz_id == quiz.id:
                    return attempt
            elif attempt.quiz_title == quiz.title:
                return attempt
        return None

    def is_completed(self, quiz: QuizSummaryPayload) -> bool:
        return self.completed_attempt(quiz) is not None
