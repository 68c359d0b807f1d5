"""Per-attempt storage of captured answers."""

from __future__ import annotations

from quiz_attempt.core.models import AnswerValue, SubmittedAnswer


class AnswerStore:
    """Maps question ids to the latest captured answer of one attempt."""

    def __init__(self) -> None:
        self._answers: dict[int, AnswerValue] = {}
        self._frozen: bool = False

    def set(self, question_id: int, value: AnswerValue) -> bool:
        """Insert or overwrite the answer for a question. Returns False once frozen."""
        if self._frozen:
            return False
        self._answers[question_id] = value
        return True

    def get(self, question_id: int) -> AnswerValue | None:
        return self._answers.get(question_id)

    def freeze(self) -> None:
        """Make the captured answers read-only."""
        self._frozen = True

    def is_frozen(self) -> bool:
        return self._frozen

    def answered_count(self) -> int:
        return len(self._answers)

    def to_submission(self) -> list[SubmittedAnswer]:
        """Flatten the captured answers for transmission. Unanswered questions are absent."""
        return [
            SubmittedAnswer.from_value(question_id, value)
            for question_id, value in self._answers.items()
        ]

    def __len__(self) -> int:
        return len(self._answers)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._answers
