"""Business logic of the reference scoring service shared by all API requests."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from threading import Lock

from quiz_attempt.core.models import (
    AttemptResult,
    Quiz,
    QuizDefinition,
    ScoreboardEntry,
    SubmittedAnswer,
)
from quiz_attempt.core.services.score_engine import round_half_up_percentage
from quiz_attempt.server.grading import count_correct
from quiz_attempt.server.quiz_repository import QuizRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AttemptRecord:
    """Server-side state of one started attempt."""

    attempt_id: int
    quiz_id: int
    user_name: str
    started_at: datetime
    result: AttemptResult | None = None


class ScoringService:
    """Facade over the quiz repository and the attempt ledger.

    Every public method takes the service lock, so the FastAPI worker threads
    see a consistent view of attempts.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._repository = QuizRepository()
        self._attempts: dict[int, AttemptRecord] = {}
        self._attempt_counter: int = 0

    # --- Quiz Repository Delegation ---

    def add_quiz(self, definition: QuizDefinition) -> Quiz:
        with self._lock:
            stored = self._repository.add_quiz(definition)
            logger.info("Registered quiz %d '%s'", stored.quiz.id, stored.quiz.title)
            return stored.quiz

    def add_quizzes(self, definitions: Iterable[QuizDefinition]) -> list[Quiz]:
        return [self.add_quiz(definition) for definition in definitions]

    def get_quizzes(self) -> list[Quiz]:
        with self._lock:
            return self._repository.get_quizzes()

    def get_quiz(self, quiz_id: int) -> Quiz:
        with self._lock:
            return self._repository.get_quiz(quiz_id)

    # --- Attempts ---

    def start_attempt(self, quiz_id: int, user_name: str) -> AttemptRecord:
        with self._lock:
            self._repository.get_quiz(quiz_id)
            self._attempt_counter += 1
            record = AttemptRecord(
                attempt_id=self._attempt_counter,
                quiz_id=quiz_id,
                user_name=user_name,
                started_at=datetime.now(timezone.utc),
            )
            self._attempts[record.attempt_id] = record
            logger.info("User %s started attempt %d on quiz %d", user_name, record.attempt_id, quiz_id)
            return record

    def submit_attempt(
        self,
        attempt_id: int,
        user_name: str,
        answers: Iterable[SubmittedAnswer],
        time_taken_seconds: int,
    ) -> AttemptResult:
        """Grade an attempt once. A second submission raises ``RuntimeError``."""
        with self._lock:
            record = self._attempts.get(attempt_id)
            if record is None or record.user_name != user_name:
                raise LookupError(f"Attempt {attempt_id} does not exist.")
            if record.result is not None:
                raise RuntimeError(f"Attempt {attempt_id} has already been submitted.")

            definition = self._repository.get_definition(record.quiz_id)
            quiz = definition.quiz
            correct = count_correct(definition, answers)
            total = len(quiz.questions)
            record.result = AttemptResult(
                attempt_id=attempt_id,
                quiz_title=quiz.title,
                correct_answers=correct,
                total_questions=total,
                score=round_half_up_percentage(correct, total),
                time_taken_seconds=min(max(0, time_taken_seconds), quiz.time_limit_seconds),
                completed_at=datetime.now(timezone.utc),
                quiz_id=record.quiz_id,
            )
            logger.info(
                "Attempt %d graded: %d/%d correct (%d%%)",
                attempt_id,
                correct,
                total,
                record.result.score,
            )
            return record.result

    # --- Results ---

    def get_scoreboard(self, quiz_id: int) -> list[ScoreboardEntry]:
        """Completed attempts for a quiz in completion order; ranking is left to clients."""
        with self._lock:
            self._repository.get_quiz(quiz_id)
            completed = [
                record
                for record in self._attempts.values()
                if record.quiz_id == quiz_id and record.result is not None
            ]
            completed.sort(key=lambda record: record.result.completed_at)
            return [
                ScoreboardEntry(
                    user_name=record.user_name,
                    correct_answers=record.result.correct_answers,
                    total_questions=record.result.total_questions,
                    score=record.result.score,
                    time_taken_seconds=record.result.time_taken_seconds,
                )
                for record in completed
            ]

    def get_attempt_history(self, user_name: str) -> list[AttemptRecord]:
        """Completed attempts of a user, oldest first."""
        with self._lock:
            return [
                record
                for record in self._attempts.values()
                if record.user_name == user_name and record.result is not None
            ]
