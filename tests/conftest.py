"""Shared fixtures for the quiz attempt tests."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QCoreApplication
import pytest

from quiz_attempt.core.models import (
    AttemptContext,
    AttemptResult,
    Question,
    QuestionOption,
    QuestionType,
    Quiz,
)
from quiz_attempt.core.quiz_importer import parse_quiz_text

SAMPLE_QUIZ_TEXT = """\
TITLE: Sample Quiz
DESCRIPTION: Three question shapes.
TIMELIMIT: 2

Q: Pick the even number.
A: 3
B: 4
C: 7
CORRECT: B

Q: The sky is blue.
TYPE: TRUE_FALSE
CORRECT: True

Q: Capital of France?
TYPE: TEXT
POINTS: 3
CORRECT: Paris
"""


@pytest.fixture(scope="session")
def qapp() -> QCoreApplication:
    """Event loop instance required by QTimer and queued signals."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def sample_quiz() -> Quiz:
    return Quiz(
        id=7,
        title="Sample Quiz",
        description="Three question shapes.",
        time_limit_minutes=2,
        questions=(
            Question(
                id=1,
                text="Pick the even number.",
                type=QuestionType.MULTIPLE_CHOICE,
                options=(
                    QuestionOption(id=10, text="3"),
                    QuestionOption(id=11, text="4"),
                    QuestionOption(id=12, text="7"),
                ),
            ),
            Question(id=2, text="The sky is blue.", type=QuestionType.TRUE_FALSE),
            Question(id=3, text="Capital of France?", type=QuestionType.TEXT, points=3),
        ),
    )


@pytest.fixture
def attempt_context() -> AttemptContext:
    return AttemptContext(attempt_id=41, quiz_id=7, user_name="alice")


@pytest.fixture
def sample_definition():
    return parse_quiz_text(SAMPLE_QUIZ_TEXT)


@pytest.fixture
def sample_quiz_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.txt"
    path.write_text(SAMPLE_QUIZ_TEXT, encoding="utf-8")
    return path


class FakeServiceClient:
    """In-memory stand-in for QuizServiceClient that records submissions."""

    def __init__(self, quiz: Quiz | None = None, load_error: Exception | None = None) -> None:
        self.quiz = quiz
        self.load_error = load_error
        self.submissions: list[tuple[int, list, int]] = []
        self.submit_errors: list[Exception] = []
        self.on_submit = None
        self.correct_answers = 0

    def load_quiz(self, quiz_id: int) -> Quiz:
        if self.load_error is not None:
            raise self.load_error
        return self.quiz

    def submit_attempt(self, attempt_id, answers, elapsed_seconds) -> AttemptResult:
        self.submissions.append((attempt_id, list(answers), elapsed_seconds))
        if self.on_submit is not None:
            self.on_submit()
        if self.submit_errors:
            raise self.submit_errors.pop(0)
        total = len(self.quiz.questions)
        return AttemptResult(
            attempt_id=attempt_id,
            quiz_title=self.quiz.title,
            correct_answers=self.correct_answers,
            total_questions=total,
            score=round(self.correct_answers / total * 100),
            time_taken_seconds=elapsed_seconds,
        )


@pytest.fixture
def fake_client(sample_quiz: Quiz) -> FakeServiceClient:
    return FakeServiceClient(quiz=sample_quiz)
