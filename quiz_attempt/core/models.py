"""Domain models for the quiz attempt engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from quiz_attempt.constants.quiz_constants import TRUE_FALSE_OPTIONS


class QuestionType(str, Enum):
    """The three answer shapes a question can take."""

    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"
    TEXT = "TEXT"


@dataclass(frozen=True, slots=True)
class QuestionOption:
    """A selectable option of a multiple-choice question."""

    id: int
    text: str


@dataclass(frozen=True, slots=True)
class SelectedOption:
    """Answer variant for multiple-choice questions."""

    option_id: int


@dataclass(frozen=True, slots=True)
class TextAnswer:
    """Answer variant for true/false ("True"/"False") and free-text questions."""

    text: str


AnswerValue = SelectedOption | TextAnswer


@dataclass(frozen=True, slots=True)
class Question:
    """A single question as presented to the attempt. Reference answers never reach this model."""

    id: int
    text: str
    type: QuestionType
    points: int = 1
    options: tuple[QuestionOption, ...] = ()

    def make_answer(self, value: int | str) -> AnswerValue:
        """Build the answer variant matching this question's declared type."""
        if self.type is QuestionType.MULTIPLE_CHOICE:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Question {self.id} expects an option id.")
            if all(option.id != value for option in self.options):
                raise ValueError(f"Option {value} does not belong to question {self.id}.")
            return SelectedOption(option_id=value)
        if self.type is QuestionType.TRUE_FALSE:
            if value not in TRUE_FALSE_OPTIONS:
                raise ValueError(f"Question {self.id} expects 'True' or 'False'.")
            return TextAnswer(text=str(value))
        if self.type is QuestionType.TEXT:
            if not isinstance(value, str):
                raise ValueError(f"Question {self.id} expects a text answer.")
            return TextAnswer(text=value)
        raise TypeError(f"Unsupported question type: {self.type!r}")


@dataclass(frozen=True, slots=True)
class Quiz:
    """A quiz with its questions in fixed display order. Read-only for the attempt."""

    id: int
    title: str
    description: str
    time_limit_minutes: int
    questions: tuple[Question, ...] = ()
    question_html: dict[int, str] = field(default_factory=dict, compare=False, repr=False)

    @property
    def time_limit_seconds(self) -> int:
        return self.time_limit_minutes * 60

    def find_question(self, question_id: int) -> Question | None:
        return next((q for q in self.questions if q.id == question_id), None)


@dataclass(frozen=True, slots=True)
class SubmittedAnswer:
    """Flat transmission shape of one captured answer."""

    question_id: int
    selected_option_id: int | None = None
    text_answer: str | None = None

    @classmethod
    def from_value(cls, question_id: int, value: AnswerValue) -> "SubmittedAnswer":
        if isinstance(value, SelectedOption):
            return cls(question_id=question_id, selected_option_id=value.option_id)
        if isinstance(value, TextAnswer):
            return cls(question_id=question_id, text_answer=value.text)
        raise TypeError(f"Unsupported answer value: {value!r}")


@dataclass(frozen=True, slots=True)
class AttemptContext:
    """Explicit handoff identifying one started attempt."""

    attempt_id: int
    quiz_id: int
    user_name: str | None = None


@dataclass(frozen=True, slots=True)
class AttemptResult:
    """Scored outcome of a completed attempt."""

    attempt_id: int
    quiz_title: str
    correct_answers: int
    total_questions: int
    score: int
    time_taken_seconds: int
    completed_at: datetime | None = None
    quiz_id: int | None = None


@dataclass(frozen=True, slots=True)
class ScoreboardEntry:
    """One completed attempt as listed on a quiz's scoreboard."""

    user_name: str
    correct_answers: int
    total_questions: int
    score: int
    time_taken_seconds: int


@dataclass(frozen=True, slots=True)
class RankedEntry:
    """Scoreboard entry with its 1-based leaderboard position."""

    position: int
    entry: ScoreboardEntry


@dataclass(frozen=True, slots=True)
class ScoreDisplay:
    """Values shown to the user for a finished attempt."""

    percentage: int
    correct_count: int
    incorrect_count: int
    band: str


@dataclass(frozen=True, slots=True)
class AnswerKey:
    """Service-side reference for grading one question."""

    correct_option_id: int | None = None
    reference_answer: str | None = None


@dataclass(frozen=True, slots=True)
class QuizDefinition:
    """A quiz together with the answer key the scoring service grades against."""

    quiz: Quiz
    answer_key: dict[int, AnswerKey]
