"""Wire schemas shared by the HTTP client and the scoring service.

The service speaks camelCase JSON; the schemas accept both the camelCase
aliases and the Python field names so the server can build them directly.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from quiz_attempt.core.models import (
    AttemptResult,
    Question,
    QuestionOption,
    QuestionType,
    Quiz,
    ScoreboardEntry,
    SubmittedAnswer,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OptionPayload(_WireModel):
    id: int
    option_text: str


class QuestionPayload(_WireModel):
    id: int
    question_text: str
    type: QuestionType
    points: int = Field(default=1, gt=0)
    options: list[OptionPayload] = Field(default_factory=list)
    question_html: str | None = None

    def to_domain(self) -> Question:
        return Question(
            id=self.id,
            text=self.question_text,
            type=self.type,
            points=self.points,
            options=tuple(QuestionOption(id=o.id, text=o.option_text) for o in self.options),
        )


class QuizSummaryPayload(_WireModel):
    """Quiz as listed for browsing, without its questions."""

    id: int
    title: str
    description: str = ""
    time_limit_minutes: int
    total_questions: int


class QuizPayload(_WireModel):
    id: int
    title: str
    description: str = ""
    time_limit_minutes: int = Field(gt=0)
    questions: list[QuestionPayload] = Field(default_factory=list)

    def to_domain(self) -> Quiz:
        return Quiz(
            id=self.id,
            title=self.title,
            description=self.description,
            time_limit_minutes=self.time_limit_minutes,
            questions=tuple(q.to_domain() for q in self.questions),
            question_html={q.id: q.question_html for q in self.questions if q.question_html},
        )


class StartAttemptResponse(_WireModel):
    id: int
    quiz_id: int


class AnswerPayload(_WireModel):
    question_id: int
    selected_option_id: int | None = None
    text_answer: str | None = None

    @classmethod
    def from_domain(cls, answer: SubmittedAnswer) -> "AnswerPayload":
        return cls(
            question_id=answer.question_id,
            selected_option_id=answer.selected_option_id,
            text_answer=answer.text_answer,
        )


class SubmitPayload(_WireModel):
    quiz_attempt_id: int
    answers: list[AnswerPayload] = Field(default_factory=list)
    time_taken_seconds: int = Field(ge=0)


class AttemptResultPayload(_WireModel):
    attempt_id: int
    quiz_id: int | None = None
    quiz_title: str
    correct_answers: int = Field(ge=0)
    total_questions: int = Field(gt=0)
    score: int = Field(ge=0, le=100)
    time_taken_seconds: int = Field(ge=0)
    completed_at: datetime | None = None

    @classmethod
    def from_domain(cls, result: AttemptResult) -> "AttemptResultPayload":
        return cls(
            attempt_id=result.attempt_id,
            quiz_id=result.quiz_id,
            quiz_title=result.quiz_title,
            correct_answers=result.correct_answers,
            total_questions=result.total_questions,
            score=result.score,
            time_taken_seconds=result.time_taken_seconds,
            completed_at=result.completed_at,
        )

    def to_domain(self) -> AttemptResult:
        return AttemptResult(
            attempt_id=self.attempt_id,
            quiz_title=self.quiz_title,
            correct_answers=self.correct_answers,
            total_questions=self.total_questions,
            score=self.score,
            time_taken_seconds=self.time_taken_seconds,
            completed_at=self.completed_at,
            quiz_id=self.quiz_id,
        )


class ScoreboardEntryPayload(_WireModel):
    user_name: str
    correct_answers: int = Field(ge=0)
    total_questions: int = Field(gt=0)
    score: int = Field(ge=0, le=100)
    time_taken_seconds: int = Field(ge=0)

    @classmethod
    def from_domain(cls, entry: ScoreboardEntry) -> "ScoreboardEntryPayload":
        return cls(
            user_name=entry.user_name,
            correct_answers=entry.correct_answers,
            total_questions=entry.total_questions,
            score=entry.score,
            time_taken_seconds=entry.time_taken_seconds,
        )

    def to_domain(self) -> ScoreboardEntry:
        return ScoreboardEntry(
            user_name=self.user_name,
            correct_answers=self.correct_answers,
            total_questions=self.total_questions,
            score=self.score,
            time_taken_seconds=self.time_taken_seconds,
        )
