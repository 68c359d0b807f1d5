"""Storage of quiz definitions served by the scoring service."""

from __future__ import annotations

from dataclasses import replace

from quiz_attempt.constants.quiz_constants import TRUE_FALSE_OPTIONS
from quiz_attempt.core.models import Question, QuestionType, Quiz, QuizDefinition


class QuizRepository:
    """Validates quiz definitions and hands out quiz ids."""

    def __init__(self) -> None:
        self._definitions: dict[int, QuizDefinition] = {}
        self._quiz_counter: int = 0

    def add_quiz(self, definition: QuizDefinition) -> QuizDefinition:
        """Validate a definition and register it under a fresh quiz id."""
        self._validate(definition)
        quiz_id = self._next_quiz_id()
        stored = QuizDefinition(
            quiz=replace(definition.quiz, id=quiz_id, title=definition.quiz.title.strip()),
            answer_key=dict(definition.answer_key),
        )
        self._definitions[quiz_id] = stored
        return stored

    def get_definition(self, quiz_id: int) -> QuizDefinition:
        try:
            return self._definitions[quiz_id]
        except KeyError:
            raise LookupError(f"Quiz {quiz_id} does not exist.") from None

    def get_quiz(self, quiz_id: int) -> Quiz:
        return self.get_definition(quiz_id).quiz

    def get_quizzes(self) -> list[Quiz]:
        """Return all quizzes in registration order."""
        return [definition.quiz for definition in self._definitions.values()]

    def _next_quiz_id(self) -> int:
        self._quiz_counter += 1
        return self._quiz_counter

    @classmethod
    def _validate(cls, definition: QuizDefinition) -> None:
        quiz = definition.quiz
        if not quiz.title.strip():
            raise ValueError("Quiz title must not be empty.")
        if quiz.time_limit_minutes <= 0:
            raise ValueError("Time limit must be a positive number of minutes.")
        if not quiz.questions:
            raise ValueError("Quiz must contain at least one question.")

        question_ids = [question.id for question in quiz.questions]
        if len(set(question_ids)) != len(question_ids):
            raise ValueError("Question ids must be unique within a quiz.")
        option_ids = [option.id for question in quiz.questions for option in question.options]
        if len(set(option_ids)) != len(option_ids):
            raise ValueError("Option ids must be unique within a quiz.")

        for question in quiz.questions:
            cls._validate_question(question, definition)

    @staticmethod
    def _validate_question(question: Question, definition: QuizDefinition) -> None:
        if not question.text.strip():
            raise ValueError("Question text must not be empty.")
        if question.points <= 0:
            raise ValueError("Question points must be a positive integer.")
        key = definition.answer_key.get(question.id)
        if key is None:
            raise ValueError(f"Question {question.id} has no answer key.")

        if question.type is QuestionType.MULTIPLE_CHOICE:
            if len(question.options) < 2:
                raise ValueError("Multiple-choice questions need at least two options.")
            if all(option.id != key.correct_option_id for option in question.options):
                raise ValueError(f"Answer key of question {question.id} names an unknown option.")
        elif question.type is QuestionType.TRUE_FALSE:
            if question.options:
                raise ValueError("True/false questions cannot define options.")
            if key.reference_answer not in TRUE_FALSE_OPTIONS:
                raise ValueError("True/false answer key must be 'True' or 'False'.")
        elif question.type is QuestionType.TEXT:
            if question.options:
                raise ValueError("Text questions cannot define options.")
            if not (key.reference_answer or "").strip():
                raise ValueError("Text questions need a reference answer.")
        else:
            raise TypeError(f"Unsupported question type: {question.type!r}")
