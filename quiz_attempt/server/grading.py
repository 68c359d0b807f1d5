"""Server-side grading of submitted answers."""

from __future__ import annotations

from collections.abc import Iterable

from quiz_attempt.core.models import AnswerKey, Question, QuestionType, QuizDefinition, SubmittedAnswer


def _normalize(text: str) -> str:
    return text.strip().casefold()


def is_correct(question: Question, key: AnswerKey, answer: SubmittedAnswer | None) -> bool:
    """Grade one answer. A missing answer is incorrect."""
    if answer is None:
        return False
    if question.type is QuestionType.MULTIPLE_CHOICE:
        return answer.selected_option_id is not None and answer.selected_option_id == key.correct_option_id
    if question.type in (QuestionType.TRUE_FALSE, QuestionType.TEXT):
        if answer.text_answer is None or key.reference_answer is None:
            return False
        return _normalize(answer.text_answer) == _normalize(key.reference_answer)
    raise TypeError(f"Unsupported question type: {question.type!r}")


def index_answers(definition: QuizDefinition, answers: Iterable[SubmittedAnswer]) -> dict[int, SubmittedAnswer]:
    """Check a submitted answer set against the quiz and key it by question id."""
    indexed: dict[int, SubmittedAnswer] = {}
    for answer in answers:
        question = definition.quiz.find_question(answer.question_id)
        if question is None:
            raise ValueError(f"Question {answer.question_id} is not part of this quiz.")
        if answer.question_id in indexed:
            raise ValueError(f"Question {answer.question_id} was answered more than once.")
        _check_shape(question, answer)
        indexed[answer.question_id] = answer
    return indexed


def _check_shape(question: Question, answer: SubmittedAnswer) -> None:
    if question.type is QuestionType.MULTIPLE_CHOICE:
        if answer.selected_option_id is None or answer.text_answer is not None:
            raise ValueError(f"Question {question.id} expects a selected option.")
    elif answer.text_answer is None or answer.selected_option_id is not None:
        raise ValueError(f"Question {question.id} expects a text answer.")


def count_correct(definition: QuizDefinition, answers: Iterable[SubmittedAnswer]) -> int:
    indexed = index_answers(definition, answers)
    return sum(
        1
        for question in definition.quiz.questions
        if is_correct(question, definition.answer_key[question.id], indexed.get(question.id))
    )
