"""Utilities for importing quizzes from a human-friendly text file.

File format (blocks separated by blank lines or '---'):

    TITLE: Quiz title
    DESCRIPTION: Optional description
    TIMELIMIT: minutes

    Q: Question text (supports markdown). Additional lines until the
       next marker are treated as part of the question.
    TYPE: MULTIPLE_CHOICE|TRUE_FALSE|TEXT   (optional, defaults to MULTIPLE_CHOICE)
    POINTS: positive integer                (optional, defaults to 1)
    A: First option text                    (multiple choice only, A-H)
    B: Second option text
    CORRECT: B | True | reference answer

Example:

    TITLE: Python Basics
    TIMELIMIT: 5

    Q: Which keyword defines a function?
    A: func
    B: def
    CORRECT: B

    Q: Lists are mutable.
    TYPE: TRUE_FALSE
    CORRECT: True

Question ids are numbered from 1 in file order; option ids are numbered
from 1 across the whole quiz, so both are unique within the quiz.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from quiz_attempt.constants.quiz_constants import TRUE_FALSE_OPTIONS
from quiz_attempt.core.models import (
    AnswerKey,
    Question,
    QuestionOption,
    QuestionType,
    Quiz,
    QuizDefinition,
)


class QuizImportError(Exception):
    """Raised when a quiz definition cannot be parsed."""


@dataclass(slots=True)
class ImportedQuiz:
    """Container for an imported quiz and where it came from."""

    source_path: Path
    definition: QuizDefinition


_OPTION_ORDER = ["A", "B", "C", "D", "E", "F", "G", "H"]
_HEADER_KEYS = ("TITLE:", "DESCRIPTION:", "TIMELIMIT:")


@dataclass(slots=True)
class _ParsedQuestion:
    text: str
    type: QuestionType
    points: int
    options: list[str]
    correct: str | None


def load_quiz_from_file(file_path: Path) -> ImportedQuiz:
    text = file_path.read_text(encoding="utf-8")
    definition = parse_quiz_text(text)
    return ImportedQuiz(source_path=file_path, definition=definition)


def load_quizzes_from_directory(directory: Path) -> list[ImportedQuiz]:
    """Import every ``*.txt`` quiz file in a directory, in name order."""
    return [load_quiz_from_file(path) for path in sorted(directory.glob("*.txt"))]


def parse_quiz_text(text: str, quiz_id: int = 0) -> QuizDefinition:
    blocks = _split_blocks(text)
    if not blocks or not blocks[0].upper().startswith(_HEADER_KEYS):
        raise QuizImportError("Quiz file must start with a TITLE/TIMELIMIT header.")

    title, description, time_limit = _parse_header(blocks[0])
    parsed = [_parse_block(block) for block in blocks[1:]]
    if not parsed:
        raise QuizImportError("Quiz file did not contain any questions.")

    questions: list[Question] = []
    answer_key: dict[int, AnswerKey] = {}
    next_option_id = 1
    for question_id, item in enumerate(parsed, start=1):
        options = []
        for option_text in item.options:
            options.append(QuestionOption(id=next_option_id, text=option_text))
            next_option_id += 1
        questions.append(
            Question(
                id=question_id,
                text=item.text,
                type=item.type,
                points=item.points,
                options=tuple(options),
            )
        )
        answer_key[question_id] = _build_answer_key(item, options)

    quiz = Quiz(
        id=quiz_id,  # overwritten by the repository when the quiz is registered
        title=title,
        description=description,
        time_limit_minutes=time_limit,
        questions=tuple(questions),
    )
    return QuizDefinition(quiz=quiz, answer_key=answer_key)


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            # Blank line encountered after content - finalize current block
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _parse_header(block: str) -> tuple[str, str, int]:
    title = ""
    description = ""
    time_limit: int | None = None
    for raw_line in block.splitlines():
        line = raw_line.strip()
        upper = line.upper()
        value = line.split(":", 1)[1].strip() if ":" in line else ""
        if upper.startswith("TITLE:"):
            title = value
        elif upper.startswith("DESCRIPTION:"):
            description = value
        elif upper.startswith("TIMELIMIT:"):
            time_limit = _parse_positive_int(value, "TIMELIMIT")
        else:
            raise QuizImportError(f"Unknown header line: '{line}'.")
    if not title:
        raise QuizImportError("Quiz TITLE cannot be empty.")
    if time_limit is None:
        raise QuizImportError("Quiz header must define TIMELIMIT in minutes.")
    return title, description, time_limit


def _parse_block(block: str) -> _ParsedQuestion:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct: str | None = None
    question_type: QuestionType | None = None
    points = 1
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("TYPE:"):
            raw_type = line.split(":", 1)[1].strip().upper()
            try:
                question_type = QuestionType(raw_type)
            except ValueError as exc:
                raise QuizImportError(f"Unknown question TYPE '{raw_type}'.") from exc
            current_section = None
            continue

        if upper.startswith("POINTS:"):
            points = _parse_positive_int(line.split(":", 1)[1].strip(), "POINTS")
            current_section = None
            continue

        if upper.startswith("CORRECT:"):
            correct = line.split(":", 1)[1].strip()
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in _OPTION_ORDER and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in _OPTION_ORDER:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(
                f"Encountered text outside of a known section: '{line}'."
            )

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuizImportError("Question text missing (Q: ...)")

    question_type = question_type or QuestionType.MULTIPLE_CHOICE
    option_list = _collect_options(options, question_type)
    return _ParsedQuestion(
        text=question_text,
        type=question_type,
        points=points,
        options=option_list,
        correct=correct,
    )


def _collect_options(options: dict[str, str], question_type: QuestionType) -> list[str]:
    if question_type is not QuestionType.MULTIPLE_CHOICE:
        if options:
            raise QuizImportError(f"{question_type.value} questions cannot define options.")
        return []
    letters = _OPTION_ORDER[: len(options)]
    if sorted(options) != letters:
        raise QuizImportError("Options must use consecutive letters starting at A.")
    if len(letters) < 2:
        raise QuizImportError("Multiple-choice questions need at least two options.")
    option_list = [options[letter].strip() for letter in letters]
    if any(not opt for opt in option_list):
        raise QuizImportError("Option text cannot be empty.")
    return option_list


def _build_answer_key(item: _ParsedQuestion, options: list[QuestionOption]) -> AnswerKey:
    if item.correct is None or not item.correct.strip():
        raise QuizImportError(f"Question '{item.text[:40]}' is missing CORRECT.")
    if item.type is QuestionType.MULTIPLE_CHOICE:
        letter = item.correct.upper()
        if letter not in _OPTION_ORDER[: len(options)]:
            raise QuizImportError(f"CORRECT must be one of the option letters, got '{item.correct}'.")
        return AnswerKey(correct_option_id=options[_OPTION_ORDER.index(letter)].id)
    if item.type is QuestionType.TRUE_FALSE:
        normalized = item.correct.strip().capitalize()
        if normalized not in TRUE_FALSE_OPTIONS:
            raise QuizImportError("CORRECT must be True or False for TRUE_FALSE questions.")
        return AnswerKey(reference_answer=normalized)
    return AnswerKey(reference_answer=item.correct.strip())


def _parse_positive_int(raw_value: str, label: str) -> int:
    if not raw_value:
        raise QuizImportError(f"{label} must include an integer value.")
    try:
        parsed_value = int(raw_value)
    except ValueError as exc:  # pragma: no cover - conversion error details unnecessary
        raise QuizImportError(f"{label} must be an integer.") from exc
    if parsed_value <= 0:
        raise QuizImportError(f"{label} must be a positive integer.")
    return parsed_value
