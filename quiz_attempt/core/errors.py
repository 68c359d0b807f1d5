"""Errors raised while talking to the scoring service."""

from __future__ import annotations


class QuizServiceError(Exception):
    """Base class for failures of a scoring service operation."""

    retryable: bool = False

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LoadFailure(QuizServiceError):
    """Raised when the quiz or the attempt context is missing or unreachable."""


class TransmissionError(QuizServiceError):
    """Raised when the service cannot be reached or answers with a server error."""

    retryable = True


class ValidationError(QuizServiceError):
    """Raised when the service rejects a payload, e.g. an attempt that is already finalized."""
