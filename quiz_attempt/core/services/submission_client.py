"""HTTP client for the scoring/data service."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaError

from quiz_attempt.constants.network_constants import (
    API_PREFIX,
    DEFAULT_SERVICE_URL,
    REQUEST_TIMEOUT_SECONDS,
)
from quiz_attempt.core.errors import LoadFailure, QuizServiceError, TransmissionError, ValidationError
from quiz_attempt.core.models import (
    AttemptContext,
    AttemptResult,
    Quiz,
    ScoreboardEntry,
    SubmittedAnswer,
)
from quiz_attempt.core.schemas import (
    AnswerPayload,
    AttemptResultPayload,
    QuizPayload,
    QuizSummaryPayload,
    ScoreboardEntryPayload,
    StartAttemptResponse,
    SubmitPayload,
)

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class QuizServiceClient:
    """Talks to the scoring service over HTTP.

    ``submit_attempt`` never retries on its own: a failed submission is
    reported to the caller, who decides whether the user may try again.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_SERVICE_URL,
        token: str | None = None,
        http_client: httpx.Client | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if http_client is None:
            http_client = httpx.Client(base_url=base_url, timeout=timeout)
        http_client.headers.update(headers)
        self._http = http_client

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "QuizServiceClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- Browsing ---

    def list_quizzes(self) -> list[QuizSummaryPayload]:
        data = self._request("GET", API_PREFIX, error_cls=LoadFailure)
        return self._parse_list(data, QuizSummaryPayload)

    def load_quiz(self, quiz_id: int) -> Quiz:
        data = self._request("GET", f"{API_PREFIX}/{quiz_id}", error_cls=LoadFailure)
        quiz = self._parse(data, QuizPayload, error_cls=LoadFailure).to_domain()
        if not quiz.questions:
            raise LoadFailure(f"Quiz {quiz_id} has no questions.")
        return quiz

    # --- Attempt lifecycle ---

    def start_attempt(self, quiz_id: int, user_name: str | None = None) -> AttemptContext:
        data = self._request("POST", f"{API_PREFIX}/{quiz_id}/start", error_cls=LoadFailure)
        started = self._parse(data, StartAttemptResponse, error_cls=LoadFailure)
        logger.info("Started attempt %d for quiz %d", started.id, started.quiz_id)
        return AttemptContext(attempt_id=started.id, quiz_id=started.quiz_id, user_name=user_name)

    def submit_attempt(
        self,
        attempt_id: int,
        answers: Sequence[SubmittedAnswer],
        elapsed_seconds: int,
    ) -> AttemptResult:
        payload = SubmitPayload(
            quiz_attempt_id=attempt_id,
            answers=[AnswerPayload.from_domain(answer) for answer in answers],
            time_taken_seconds=max(0, elapsed_seconds),
        )
        data = self._request(
            "POST",
            f"{API_PREFIX}/submit",
            json=payload.model_dump(by_alias=True),
            error_cls=ValidationError,
        )
        result = self._parse(data, AttemptResultPayload, error_cls=TransmissionError).to_domain()
        logger.info(
            "Attempt %d scored %d%% (%d/%d)",
            result.attempt_id,
            result.score,
            result.correct_answers,
            result.total_questions,
        )
        return result

    # --- Results ---

    def fetch_scoreboard(self, quiz_id: int) -> list[ScoreboardEntry]:
        data = self._request("GET", f"{API_PREFIX}/{quiz_id}/scoreboard", error_cls=ValidationError)
        return [entry.to_domain() for entry in self._parse_list(data, ScoreboardEntryPayload)]

    def fetch_attempt_history(self) -> list[AttemptResult]:
        data = self._request("GET", f"{API_PREFIX}/attempts", error_cls=ValidationError)
        return [attempt.to_domain() for attempt in self._parse_list(data, AttemptResultPayload)]

    # --- Transport helpers ---

    def _request(
        self,
        method: str,
        url: str,
        *,
        error_cls: type[QuizServiceError],
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Perform a request and decode its JSON body.

        Request failures (including undecodable bodies) and 5xx answers raise
        ``TransmissionError`` (``LoadFailure`` for load operations); other
        non-success statuses raise ``error_cls``.
        """
        try:
            response = self._http.request(method, url, json=json)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            if error_cls is LoadFailure:
                raise LoadFailure(f"Request to {url} failed: {exc}") from exc
            raise TransmissionError(f"Request to {url} failed: {exc}") from exc

        if response.is_error:
            detail = _error_detail(response)
            logger.warning("%s %s returned %d: %s", method, url, response.status_code, detail)
            if response.is_server_error and error_cls is not LoadFailure:
                raise TransmissionError(detail, status_code=response.status_code)
            raise error_cls(detail, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            if error_cls is LoadFailure:
                raise LoadFailure(f"Malformed response from {url}") from exc
            raise TransmissionError(f"Malformed response from {url}") from exc

    @staticmethod
    def _parse(data: Any, model: type[BaseModel], *, error_cls: type[QuizServiceError]) -> Any:
        try:
            return model.model_validate(data)
        except SchemaError as exc:
            raise error_cls(f"Unexpected response shape: {exc}") from exc

    @staticmethod
    def _parse_list(data: Any, model: type[_T]) -> list[_T]:
        try:
            return TypeAdapter(list[model]).validate_python(data)
        except SchemaError as exc:
            raise TransmissionError(f"Unexpected response shape: {exc}") from exc


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)
