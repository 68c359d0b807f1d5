"""FastAPI server exposing the scoring service to quiz clients."""

from __future__ import annotations

from fastapi import Depends, FastAPI, Header, HTTPException
import uvicorn

from quiz_attempt.constants.about import APP_NAME, APP_VERSION
from quiz_attempt.constants.network_constants import API_PREFIX, DEFAULT_HOST, DEFAULT_PORT
from quiz_attempt.core.markdown_math_renderer import renderer
from quiz_attempt.core.models import Quiz, SubmittedAnswer
from quiz_attempt.core.schemas import (
    AttemptResultPayload,
    OptionPayload,
    QuestionPayload,
    QuizPayload,
    QuizSummaryPayload,
    ScoreboardEntryPayload,
    StartAttemptResponse,
    SubmitPayload,
)
from quiz_attempt.server.scoring_service import ScoringService


def _get_scoring_service_dependency(scoring_service: ScoringService):
    def dependency() -> ScoringService:
        return scoring_service

    return dependency


def _current_user(authorization: str | None = Header(default=None)) -> str:
    """Resolve the caller from a bearer token. The token is used as the user name."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing bearer token.")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Malformed bearer token.")
    return token


def _quiz_summary(quiz: Quiz) -> QuizSummaryPayload:
    return QuizSummaryPayload(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        time_limit_minutes=quiz.time_limit_minutes,
        total_questions=len(quiz.questions),
    )


def _quiz_payload(quiz: Quiz) -> QuizPayload:
    return QuizPayload(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        time_limit_minutes=quiz.time_limit_minutes,
        questions=[
            QuestionPayload(
                id=question.id,
                question_text=question.text,
                type=question.type,
                points=question.points,
                options=[OptionPayload(id=option.id, option_text=option.text) for option in question.options],
                question_html=renderer.render_fragment(question.text),
            )
            for question in quiz.questions
        ],
    )


def create_api_app(scoring_service: ScoringService) -> FastAPI:
    """Create a FastAPI application wired to the provided scoring service."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    service_dep = _get_scoring_service_dependency(scoring_service)

    @app.get(API_PREFIX, response_model=list[QuizSummaryPayload])
    def list_quizzes(service: ScoringService = Depends(service_dep)) -> list[QuizSummaryPayload]:
        return [_quiz_summary(quiz) for quiz in service.get_quizzes()]

    # Declared before /{quiz_id} so "attempts" is not parsed as a quiz id.
    @app.get(f"{API_PREFIX}/attempts", response_model=list[AttemptResultPayload])
    def attempt_history(
        service: ScoringService = Depends(service_dep),
        user_name: str = Depends(_current_user),
    ) -> list[AttemptResultPayload]:
        return [
            AttemptResultPayload.from_domain(record.result)
            for record in service.get_attempt_history(user_name)
        ]

    @app.post(f"{API_PREFIX}/submit", response_model=AttemptResultPayload)
    def submit_attempt(
        payload: SubmitPayload,
        service: ScoringService = Depends(service_dep),
        user_name: str = Depends(_current_user),
    ) -> AttemptResultPayload:
        answers = [
            SubmittedAnswer(
                question_id=answer.question_id,
                selected_option_id=answer.selected_option_id,
                text_answer=answer.text_answer,
            )
            for answer in payload.answers
        ]
        try:
            result = service.submit_attempt(
                payload.quiz_attempt_id,
                user_name,
                answers,
                payload.time_taken_seconds,
            )
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return AttemptResultPayload.from_domain(result)

    @app.get(f"{API_PREFIX}/{{quiz_id}}", response_model=QuizPayload)
    def get_quiz(quiz_id: int, service: ScoringService = Depends(service_dep)) -> QuizPayload:
        try:
            return _quiz_payload(service.get_quiz(quiz_id))
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.post(f"{API_PREFIX}/{{quiz_id}}/start", status_code=201, response_model=StartAttemptResponse)
    def start_attempt(
        quiz_id: int,
        service: ScoringService = Depends(service_dep),
        user_name: str = Depends(_current_user),
    ) -> StartAttemptResponse:
        try:
            record = service.start_attempt(quiz_id, user_name)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return StartAttemptResponse(id=record.attempt_id, quiz_id=record.quiz_id)

    @app.get(f"{API_PREFIX}/{{quiz_id}}/scoreboard", response_model=list[ScoreboardEntryPayload])
    def get_scoreboard(quiz_id: int, service: ScoringService = Depends(service_dep)) -> list[ScoreboardEntryPayload]:
        try:
            entries = service.get_scoreboard(quiz_id)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return [ScoreboardEntryPayload.from_domain(entry) for entry in entries]

    return app


def run_api_server(
    scoring_service: ScoringService,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API until interrupted."""
    app = create_api_app(scoring_service)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()
