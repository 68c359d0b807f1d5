"""State machine for a single timed quiz attempt."""

from __future__ import annotations

from enum import Enum
import logging

from PySide6.QtCore import QObject, Signal

from quiz_attempt.constants.quiz_constants import TIME_WARNING_SECONDS
from quiz_attempt.core.errors import LoadFailure, QuizServiceError, ValidationError
from quiz_attempt.core.models import AnswerValue, AttemptContext, AttemptResult, Question, Quiz
from quiz_attempt.core.services.answer_store import AnswerStore
from quiz_attempt.core.services.countdown_timer import CountdownTimer
from quiz_attempt.core.services.submission_client import QuizServiceClient

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    LOADING = "LOADING"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTING = "SUBMITTING"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


class SubmissionTrigger(str, Enum):
    MANUAL = "manual"
    EXPIRY = "expiry"


class AttemptSession(QObject):
    """Owns the answers and countdown of one attempt and delivers them for scoring.

    Lifecycle: ``LOADING -> IN_PROGRESS -> SUBMITTING -> COMPLETED``, with
    ``ABORTED`` reachable from ``LOADING`` and ``IN_PROGRESS``.

    Manual submission and countdown expiry both try to claim the submission.
    The claim is a flag checked and set synchronously before the network call,
    so only the first trigger reaches the client; later triggers are ignored,
    including ones delivered while the first request is still in flight.

    ``load`` and submission call the client synchronously on the thread that
    owns the session. With the blocking ``QuizServiceClient`` this holds the
    Qt event loop, and with it tick delivery, for up to the client timeout.
    A trigger can still arrive during a request when the client itself
    processes events or emits signals, so the in-flight flag is kept.
    """

    state_changed = Signal(object)
    time_ticked = Signal(int)
    completed = Signal(object)
    submission_failed = Signal(object)
    aborted = Signal(object)

    def __init__(
        self,
        client: QuizServiceClient,
        context: AttemptContext | None,
        timer: CountdownTimer | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._client = client
        self._context = context
        self._timer = timer if timer is not None else CountdownTimer(parent=self)
        self._timer.ticked.connect(self.time_ticked.emit)
        self._timer.expired.connect(self._handle_expired)
        self._answers = AnswerStore()

        self._state: AttemptState = AttemptState.LOADING
        self._quiz: Quiz | None = None
        self._current_index: int = 0
        self._submission_claimed: bool = False
        self._in_flight: bool = False
        self._trigger: SubmissionTrigger | None = None
        self._elapsed_seconds: int = 0
        self._result: AttemptResult | None = None
        self._last_error: QuizServiceError | None = None

    # --- Loading ---

    def load(self) -> bool:
        """Fetch the quiz and start the countdown. Returns False when the attempt aborted."""
        if self._state is not AttemptState.LOADING:
            raise RuntimeError(f"Cannot load an attempt in state {self._state.value}.")
        if self._context is None:
            self._abort(LoadFailure("No active attempt to load."))
            return False
        try:
            quiz = self._client.load_quiz(self._context.quiz_id)
        except QuizServiceError as exc:
            failure = exc if isinstance(exc, LoadFailure) else LoadFailure(str(exc), exc.status_code)
            self._abort(failure)
            return False
        if not quiz.questions:
            self._abort(LoadFailure(f"Quiz {quiz.id} has no questions."))
            return False

        self._quiz = quiz
        self._current_index = 0
        self._timer.start(quiz.time_limit_seconds)
        self._set_state(AttemptState.IN_PROGRESS)
        return True

    def abort(self, reason: str = "Attempt abandoned.") -> bool:
        """Abandon the attempt before submission. Returns False once submission was claimed."""
        if self._state not in (AttemptState.LOADING, AttemptState.IN_PROGRESS):
            return False
        self._abort(LoadFailure(reason))
        return True

    def _abort(self, failure: LoadFailure) -> None:
        logger.warning("Attempt aborted: %s", failure)
        self._last_error = failure
        self._set_state(AttemptState.ABORTED)
        self.aborted.emit(failure)

    # --- Answering and navigation ---

    def select_answer(self, question_id: int, value: int | str) -> bool:
        """Capture an answer. Has no effect unless the attempt is in progress."""
        if self._state is not AttemptState.IN_PROGRESS or self._quiz is None:
            logger.debug("Ignoring answer for question %s in state %s", question_id, self._state.value)
            return False
        question = self._quiz.find_question(question_id)
        if question is None:
            raise ValueError(f"Question {question_id} is not part of quiz {self._quiz.id}.")
        return self._answers.set(question_id, question.make_answer(value))

    def answer_for(self, question_id: int) -> AnswerValue | None:
        return self._answers.get(question_id)

    def navigate(self, step: int) -> bool:
        """Move by ``step`` questions. Out-of-range moves leave the index unchanged."""
        if self._state is not AttemptState.IN_PROGRESS:
            return False
        target = self._current_index + step
        if not 0 <= target < self.total_questions:
            return False
        self._current_index = target
        return True

    # --- Submission ---

    def submit(self) -> bool:
        """Submit on explicit user action. Returns True if this call claimed the submission."""
        return self._claim_submission(SubmissionTrigger.MANUAL)

    def _handle_expired(self) -> None:
        self._claim_submission(SubmissionTrigger.EXPIRY)

    def _claim_submission(self, trigger: SubmissionTrigger) -> bool:
        if self._submission_claimed or self._state is not AttemptState.IN_PROGRESS:
            logger.debug("Ignoring %s submission in state %s", trigger.value, self._state.value)
            return False
        self._submission_claimed = True
        self._trigger = trigger
        self._timer.stop()
        self._answers.freeze()
        self._elapsed_seconds = self._timer.elapsed_seconds()
        logger.info(
            "Submitting attempt %d (%s) after %d seconds",
            self.attempt_id,
            trigger.value,
            self._elapsed_seconds,
        )
        self._set_state(AttemptState.SUBMITTING)
        self._transmit()
        return True

    def retry_submission(self) -> bool:
        """Re-send the frozen answers after a transmission failure.

        Only an explicit user action should call this. The elapsed time is the
        value frozen when the submission was first claimed.
        """
        if self._state is not AttemptState.SUBMITTING:
            raise RuntimeError("There is no pending submission to retry.")
        if self._in_flight:
            return False
        if not self.can_retry:
            raise RuntimeError("The last submission failure cannot be retried.")
        self._transmit()
        return True

    def _transmit(self) -> None:
        self._in_flight = True
        try:
            result = self._client.submit_attempt(
                self.attempt_id,
                self._answers.to_submission(),
                self._elapsed_seconds,
            )
        except QuizServiceError as exc:
            error: QuizServiceError | None = exc
        else:
            error = None
        finally:
            self._in_flight = False

        if error is not None:
            self._fail_submission(error)
            return
        if result.total_questions != self.total_questions:
            self._fail_submission(
                ValidationError(
                    f"Service scored {result.total_questions} questions, quiz has {self.total_questions}."
                )
            )
            return

        self._last_error = None
        self._result = result
        self._set_state(AttemptState.COMPLETED)
        self.completed.emit(result)

    def _fail_submission(self, error: QuizServiceError) -> None:
        logger.warning("Submission of attempt %d failed: %s", self.attempt_id, error)
        self._last_error = error
        self.submission_failed.emit(error)

    # --- State ---

    def _set_state(self, state: AttemptState) -> None:
        previous = self._state
        if previous is AttemptState.IN_PROGRESS:
            self._timer.stop()
        self._state = state
        logger.info("Attempt %s: %s -> %s", self._attempt_label(), previous.value, state.value)
        self.state_changed.emit(state)

    def _attempt_label(self) -> str:
        return str(self._context.attempt_id) if self._context is not None else "<none>"

    def close(self) -> None:
        """Release the countdown; call when the view owning the session goes away."""
        self._timer.stop()

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def context(self) -> AttemptContext | None:
        return self._context

    @property
    def attempt_id(self) -> int:
        if self._context is None:
            raise RuntimeError("Attempt has no context.")
        return self._context.attempt_id

    @property
    def quiz(self) -> Quiz | None:
        return self._quiz

    @property
    def total_questions(self) -> int:
        return len(self._quiz.questions) if self._quiz is not None else 0

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_question(self) -> Question | None:
        if self._quiz is None:
            return None
        return self._quiz.questions[self._current_index]

    def is_last_question(self) -> bool:
        return self.total_questions > 0 and self._current_index == self.total_questions - 1

    def progress_percent(self) -> float:
        if not self.total_questions:
            return 0.0
        return (self._current_index + 1) / self.total_questions * 100

    @property
    def remaining_seconds(self) -> int:
        return self._timer.remaining

    def is_time_running_low(self) -> bool:
        return self._state is AttemptState.IN_PROGRESS and self._timer.remaining <= TIME_WARNING_SECONDS

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed_seconds

    @property
    def answered_count(self) -> int:
        return self._answers.answered_count()

    @property
    def trigger(self) -> SubmissionTrigger | None:
        return self._trigger

    @property
    def result(self) -> AttemptResult | None:
        return self._result

    @property
    def last_error(self) -> QuizServiceError | None:
        return self._last_error

    @property
    def can_retry(self) -> bool:
        return (
            self._state is AttemptState.SUBMITTING
            and not self._in_flight
            and self._last_error is not None
            and self._last_error.retryable
        )
