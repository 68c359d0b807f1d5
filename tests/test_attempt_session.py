import pytest

from conftest import FakeServiceClient
from quiz_attempt.core.errors import LoadFailure, TransmissionError, ValidationError
from quiz_attempt.core.models import Quiz, SelectedOption, SubmittedAnswer, TextAnswer
from quiz_attempt.core.services.attempt_session import AttemptSession, AttemptState, SubmissionTrigger
from quiz_attempt.core.services.countdown_timer import CountdownTimer


@pytest.fixture
def session(qapp, fake_client, attempt_context):
    session = AttemptSession(fake_client, attempt_context)
    assert session.load()
    yield session
    session.close()


def _expire(timer: CountdownTimer) -> None:
    while timer.is_running():
        timer.tick()


# --- Loading ---


def test_load_starts_countdown_from_time_limit(session, sample_quiz):
    assert session.state is AttemptState.IN_PROGRESS
    assert session.total_questions == 3
    assert session.remaining_seconds == sample_quiz.time_limit_minutes * 60
    assert session.current_question.id == 1


def test_missing_context_aborts(qapp, fake_client):
    session = AttemptSession(fake_client, None)
    aborted = []
    session.aborted.connect(aborted.append)

    assert session.load() is False
    assert session.state is AttemptState.ABORTED
    assert isinstance(session.last_error, LoadFailure)
    assert len(aborted) == 1


def test_unreachable_service_aborts(qapp, sample_quiz, attempt_context):
    client = FakeServiceClient(quiz=sample_quiz, load_error=TransmissionError("down"))
    session = AttemptSession(client, attempt_context)

    assert session.load() is False
    assert session.state is AttemptState.ABORTED
    assert isinstance(session.last_error, LoadFailure)


def test_quiz_without_questions_aborts(qapp, attempt_context):
    empty = Quiz(id=7, title="Empty", description="", time_limit_minutes=1)
    session = AttemptSession(FakeServiceClient(quiz=empty), attempt_context)

    assert session.load() is False
    assert session.state is AttemptState.ABORTED


def test_load_twice_is_an_error(session):
    with pytest.raises(RuntimeError):
        session.load()


def test_abort_in_progress_stops_timer(qapp, fake_client, attempt_context):
    timer = CountdownTimer()
    session = AttemptSession(fake_client, attempt_context, timer=timer)
    session.load()

    assert session.abort("navigated away")
    assert session.state is AttemptState.ABORTED
    assert not timer.is_running()
    timer.tick()
    assert fake_client.submissions == []


# --- Navigation ---


def test_navigation_is_bounded(session):
    assert session.navigate(-1) is False
    assert session.current_index == 0

    assert session.navigate(+1)
    assert session.navigate(+1)
    assert session.is_last_question()
    assert session.navigate(+1) is False
    assert session.current_index == 2

    assert session.navigate(-1)
    assert session.current_index == 1


def test_progress_percent_follows_index(session):
    assert session.progress_percent() == pytest.approx(100 / 3)
    session.navigate(+1)
    session.navigate(+1)
    assert session.progress_percent() == pytest.approx(100.0)


# --- Answers ---


def test_select_answer_builds_variant_per_question_type(session):
    assert session.select_answer(1, 11)
    assert session.select_answer(2, "False")
    assert session.select_answer(3, "Paris")
    assert session.select_answer(2, "True")

    assert session.answer_for(1) == SelectedOption(option_id=11)
    assert session.answer_for(2) == TextAnswer(text="True")
    assert session.answer_for(3) == TextAnswer(text="Paris")
    assert session.answered_count == 3


@pytest.mark.parametrize(
    ("question_id", "value"),
    [(1, 99), (1, "11"), (2, "maybe"), (3, 5), (42, "x")],
)
def test_invalid_answers_are_rejected(session, question_id, value):
    with pytest.raises(ValueError):
        session.select_answer(question_id, value)


def test_answers_are_frozen_after_completion(session, fake_client):
    session.select_answer(3, "Paris")
    session.submit()

    assert session.state is AttemptState.COMPLETED
    assert session.select_answer(3, "Lyon") is False
    assert session.answer_for(3) == TextAnswer(text="Paris")
    assert session.navigate(+1) is False


# --- Submission ---


def test_manual_submit_sends_answers_once_and_completes(qapp, fake_client, attempt_context, sample_quiz):
    timer = CountdownTimer()
    session = AttemptSession(fake_client, attempt_context, timer=timer)
    session.load()
    timer_ticks = 5
    for _ in range(timer_ticks):
        timer.tick()
    session.select_answer(1, 11)
    completed = []
    session.completed.connect(completed.append)

    assert session.submit()

    assert session.state is AttemptState.COMPLETED
    assert session.trigger is SubmissionTrigger.MANUAL
    assert len(fake_client.submissions) == 1
    attempt_id, answers, elapsed = fake_client.submissions[0]
    assert attempt_id == 41
    assert answers == [SubmittedAnswer(question_id=1, selected_option_id=11)]
    assert elapsed == timer_ticks
    assert session.result.total_questions == len(sample_quiz.questions)
    assert completed == [session.result]


def test_expiry_submits_with_full_elapsed_time(qapp, fake_client, attempt_context, sample_quiz):
    timer = CountdownTimer()
    session = AttemptSession(fake_client, attempt_context, timer=timer)
    session.load()

    _expire(timer)

    assert session.state is AttemptState.COMPLETED
    assert session.trigger is SubmissionTrigger.EXPIRY
    assert len(fake_client.submissions) == 1
    assert fake_client.submissions[0][2] == sample_quiz.time_limit_seconds


def test_manual_submit_then_late_tick_sends_once(qapp, fake_client, attempt_context):
    timer = CountdownTimer()
    session = AttemptSession(fake_client, attempt_context, timer=timer)
    session.load()

    assert session.submit()
    assert not timer.is_running()
    # A tick that was already queued when the timer stopped.
    timer.tick()
    timer.expired.emit()

    assert len(fake_client.submissions) == 1
    assert session.state is AttemptState.COMPLETED


def test_expiry_then_manual_submit_sends_once(qapp, fake_client, attempt_context):
    timer = CountdownTimer()
    session = AttemptSession(fake_client, attempt_context, timer=timer)
    session.load()

    _expire(timer)

    assert session.submit() is False
    assert len(fake_client.submissions) == 1


@pytest.mark.parametrize("second_trigger", ["manual", "expiry"])
def test_trigger_during_in_flight_submission_is_ignored(qapp, fake_client, attempt_context, second_trigger):
    timer = CountdownTimer()
    session = AttemptSession(fake_client, attempt_context, timer=timer)
    session.load()
    reentrant_results = []

    def trigger_again():
        if second_trigger == "manual":
            reentrant_results.append(session.submit())
        else:
            timer.expired.emit()

    fake_client.on_submit = trigger_again
    if second_trigger == "manual":
        _expire(timer)
    else:
        session.submit()

    assert len(fake_client.submissions) == 1
    assert reentrant_results == ([False] if second_trigger == "manual" else [])
    assert session.state is AttemptState.COMPLETED


def test_transmission_error_keeps_submitting_and_allows_manual_retry(session, fake_client):
    fake_client.submit_errors.append(TransmissionError("timeout"))
    failures = []
    session.submission_failed.connect(failures.append)
    session.select_answer(2, "True")

    assert session.submit()

    assert session.state is AttemptState.SUBMITTING
    assert isinstance(session.last_error, TransmissionError)
    assert failures == [session.last_error]
    assert session.can_retry
    # The guard stays claimed: a second submit does not transmit again.
    assert session.submit() is False
    assert len(fake_client.submissions) == 1

    assert session.retry_submission()

    assert session.state is AttemptState.COMPLETED
    assert len(fake_client.submissions) == 2
    first, second = fake_client.submissions
    assert first[2] == second[2]
    assert first[1] == second[1]
    assert session.last_error is None


def test_validation_error_is_not_retryable(session, fake_client):
    fake_client.submit_errors.append(ValidationError("already finalized", status_code=409))

    session.submit()

    assert session.state is AttemptState.SUBMITTING
    assert not session.can_retry
    with pytest.raises(RuntimeError):
        session.retry_submission()
    assert len(fake_client.submissions) == 1


def test_unexpected_client_error_does_not_leave_request_in_flight(session, fake_client):
    fake_client.submit_errors.append(KeyError("broken"))

    with pytest.raises(KeyError):
        session.submit()

    assert session.state is AttemptState.SUBMITTING
    assert not session.can_retry
    # Nothing is marked in flight, so the retry is judged on the error alone.
    with pytest.raises(RuntimeError):
        session.retry_submission()


def test_retry_without_pending_submission_is_an_error(session):
    with pytest.raises(RuntimeError):
        session.retry_submission()


def test_mismatched_question_total_is_reported(session, fake_client, sample_quiz):
    fake_client.quiz = Quiz(
        id=sample_quiz.id,
        title=sample_quiz.title,
        description="",
        time_limit_minutes=sample_quiz.time_limit_minutes,
        questions=sample_quiz.questions[:2],
    )

    session.submit()

    assert session.state is AttemptState.SUBMITTING
    assert isinstance(session.last_error, ValidationError)
    assert session.result is None


def test_time_running_low_flag(qapp, attempt_context, sample_quiz):
    timer = CountdownTimer()
    session = AttemptSession(FakeServiceClient(quiz=sample_quiz), attempt_context, timer=timer)
    session.load()

    assert not session.is_time_running_low()
    while timer.remaining > 60:
        timer.tick()
    assert session.is_time_running_low()
    session.close()


def test_state_changes_are_signalled(qapp, fake_client, attempt_context):
    session = AttemptSession(fake_client, attempt_context)
    states = []
    session.state_changed.connect(states.append)

    session.load()
    session.submit()

    assert states == [AttemptState.IN_PROGRESS, AttemptState.SUBMITTING, AttemptState.COMPLETED]
