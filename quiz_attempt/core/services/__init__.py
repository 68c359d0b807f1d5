"""Services making up the quiz attempt engine."""

from .answer_store import AnswerStore
from .attempt_session import AttemptSession, AttemptState, SubmissionTrigger
from .countdown_timer import CountdownTimer, countdown_sequence
from .leaderboard import LeaderboardRanker
from .quiz_catalog import QuizCatalog
from .score_engine import ScoreEngine, format_duration, round_half_up_percentage, score_band
from .submission_client import QuizServiceClient

__all__ = [
    "AnswerStore",
    "AttemptSession",
    "AttemptState",
    "CountdownTimer",
    "LeaderboardRanker",
    "QuizCatalog",
    "QuizServiceClient",
    "ScoreEngine",
    "SubmissionTrigger",
    "countdown_sequence",
    "format_duration",
    "round_half_up_percentage",
    "score_band",
]
