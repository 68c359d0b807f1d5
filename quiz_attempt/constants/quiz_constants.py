"""Quiz-related constants shared across the session engine and the service."""

from pathlib import Path

TICK_INTERVAL_MS: int = 1000
TIME_WARNING_SECONDS: int = 60
SCORE_BAND_GOOD: int = 80
SCORE_BAND_FAIR: int = 60
TRUE_FALSE_OPTIONS: tuple[str, str] = ("True", "False")
DEFAULT_QUIZ_DIR: Path = Path(__file__).resolve().parent.parent / "data" / "quizzes"
