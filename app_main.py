"""Application entry point for the QuizAttempt scoring service."""

from __future__ import annotations

import argparse
from pathlib import Path

from quiz_attempt.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_attempt.constants.quiz_constants import DEFAULT_QUIZ_DIR
from quiz_attempt.core.quiz_importer import load_quizzes_from_directory
from quiz_attempt.server.api_server import run_api_server
from quiz_attempt.server.scoring_service import ScoringService
from quiz_attempt.utils.logging_config import configure_logging


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve timed quizzes and score attempts.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--quiz-dir", type=Path, default=DEFAULT_QUIZ_DIR)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Initialize logging, import the quiz files, and serve the API."""
    args = _parse_args(argv)
    logger = configure_logging()
    logger.info("Starting QuizAttempt scoring service…")

    scoring_service = ScoringService()
    imported = load_quizzes_from_directory(args.quiz_dir)
    scoring_service.add_quizzes(item.definition for item in imported)
    logger.info("Loaded %d quiz(zes) from %s", len(imported), args.quiz_dir)

    run_api_server(scoring_service, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
