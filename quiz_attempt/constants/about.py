"""Static metadata describing QuizAttempt."""

APP_NAME = "QuizAttempt"
APP_VERSION = "0.1"
