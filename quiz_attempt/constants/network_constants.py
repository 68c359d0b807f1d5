"""Network configuration constants for the quiz application."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 9090
DEFAULT_SERVICE_URL: str = "http://localhost:9090"
API_PREFIX: str = "/api/quiz"
REQUEST_TIMEOUT_SECONDS: float = 10.0
