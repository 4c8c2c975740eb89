import os
from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "production").lower()
DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"
QUEUE_MODE = os.getenv("QUEUE_MODE", "request")
VALID_QUEUE_MODES = ["redis", "request", "redislite"]
if QUEUE_MODE not in VALID_QUEUE_MODES:
    raise ValueError(
        f"Invalid QUEUE_MODE: {QUEUE_MODE}. Must be one of {VALID_QUEUE_MODES}"
    )

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./prwarden.db")

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
REDISLITE_DB_PATH = os.getenv("REDISLITE_DB_PATH", "/tmp/prwarden-redis.db")
LLM = os.getenv("LLM", "gemini")
LOG_DRIVER: str = os.getenv("LOG_DRIVER", "console")
LOG_FILE: str = os.getenv("LOG_FILE", "prwarden.log")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG").upper()
GITHUB_SECRET = os.getenv("GITHUB_SECRET")
GITHUB_TIMEOUT = int(os.getenv("GITHUB_TIMEOUT", 30))
API_KEY = os.getenv("API_KEY")
REVIEW_DRAFT_PRS = os.getenv("REVIEW_DRAFT_PRS", "false").lower() == "true"

# Review limits
MAX_FILES_PER_PR = int(os.getenv("MAX_FILES_PER_PR", 50))
MAX_FILE_CHANGES = int(os.getenv("MAX_FILE_CHANGES", 1000))
AI_MAX_ATTEMPTS = int(os.getenv("AI_MAX_ATTEMPTS", 5))


def _flag(name: str) -> bool:
    return os.getenv(name, "true").lower() != "false"


REVIEW_CRITERIA = {
    "check_security": _flag("CHECK_SECURITY"),
    "check_performance": _flag("CHECK_PERFORMANCE"),
    "check_readability": _flag("CHECK_READABILITY"),
    "check_best_practices": _flag("CHECK_BEST_PRACTICES"),
    "check_testing": _flag("CHECK_TESTING"),
    "check_documentation": _flag("CHECK_DOCUMENTATION"),
}
