import os


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


BONSAI_URL = os.getenv("BONSAI_URL", "http://localhost:9200").rstrip("/")
SEARCH_INDEX = os.getenv("SEARCH_INDEX", "restaurants")
SEARCH_TIMEOUT_SEC = _float_env("SEARCH_TIMEOUT", 10.0)
# 0 turns the per-token strategy off
MAX_QUERY_TOKENS = max(0, _int_env("SEARCH_MAX_QUERY_TOKENS", 8))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_PAGE_SIZE = 20
DEFAULT_SEARCH_RADIUS = "10km"
DEFAULT_NEARBY_RADIUS = "5km"
DEFAULT_NEARBY_LIMIT = 20
MAX_SUGGESTIONS = 8
MIN_SUGGESTION_QUERY_LEN = 2

POPULAR_SEARCHES = [
    "Pizza",
    "Burger",
    "Chinese",
    "Italian",
    "Fast food",
    "Healthy",
    "Dessert",
    "Coffee",
    "Sushi",
    "Mexican",
]
