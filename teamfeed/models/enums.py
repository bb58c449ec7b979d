from enum import Enum


class FetchOutcome(str, Enum):
    OK = "ok"
    FAILED_WITH_FALLBACK = "failed-with-fallback"
    FAILED_EMPTY = "failed-empty"
