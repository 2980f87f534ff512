# src/decoding/errors.py

from enum import Enum


class ErrorKind(str, Enum):
    HTML_RESPONSE = "HTML_RESPONSE"
    NO_DATA_FIELD = "NO_DATA_FIELD"
    NO_CLOSING_BRACE = "NO_CLOSING_BRACE"
    PARSE_FAILURE = "PARSE_FAILURE"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    INVALID_INPUT = "INVALID_INPUT"


class ExtractionError(Exception):
    """Raised once every decoding strategy has been exhausted."""

    def __init__(self, kind: ErrorKind, message: str = None):
        self.kind = kind
        if message is None:
            message = kind.value
        super().__init__(f"[{kind.value}] {message}")
