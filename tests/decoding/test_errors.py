# /tests/decoding/test_errors.py

import pytest

from src.decoding.errors import ErrorKind, ExtractionError


@pytest.mark.parametrize("kind", list(ErrorKind))
def test_message_carries_kind(kind):
    error = ExtractionError(kind)
    assert error.kind is kind
    assert str(error) == f"[{kind.value}] {kind.value}"


def test_custom_message():
    error = ExtractionError(ErrorKind.NO_CLOSING_BRACE, "No valid JSON end found in response")
    assert str(error) == "[NO_CLOSING_BRACE] No valid JSON end found in response"


def test_kinds_compare_as_strings():
    assert ErrorKind.RETRY_EXHAUSTED == "RETRY_EXHAUSTED"
